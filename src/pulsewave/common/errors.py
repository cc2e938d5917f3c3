"""
どこで: `pulsewave.common.errors`。
何を: ライブラリが送出する例外型の階層を定義する。
なぜ: 呼び出し側が「描画先不正」「エクスポータ不在」「録画中断/失敗」を区別して扱えるようにするため。
"""

from __future__ import annotations


class PulsewaveError(Exception):
    """pulsewave が送出する例外の基底。"""


class RenderTargetError(PulsewaveError):
    """描画先（サーフェス/ウィンドウ）が存在しない、または寸法が不正。"""


class ExporterUnavailableError(PulsewaveError):
    """エンコーダ依存（imageio/Pillow）が利用できない。"""


class RecordingBusyError(PulsewaveError):
    """同一 RenderState に対して録画が既に進行中。"""


class RecordingAbortedError(PulsewaveError):
    """録画が外部から中断された。"""


class RecordingFailedError(PulsewaveError):
    """エンコーダの失敗により録画が終了した（`__cause__` に原因）。"""


class UserNotFoundError(PulsewaveError):
    """アクティビティ提供元がユーザーを見つけられなかった。"""


__all__ = [
    "PulsewaveError",
    "RenderTargetError",
    "ExporterUnavailableError",
    "RecordingBusyError",
    "RecordingAbortedError",
    "RecordingFailedError",
    "UserNotFoundError",
]
