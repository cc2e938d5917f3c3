"""
どこで: `pulsewave.engine.core.state`。
何を: セッション単位の可変描画状態 `RenderState`（寸法/tick/走査位置/ユーザー毎バッファ）。
なぜ: モジュール大域変数を使わず、1 つのホストが明示的に所有して各処理へ受け渡すため。

リサイズ/データセット差し替え時は `reset()` でバッファと走査位置を完全に初期化する。
単一スレッドで tick 間に実行されるため、ロックは持たない。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ...common.errors import RenderTargetError
from ..signal.buffers import PointBufferManager
from .config import DEFAULT_CONFIG, RenderConfig

logger = logging.getLogger(__name__)


@dataclass
class RenderState:
    surface_width: int
    surface_height: int
    track_height: int = 0
    tick: int = 0
    scan_offset: int = 0
    buffers: PointBufferManager = field(default_factory=PointBufferManager)
    # 録画パイプラインの排他（同時に 1 本まで）
    recording_owner: object | None = field(default=None, repr=False)

    @classmethod
    def create(
        cls, width: int, height: int, config: RenderConfig = DEFAULT_CONFIG
    ) -> "RenderState":
        """寸法を検証して状態を生成する。不正なら何も作らずに `RenderTargetError`。"""
        w, h = _validate_size(width, height)
        return cls(
            surface_width=max(config.min_surface_width, w),
            surface_height=max(config.min_surface_height, h),
        )

    def reset(self) -> None:
        """バッファ破棄 + 走査位置 0。tick は単調のまま保持する。"""
        self.buffers.reset()
        self.scan_offset = 0

    def resize(self, width: int, height: int, config: RenderConfig = DEFAULT_CONFIG) -> bool:
        """寸法を更新し、変化があれば `reset()` する。変化の有無を返す。"""
        w, h = _validate_size(width, height)
        w = max(config.min_surface_width, w)
        h = max(config.min_surface_height, h)
        if w == self.surface_width and h == self.surface_height:
            return False
        logger.debug("resize %dx%d -> %dx%d", self.surface_width, self.surface_height, w, h)
        self.surface_width = w
        self.surface_height = h
        self.reset()
        return True


def _validate_size(width: object, height: object) -> tuple[int, int]:
    try:
        w = int(width)  # type: ignore[arg-type]
        h = int(height)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise RenderTargetError(f"invalid surface size: {width!r}x{height!r}") from e
    if w <= 0 or h <= 0:
        raise RenderTargetError(f"surface size must be positive, got {w}x{h}")
    return w, h


__all__ = ["RenderState"]
