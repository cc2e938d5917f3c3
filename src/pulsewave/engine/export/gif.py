"""
どこで: `pulsewave.engine.export.gif`。
何を: 合成済みフレームを受け取り、アニメーション GIF（バイト列またはファイル）へ確定するエンコーダ。
なぜ: 録画パイプラインから「1 フレーム追加 → 最後に確定」の単純な契約で GIF を得るため。

方針:
- 依存は `imageio`（v3 API, Pillow プラグイン）と Pillow。見つからない場合は生成時に
  `ExporterUnavailableError` を送出し、黙って劣化させない。
- 各フレームは追加時に縮小/レターボックス/減色を済ませ、確定時に一括で書き出す。
- 出力寸法は最初のフレームで固定する。録画中にサーフェスが変わっても、以後のフレームは
  その寸法へレターボックスして揃える。
- ファイル出力は `.part` に書いてから置き換える（途中失敗で壊れたファイルを残さない）。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from ...common.errors import ExporterUnavailableError
from ...util.color import to_u8_rgb

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GifExportParams:
    """アニメーション GIF の書き出し設定。

    Parameters
    ----------
    seconds : float
        録画秒数。フレーム数は `ceil(seconds * fps)`（最低 1）。
    fps : int
        取り込みレート。1 フレームの表示時間は `round(1000 / fps)` ms。
    quality : int
        1（最良）〜30（最粗）。パレット色数 `clamp(256 - (quality - 1) * 8, 16, 256)` に写像する。
    max_width, max_height : int | None
        出力の最大寸法。None はその軸を制限しない。
    background : str
        レターボックスの塗り色（`contain=True` のとき）。
    contain : bool
        True: 縦横比を保って枠内に収め、余白を `background` で塗る。False: 枠へ引き伸ばす。
    dither : bool
        減色時に Floyd–Steinberg ディザを使うか。
    """

    seconds: float = 5.0
    fps: int = 30
    quality: int = 10
    max_width: int | None = None
    max_height: int | None = None
    background: str = "black"
    contain: bool = True
    dither: bool = False

    @property
    def total_frames(self) -> int:
        return total_frames(self.seconds, self.fps)

    @property
    def frame_delay_ms(self) -> int:
        return frame_delay_ms(self.fps)

    @property
    def palette_colors(self) -> int:
        q = max(1, min(30, int(self.quality)))
        return max(16, min(256, 256 - (q - 1) * 8))


def total_frames(seconds: float, fps: int) -> int:
    return max(1, int(math.ceil(float(seconds) * int(fps) - 1e-9)))


def frame_delay_ms(fps: int) -> int:
    return int(round(1000.0 / max(1, int(fps))))


def _load_imageio() -> Any:
    """imageio v3 API を遅延 import する（無ければ即座に拒否）。"""
    try:
        import imageio.v3 as iio
    except ImportError as e:
        raise ExporterUnavailableError(
            "GIF exporter not available: install 'imageio' and 'pillow'"
        ) from e
    return iio


def fit_frame(
    pixels: np.ndarray,
    max_width: int | None,
    max_height: int | None,
    *,
    contain: bool = True,
    background: object = "black",
) -> np.ndarray:
    """最大寸法に合わせて縮小する（枠内に収まっていれば無変換）。

    片方の軸だけ指定された場合は縦横比を保って縮小する（余白なし）。
    """
    from PIL import Image

    h, w = int(pixels.shape[0]), int(pixels.shape[1])
    box_w = int(max_width) if max_width else w
    box_h = int(max_height) if max_height else h
    if w <= box_w and h <= box_h:
        return pixels
    if max_width and max_height:
        if contain:
            return letterbox_frame(pixels, box_w, box_h, background)
        return np.asarray(Image.fromarray(pixels).resize((box_w, box_h), Image.Resampling.LANCZOS))
    ratio = box_w / w if max_width else box_h / h
    new_w = max(1, int(round(w * ratio)))
    new_h = max(1, int(round(h * ratio)))
    return np.asarray(Image.fromarray(pixels).resize((new_w, new_h), Image.Resampling.LANCZOS))


def letterbox_frame(
    pixels: np.ndarray, width: int, height: int, background: object = "black"
) -> np.ndarray:
    """縦横比を保って `width`×`height` にちょうど収め、余白を `background` で塗る。"""
    from PIL import Image

    h, w = int(pixels.shape[0]), int(pixels.shape[1])
    if (w, h) == (int(width), int(height)):
        return pixels
    ratio = min(width / w, height / h)
    new_w = max(1, min(int(width), int(round(w * ratio))))
    new_h = max(1, min(int(height), int(round(h * ratio))))
    scaled = Image.fromarray(pixels).resize((new_w, new_h), Image.Resampling.LANCZOS)
    canvas = Image.new("RGB", (int(width), int(height)), to_u8_rgb(background))
    canvas.paste(scaled, ((int(width) - new_w) // 2, (int(height) - new_h) // 2))
    return np.asarray(canvas)


def quantize_frame(pixels: np.ndarray, colors: int, *, dither: bool = False) -> np.ndarray:
    """パレット `colors` 色へ減色した RGB 配列を返す。"""
    from PIL import Image

    img = Image.fromarray(pixels)
    mode = Image.Dither.FLOYDSTEINBERG if dither else Image.Dither.NONE
    q = img.quantize(colors=int(colors), method=Image.Quantize.MEDIANCUT, dither=mode)
    return np.asarray(q.convert("RGB"))


class GifEncoder:
    """フレームを溜めて `finish()` で GIF を確定する同期エンコーダ。

    `path` を省略すると `finish()` は GIF のバイト列を返す。指定時は書き出したパスを返す。
    """

    def __init__(self, params: GifExportParams | None = None, path: Path | str | None = None) -> None:
        self._iio = _load_imageio()
        self.params = params if params is not None else GifExportParams()
        self.path = Path(path) if path is not None else None
        self._frames: list[np.ndarray] = []
        self._delays: list[int] = []
        # 最初のフレームの寸法（以後のフレームはこの寸法へ揃える）
        self._source_size: tuple[int, int] | None = None
        self._finished = False

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def source_size(self) -> tuple[int, int] | None:
        """最初に受け取ったフレームの (幅, 高さ)。"""
        return self._source_size

    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None:
        if self._finished:
            raise RuntimeError("encoder already finished")
        p = self.params
        arr = np.ascontiguousarray(pixels[..., :3], dtype=np.uint8)
        size = (int(arr.shape[1]), int(arr.shape[0]))
        if self._source_size is None:
            self._source_size = size
        elif size != self._source_size:
            # 録画中のリサイズ: 開始時の寸法へレターボックスして揃える
            logger.debug("frame size %s differs from %s; letterboxing", size, self._source_size)
            arr = letterbox_frame(arr, *self._source_size, background=p.background)
        arr = fit_frame(arr, p.max_width, p.max_height, contain=p.contain, background=p.background)
        arr = quantize_frame(arr, p.palette_colors, dither=p.dither)
        self._frames.append(arr)
        self._delays.append(int(delay_ms))

    def finish(self) -> Path | bytes:
        """溜めたフレームを書き出す。フレームが無ければ `ValueError`。"""
        if not self._frames:
            raise ValueError("no frames to encode")
        stack = np.stack(self._frames)
        try:
            if self.path is None:
                data = self._iio.imwrite(
                    "<bytes>", stack, extension=".gif", duration=list(self._delays), loop=0
                )
                result: Path | bytes = bytes(data)
            else:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                part = self.path.with_name(self.path.name + ".part")
                try:
                    self._iio.imwrite(
                        part, stack, extension=".gif", duration=list(self._delays), loop=0
                    )
                    part.replace(self.path)
                finally:
                    if part.exists():
                        part.unlink()
                result = self.path
        finally:
            self._finished = True
            self._frames.clear()
            self._delays.clear()
        logger.info("GIF encoded: %s frames=%d", self.path or "<bytes>", len(stack))
        return result

    def abort(self) -> None:
        """溜めたフレームを破棄する（以後の `finish()` は失敗する）。"""
        self._frames.clear()
        self._delays.clear()
        self._source_size = None


__all__ = [
    "GifExportParams",
    "GifEncoder",
    "fit_frame",
    "letterbox_frame",
    "quantize_frame",
    "total_frames",
    "frame_delay_ms",
]
