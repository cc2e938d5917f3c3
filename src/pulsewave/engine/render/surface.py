"""
どこで: `pulsewave.engine.render.surface`。
何を: 描画器が使う最小ラスタ API（`RasterSurface`）と、その Pillow 実装 `PillowSurface`。
なぜ: 対話/バッチの両ホストが同じ実装でラスタ化し、同一パラメータから同一ピクセルを得るため。

`PillowSurface` の要点:
- 下地は RGB。`ImageDraw.Draw(image, "RGBA")` のブレンド描画で半透明の線/矩形を重ねる。
- 発光（canvas の shadowBlur 相当）は小領域の RGBA レイヤにガウスぼかしを掛けて合成する。
- 座標はピクセル、y は下向き（canvas と同じ）。
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

from ...common.errors import RenderTargetError
from ...util.color import to_u8_rgba, with_alpha
from ...util.fonts import load_mono_font

Point = tuple[float, float]


class RasterSurface(Protocol):
    """描画器が依存するラスタ操作の最小集合。"""

    width: int
    height: int

    def clear(self, color: object) -> None: ...

    def stroke_path(self, points: Sequence[Point] | np.ndarray, color: object, width: int = 1) -> None: ...

    def fill_arc(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: object,
        *,
        glow: float = 0.0,
        glow_color: object | None = None,
    ) -> None: ...

    def fill_rect(self, x: float, y: float, w: float, h: float, color: object) -> None: ...

    def linear_gradient_fill(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        color_from: object,
        color_to: object,
    ) -> None: ...

    def measure_text(self, text: str, font_size: int) -> float: ...

    def fill_text(
        self,
        x: float,
        y: float,
        text: str,
        color: object,
        font_size: int,
        *,
        glow: float = 0.0,
        glow_color: object | None = None,
    ) -> None: ...

    def to_array(self) -> np.ndarray: ...


class PillowSurface:
    """Pillow 画像を描画先とする `RasterSurface` 実装。"""

    def __init__(self, width: int, height: int, background: object = "black") -> None:
        w, h = int(width), int(height)
        if w <= 0 or h <= 0:
            raise RenderTargetError(f"surface size must be positive, got {w}x{h}")
        self.width = w
        self.height = h
        self.image = Image.new("RGB", (w, h), to_u8_rgba(background)[:3])
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    # ---- basic ops ----
    def clear(self, color: object) -> None:
        self.image.paste(to_u8_rgba(color)[:3], (0, 0, self.width, self.height))

    def stroke_path(self, points: Sequence[Point] | np.ndarray, color: object, width: int = 1) -> None:
        pts = [(float(x), float(y)) for x, y in points]
        if len(pts) < 2:
            return
        self._draw.line(pts, fill=to_u8_rgba(color), width=int(width))

    def fill_rect(self, x: float, y: float, w: float, h: float, color: object) -> None:
        if w <= 0 or h <= 0:
            return
        x0, y0 = int(round(x)), int(round(y))
        x1, y1 = int(round(x + w)) - 1, int(round(y + h)) - 1
        if x1 < x0 or y1 < y0:
            return
        self._draw.rectangle((x0, y0, x1, y1), fill=to_u8_rgba(color))

    def fill_arc(
        self,
        cx: float,
        cy: float,
        radius: float,
        color: object,
        *,
        glow: float = 0.0,
        glow_color: object | None = None,
    ) -> None:
        rgba = to_u8_rgba(color)
        if glow > 0:
            self._glow_ellipse(cx, cy, radius, glow, glow_color if glow_color is not None else color)
        r = float(radius)
        self._draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=rgba)

    def linear_gradient_fill(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        color_from: object,
        color_to: object,
    ) -> None:
        """左端 `color_from` → 右端 `color_to` の水平グラデーションで矩形を塗る。"""
        x0, y0 = max(0, int(round(x))), max(0, int(round(y)))
        x1 = min(self.width, int(round(x + w)))
        y1 = min(self.height, int(round(y + h)))
        if x1 <= x0 or y1 <= y0:
            return
        c0 = np.asarray(to_u8_rgba(color_from), dtype=np.float32)
        c1 = np.asarray(to_u8_rgba(color_to), dtype=np.float32)
        cols = x1 - x0
        t = np.linspace(0.0, 1.0, cols, dtype=np.float32) if cols > 1 else np.ones(1, np.float32)
        row = (c0[None, :] * (1.0 - t[:, None]) + c1[None, :] * t[:, None]).round().astype(np.uint8)
        layer = np.broadcast_to(row[None, :, :], (y1 - y0, cols, 4))
        self._composite(Image.fromarray(np.ascontiguousarray(layer)), (x0, y0))

    # ---- text ----
    def measure_text(self, text: str, font_size: int) -> float:
        return float(self._draw.textlength(text, font=load_mono_font(int(font_size))))

    def fill_text(
        self,
        x: float,
        y: float,
        text: str,
        color: object,
        font_size: int,
        *,
        glow: float = 0.0,
        glow_color: object | None = None,
    ) -> None:
        """`(x, y)` を左端・ベースラインとして文字列を描く。"""
        font = load_mono_font(int(font_size))
        if glow > 0:
            pad = int(np.ceil(glow)) * 2
            left, top, right, bottom = self._draw.textbbox((x, y), text, font=font, anchor="ls")
            ox, oy = int(left) - pad, int(top) - pad
            layer = Image.new("RGBA", (int(right - left) + 2 * pad, int(bottom - top) + 2 * pad), (0, 0, 0, 0))
            ImageDraw.Draw(layer).text(
                (x - ox, y - oy), text, font=font, anchor="ls",
                fill=to_u8_rgba(glow_color if glow_color is not None else color),
            )
            self._composite(layer.filter(ImageFilter.GaussianBlur(glow / 2.0)), (ox, oy))
        self._draw.text((x, y), text, font=font, anchor="ls", fill=to_u8_rgba(color))

    # ---- output ----
    def to_array(self) -> np.ndarray:
        """現在の内容を H×W×3 uint8 配列（コピー）で返す。"""
        return np.array(self.image, dtype=np.uint8)

    # ---- internal helpers ----
    def _glow_ellipse(self, cx: float, cy: float, radius: float, blur: float, color: object) -> None:
        pad = int(np.ceil(blur)) * 2
        size = int(np.ceil(radius)) * 2 + 2 * pad
        ox = int(np.floor(cx)) - size // 2
        oy = int(np.floor(cy)) - size // 2
        layer = Image.new("RGBA", (size, size), (0, 0, 0, 0))
        lx, ly = cx - ox, cy - oy
        ImageDraw.Draw(layer).ellipse(
            (lx - radius, ly - radius, lx + radius, ly + radius), fill=with_alpha(color, 1.0)
        )
        self._composite(layer.filter(ImageFilter.GaussianBlur(blur / 2.0)), (ox, oy))

    def _composite(self, layer: Image.Image, origin: tuple[int, int]) -> None:
        """RGBA レイヤを `origin` に重ねる（サーフェス外は切り捨て）。"""
        ox, oy = origin
        lw, lh = layer.size
        x0, y0 = max(0, ox), max(0, oy)
        x1, y1 = min(self.width, ox + lw), min(self.height, oy + lh)
        if x1 <= x0 or y1 <= y0:
            return
        part = layer.crop((x0 - ox, y0 - oy, x1 - ox, y1 - oy))
        region = self.image.crop((x0, y0, x1, y1)).convert("RGBA")
        region.alpha_composite(part)
        self.image.paste(region.convert("RGB"), (x0, y0))


__all__ = ["RasterSurface", "PillowSurface"]
