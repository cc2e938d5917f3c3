"""
どこで: `pulsewave.util.color`。
何を: 色指定の正規化/変換（CSS 色名, Hex, `rgb()/rgba()`, RGBA タプル）を一元化。
なぜ: 描画/エクスポート全体で同一の受理仕様とエラーメッセージを提供するため。
"""

from __future__ import annotations

import re
from typing import Sequence

from PIL import ImageColor

RGBA8 = tuple[int, int, int, int]

_FUNC_RE = re.compile(r"^\s*rgba?\(\s*([^)]*)\)\s*$", re.IGNORECASE)


def _clamp8(x: float) -> int:
    return max(0, min(255, int(round(x))))


def _parse_css_func(s: str) -> RGBA8 | None:
    """`rgb(r,g,b)` / `rgba(r,g,b,a)` を解釈する（a は 0–1 の CSS 流儀）。"""
    m = _FUNC_RE.match(s)
    if m is None:
        return None
    parts = [p.strip() for p in m.group(1).split(",")]
    if len(parts) not in (3, 4):
        raise ValueError(f"invalid css color: '{s}'")
    try:
        r, g, b = (float(p) for p in parts[:3])
        a = float(parts[3]) if len(parts) == 4 else 1.0
    except ValueError as e:
        raise ValueError(f"invalid css color: '{s}'") from e
    return (_clamp8(r), _clamp8(g), _clamp8(b), _clamp8(a * 255.0))


def to_u8_rgba(value: object) -> RGBA8:
    """色を RGBA(0–255) へ変換する。

    - 受理: CSS 色名（"lime" など）, "#RRGGBB[AA]", "rgb()/rgba()", (r,g,b[,a]) 0–255
    - 返値: (r,g,b,a) 0–255
    """
    if isinstance(value, str):
        parsed = _parse_css_func(value)
        if parsed is not None:
            return parsed
        try:
            rgb = ImageColor.getrgb(value.strip())
        except ValueError as e:
            raise ValueError(f"unknown color: '{value}'") from e
        if len(rgb) == 4:
            return (int(rgb[0]), int(rgb[1]), int(rgb[2]), int(rgb[3]))
        return (int(rgb[0]), int(rgb[1]), int(rgb[2]), 255)
    if isinstance(value, (list, tuple)):
        seq: Sequence[float] = value
        if len(seq) not in (3, 4):
            raise ValueError("color tuple/list must be length 3 or 4")
        a = seq[3] if len(seq) == 4 else 255
        return (_clamp8(seq[0]), _clamp8(seq[1]), _clamp8(seq[2]), _clamp8(a))
    raise ValueError(f"unsupported color type: {type(value)!r}")


def to_u8_rgb(value: object) -> tuple[int, int, int]:
    """色を RGB(0–255) へ変換する（アルファは捨てる）。"""
    r, g, b, _a = to_u8_rgba(value)
    return (r, g, b)


def with_alpha(value: object, alpha: float) -> RGBA8:
    """色のアルファを 0–1 の値で置き換える。"""
    r, g, b, _a = to_u8_rgba(value)
    return (r, g, b, _clamp8(float(alpha) * 255.0))


def to_svg_color(value: object) -> tuple[str, float]:
    """SVG 用に `#rrggbb` と opacity(0–1) の組へ変換する。"""
    r, g, b, a = to_u8_rgba(value)
    return f"#{r:02x}{g:02x}{b:02x}", round(a / 255.0, 3)


__all__ = ["to_u8_rgba", "to_u8_rgb", "with_alpha", "to_svg_color"]
