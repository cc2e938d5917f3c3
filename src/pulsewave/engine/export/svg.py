"""
どこで: `pulsewave.engine.export.svg`。
何を: 現在の描画状態（バッファ/走査位置/データセット）から、SMIL アニメーション付きの SVG を組み立てる。
なぜ: ラスタ GIF より軽量で拡大に強いスナップショットを、追加の依存なしに出力するため。

構成（描画順はラスタと同じ）:
- 背景 `<rect>` → グリッド `<g>` → ユーザー毎の折れ線 + 発光点 → 走査帯 → ステータスパネル
- 発光は `feGaussianBlur` フィルタ、走査帯は `linearGradient` + `<animate>` で表現する。
- 波形アニメーション:
  - `none`   : 静止画
  - `dash`   : `stroke-dasharray` と `stroke-dashoffset` の `<animate>` で描き込みを繰り返す
  - `marquee`: 描画域で clip し、2 枚並べた折れ線を `<animateTransform>` で平行移動させる
- 全アニメーションは `repeatCount="indefinite"`。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

import numpy as np

from ...util.color import to_svg_color
from ...util.fonts import load_mono_font
from ..core.config import RenderConfig
from ..core.state import RenderState
from ..render.layout import Layout
from ..render.overlay import OverlayRow, status_rows
from ..render.renderer import FrameRenderer

logger = logging.getLogger(__name__)

WAVE_MODES = ("none", "dash", "marquee")
WAVE_DIRECTIONS = ("left", "right")


@dataclass(frozen=True)
class SvgExportParams:
    """SVG スナップショットの書き出し設定。

    属性:
        background: 背景色。
        grid: グリッドを描くか。
        grid_step: グリッド間隔 [px]。None でラスタと同じ自動間隔。
        stroke_width: 波形の線幅 [px]。
        animate_scan_bar: 走査帯を左→右へ動かすか（False は現在位置で静止）。
        scan_period_seconds: 走査帯が描画域を 1 往復（片道）する秒数。
        animate_wave_mode: "none" | "dash" | "marquee"。
        wave_direction: "left" | "right"（marquee/dash の流れる向き）。
        wave_period_seconds: 波形アニメーション 1 周期の秒数。
    """

    background: str = "black"
    grid: bool = True
    grid_step: int | None = None
    stroke_width: float = 2.0
    animate_scan_bar: bool = True
    scan_period_seconds: float = 4.0
    animate_wave_mode: str = "marquee"
    wave_direction: str = "left"
    wave_period_seconds: float = 6.0

    def __post_init__(self) -> None:
        if self.animate_wave_mode not in WAVE_MODES:
            raise ValueError(
                f"animate_wave_mode must be one of {WAVE_MODES}, got {self.animate_wave_mode!r}"
            )
        if self.wave_direction not in WAVE_DIRECTIONS:
            raise ValueError(
                f"wave_direction must be one of {WAVE_DIRECTIONS}, got {self.wave_direction!r}"
            )
        if self.scan_period_seconds <= 0 or self.wave_period_seconds <= 0:
            raise ValueError("animation periods must be positive")


def _n(v: float) -> str:
    """座標の数値表記（小数 2 桁, 末尾ゼロ省略）。"""
    s = f"{float(v):.2f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def _paint(attr: str, color: object) -> str:
    """`fill="#rrggbb" fill-opacity="a"` 形式の属性列（不透明なら opacity を省く）。"""
    hex_, opacity = to_svg_color(color)
    out = f'{attr}="{hex_}"'
    if opacity < 1.0:
        out += f' {attr}-opacity="{_n(opacity)}"'
    return out


def _points(xs: np.ndarray, ys: np.ndarray) -> str:
    return " ".join(f"{_n(x)},{_n(y)}" for x, y in zip(xs, ys))


def _track_values(state: RenderState, username: str, width: int, midline: float) -> np.ndarray:
    """バッファが描画幅ぶん溜まっていればその値、無ければ中線の平坦線。"""
    buf = state.buffers.get(username)
    if buf is not None and len(buf) == width:
        return buf.values()
    return np.full(width, float(midline), dtype=np.float64)


def _polyline_length(xs: np.ndarray, ys: np.ndarray) -> float:
    if xs.shape[0] < 2:
        return 0.0
    return float(np.hypot(np.diff(xs), np.diff(ys)).sum())


def _defs(cfg: RenderConfig, params: SvgExportParams) -> list[str]:
    beam_hex, _ = to_svg_color(cfg.beam_color)
    glow_std = _n(cfg.glow_blur / 2.0)
    diag_std = _n(cfg.diag_glow / 2.0)
    return [
        "<defs>",
        f'<filter id="glow" x="-200%" y="-200%" width="500%" height="500%">'
        f'<feGaussianBlur in="SourceGraphic" stdDeviation="{glow_std}" result="blur"/>'
        '<feMerge><feMergeNode in="blur"/><feMergeNode in="SourceGraphic"/></feMerge>'
        "</filter>",
        f'<filter id="textGlow" x="-20%" y="-50%" width="140%" height="200%">'
        f'<feGaussianBlur in="SourceGraphic" stdDeviation="{diag_std}" result="blur"/>'
        '<feMerge><feMergeNode in="blur"/><feMergeNode in="SourceGraphic"/></feMerge>'
        "</filter>",
        '<linearGradient id="scanGrad" x1="0" y1="0" x2="1" y2="0">'
        f'<stop offset="0" stop-color="{beam_hex}" stop-opacity="0"/>'
        f'<stop offset="1" stop-color="{beam_hex}" stop-opacity="{_n(cfg.beam_opacity)}"/>'
        "</linearGradient>",
        "</defs>",
    ]


def _grid(width: int, height: int, step: int, cfg: RenderConfig) -> list[str]:
    lines = [f'<g {_paint("stroke", cfg.grid_color)} stroke-width="{cfg.grid_line_width}">']
    for x in range(0, width + 1, step):
        lines.append(f'<line x1="{x}" y1="0" x2="{x}" y2="{height}"/>')
    for y in range(0, height + 1, step):
        lines.append(f'<line x1="0" y1="{y}" x2="{width}" y2="{y}"/>')
    lines.append("</g>")
    return lines


def _wave(
    idx: int,
    xs: np.ndarray,
    ys: np.ndarray,
    color: str,
    layout: Layout,
    params: SvgExportParams,
) -> list[str]:
    stroke = _paint("stroke", color)
    common = f'fill="none" {stroke} stroke-width="{_n(params.stroke_width)}" stroke-linejoin="round"'
    pts = _points(xs, ys)
    dur = f"{_n(params.wave_period_seconds)}s"
    mode = params.animate_wave_mode

    if mode == "dash":
        length = max(1.0, _polyline_length(xs, ys))
        start = length if params.wave_direction == "left" else -length
        return [
            f'<polyline class="wave" data-user-index="{idx}" points="{pts}" {common} '
            f'stroke-dasharray="{_n(length)} {_n(length)}" stroke-dashoffset="{_n(start)}">',
            f'<animate attributeName="stroke-dashoffset" from="{_n(start)}" to="0" '
            f'dur="{dur}" repeatCount="indefinite"/>',
            "</polyline>",
        ]

    if mode == "marquee":
        shift = layout.plot_width if params.wave_direction == "right" else -layout.plot_width
        return [
            '<g clip-path="url(#plotClip)">',
            f'<g class="wave" data-user-index="{idx}">',
            f'<polyline points="{pts}" {common}/>',
            f'<polyline points="{pts}" {common} transform="translate({-shift} 0)"/>',
            '<animateTransform attributeName="transform" type="translate" from="0 0" '
            f'to="{shift} 0" dur="{dur}" repeatCount="indefinite"/>',
            "</g>",
            "</g>",
        ]

    return [f'<polyline class="wave" data-user-index="{idx}" points="{pts}" {common}/>']


def _scan_bar(
    state: RenderState, renderer: FrameRenderer, layout: Layout, params: SvgExportParams
) -> list[str]:
    beam = renderer.scan.beam(state, layout)
    band = renderer.scan.band_width(layout.surface_width)
    top, height = beam.top, beam.bottom - beam.top
    if not params.animate_scan_bar:
        if beam.width <= 0:
            return []
        return [
            f'<rect class="scan" x="{beam.left_x}" y="{top}" width="{beam.width}" '
            f'height="{height}" fill="url(#scanGrad)"/>'
        ]
    x_from = layout.plot_x0 - band
    x_to = layout.plot_x0 + layout.plot_width - band
    return [
        '<g clip-path="url(#plotClip)">',
        f'<rect class="scan" x="{x_from}" y="{top}" width="{band}" height="{height}" '
        'fill="url(#scanGrad)">',
        f'<animate attributeName="x" from="{x_from}" to="{x_to}" '
        f'dur="{_n(params.scan_period_seconds)}s" repeatCount="indefinite"/>',
        "</rect>",
        "</g>",
    ]


def _status_panel(rows: list[OverlayRow], cfg: RenderConfig) -> list[str]:
    font = load_mono_font(cfg.diag_font_size)
    max_w = max((float(font.getlength(r.text)) for r in rows), default=0.0)
    panel_w = int(-(-(max_w + cfg.diag_pad_x * 2) // 1))
    panel_h = len(rows) * cfg.diag_line_height + cfg.diag_pad_y * 2
    out = [
        '<g class="status">',
        f'<rect x="0" y="0" width="{panel_w}" height="{panel_h}" {_paint("fill", cfg.diag_panel_color)}/>',
    ]
    y = cfg.diag_pad_y + cfg.diag_baseline
    for r in rows:
        out.append(
            f'<text x="{cfg.diag_pad_x}" y="{y}" {_paint("fill", r.color)} '
            f'font-family="monospace" font-size="{cfg.diag_font_size}" '
            f'filter="url(#textGlow)">{escape(r.text)}</text>'
        )
        y += cfg.diag_line_height
    out.append("</g>")
    return out


def build_svg(
    state: RenderState, renderer: FrameRenderer, params: SvgExportParams | None = None
) -> str:
    """現在の状態を SVG 文書（文字列）にする。状態は変更しない。"""
    p = params if params is not None else SvgExportParams()
    cfg = renderer.config
    layout = renderer.layout_for(state)
    w, h = layout.surface_width, layout.surface_height

    parts: list[str] = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" '
        f'viewBox="0 0 {w} {h}">',
    ]
    parts += _defs(cfg, p)
    parts.append(
        f'<clipPath id="plotClip"><rect x="{layout.plot_x0}" y="0" '
        f'width="{layout.plot_width}" height="{h}"/></clipPath>'
    )
    parts.append(f'<rect x="0" y="0" width="{w}" height="{h}" {_paint("fill", p.background)}/>')

    if p.grid:
        step = int(p.grid_step) if p.grid_step else renderer.grid_spacing(w)
        parts += _grid(w, h, max(1, step), cfg)

    for idx, series in enumerate(renderer.dataset):
        track = layout.tracks[idx]
        ys = _track_values(state, series.username, layout.plot_width, track.midline)
        xs = layout.plot_x0 + np.arange(ys.shape[0], dtype=np.float64)
        parts += _wave(idx, xs, ys, series.color, layout, p)
        parts.append(
            f'<circle cx="{_n(xs[-1])}" cy="{_n(ys[-1])}" r="{cfg.glow_radius}" '
            f'{_paint("fill", series.color)} filter="url(#glow)"/>'
        )

    if renderer.dataset:
        parts += _scan_bar(state, renderer, layout, p)

    rows = status_rows(
        [(s.username, pr.average, s.color) for s, pr in zip(renderer.dataset, renderer.params)],
        cfg,
    )
    parts += _status_panel(rows, cfg)
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def write_svg(
    path: Path | str,
    state: RenderState,
    renderer: FrameRenderer,
    params: SvgExportParams | None = None,
) -> Path:
    """SVG をファイルへ書き出す（`.part` → 置き換え）。書き出したパスを返す。"""
    target = Path(path)
    text = build_svg(state, renderer, params)
    target.parent.mkdir(parents=True, exist_ok=True)
    part = target.with_name(target.name + ".part")
    try:
        part.write_text(text, encoding="utf-8")
        part.replace(target)
    except OSError as e:
        raise RuntimeError(f"failed to write SVG: {target}") from e
    finally:
        if part.exists():
            part.unlink()
    logger.info("SVG saved: %s", target)
    return target


__all__ = ["SvgExportParams", "build_svg", "write_svg", "WAVE_MODES", "WAVE_DIRECTIONS"]
