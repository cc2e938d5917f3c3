"""
どこで: `pulsewave.engine.render.scan`。
何を: オシロスコープ風の走査光（グラデーション帯）の位置を tick ごとに進め、描画用の帯形状を返す。
なぜ: 走査位置を描画幅で循環させ、全トラックにまたがる一貫した帯として描くため。
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import DEFAULT_CONFIG, RenderConfig
from ..core.state import RenderState
from .layout import Layout


@dataclass(frozen=True)
class ScanBeam:
    lead_x: int
    left_x: int
    top: int
    bottom: int

    @property
    def width(self) -> int:
        return self.lead_x - self.left_x


class ScanBeamController:
    """`RenderState.scan_offset` を所有者に代わって更新する。"""

    def __init__(self, config: RenderConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def band_width(self, surface_width: int) -> int:
        return max(self.config.beam_min_width, int(round(surface_width * self.config.beam_width_frac)))

    def beam(self, state: RenderState, layout: Layout) -> ScanBeam:
        """現在の走査位置の帯（前縁/左縁/上下端）。"""
        offset = state.scan_offset % layout.plot_width
        lead = layout.plot_x0 + offset
        left = max(layout.plot_x0, lead - self.band_width(layout.surface_width))
        return ScanBeam(lead_x=lead, left_x=left, top=layout.tracks_top, bottom=layout.tracks_bottom)

    def advance(self, state: RenderState, plot_width: int) -> int:
        """1 tick ぶん進めて `[0, plot_width)` に循環させる。"""
        pw = max(1, int(plot_width))
        state.scan_offset = (state.scan_offset + self.config.scan_step) % pw
        return state.scan_offset


__all__ = ["ScanBeam", "ScanBeamController"]
