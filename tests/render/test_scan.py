from __future__ import annotations

import pytest

from pulsewave.engine.core.state import RenderState
from pulsewave.engine.render.layout import compute_layout
from pulsewave.engine.render.scan import ScanBeamController


@pytest.mark.smoke
def test_band_width_has_minimum() -> None:
    scan = ScanBeamController()
    assert scan.band_width(1200) == 96
    assert scan.band_width(300) == 60


def test_offset_wraps_within_plot_width() -> None:
    scan = ScanBeamController()
    state = RenderState.create(400, 300)
    plot_w = 137
    for _ in range(plot_w * 3 + 5):
        off = scan.advance(state, plot_w)
        assert 0 <= off < plot_w
    assert state.scan_offset == 5


def test_beam_is_clamped_to_plot_origin() -> None:
    scan = ScanBeamController()
    state = RenderState.create(1200, 600)
    lay = compute_layout(1200, 600, 1)
    beam = scan.beam(state, lay)
    assert beam.lead_x == lay.plot_x0
    assert beam.width == 0

    state.scan_offset = 200
    beam = scan.beam(state, lay)
    assert beam.lead_x == lay.plot_x0 + 200
    assert beam.left_x == lay.plot_x0 + 200 - 96
    assert (beam.top, beam.bottom) == (lay.tracks_top, lay.tracks_bottom)
