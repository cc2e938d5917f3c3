from __future__ import annotations

import numpy as np
import pytest

from pulsewave.common.errors import RenderTargetError
from pulsewave.engine.render.surface import PillowSurface


@pytest.mark.smoke
def test_clear_and_to_array() -> None:
    s = PillowSurface(40, 30, "black")
    s.clear((255, 0, 0))
    arr = s.to_array()
    assert arr.shape == (30, 40, 3)
    assert arr.dtype == np.uint8
    assert tuple(arr[0, 0]) == (255, 0, 0)


def test_non_positive_size_rejected() -> None:
    with pytest.raises(RenderTargetError):
        PillowSurface(0, 10)


def test_gradient_runs_transparent_to_opaque() -> None:
    s = PillowSurface(100, 10, "black")
    s.linear_gradient_fill(0, 0, 100, 10, (0, 255, 0, 0), (0, 255, 0, 255))
    arr = s.to_array()
    assert arr[5, 0, 1] == 0
    assert arr[5, 99, 1] == 255
    assert arr[5, 30, 1] < arr[5, 70, 1]


def test_fill_arc_draws_at_center() -> None:
    s = PillowSurface(60, 60, "black")
    s.fill_arc(30, 30, 6, "lime", glow=20)
    arr = s.to_array()
    assert arr[30, 30, 1] == 255
    # 発光で周囲も僅かに明るい
    assert arr[30, 40, 1] > 0


def test_text_measure_and_draw() -> None:
    s = PillowSurface(200, 40, "black")
    w = s.measure_text("Status:", 14)
    assert w > 0
    s.fill_text(10, 22, "Status:", "lime", 14)
    assert s.to_array()[:, :, 1].max() > 0


def test_to_array_is_a_copy() -> None:
    s = PillowSurface(10, 10, "black")
    arr = s.to_array()
    s.clear("white")
    assert arr.max() == 0
