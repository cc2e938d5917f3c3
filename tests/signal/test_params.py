from __future__ import annotations

import pytest

from pulsewave.engine.signal.params import average_of, compute_params


@pytest.mark.smoke
def test_empty_series_is_flat_baseline() -> None:
    p = compute_params([])
    assert p.average == 0.0
    assert p.intensity == 0.0
    assert p.period_ticks == 400


def test_moderate_average_maps_linearly() -> None:
    p = compute_params([2, 2, 2])
    assert p.average == pytest.approx(2.0)
    assert p.intensity == pytest.approx(1.0)
    assert p.period_ticks == 380


def test_high_average_is_capped() -> None:
    p = compute_params([100, 100])
    assert p.intensity == pytest.approx(3.0)
    assert p.period_ticks == 80


def test_period_is_rounded_to_whole_ticks() -> None:
    p = compute_params([0, 1])  # avg 0.5 -> 395.0
    assert isinstance(p.period_ticks, int)
    assert p.period_ticks == 395
    assert p.intensity == pytest.approx(0.25)


def test_average_of_empty_is_zero() -> None:
    assert average_of([]) == 0.0
    assert average_of([1.0, 3.0]) == pytest.approx(2.0)
