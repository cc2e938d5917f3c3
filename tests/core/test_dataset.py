from __future__ import annotations

import math

import pytest

from pulsewave.engine.core.config import DEFAULT_CONFIG
from pulsewave.engine.core.dataset import Series, normalize_dataset
from pulsewave.engine.host.batch import BatchHost


@pytest.mark.smoke
def test_missing_or_invalid_data_becomes_empty() -> None:
    ds = normalize_dataset(
        [
            {"username": "a"},
            {"username": "b", "data": "not-a-list"},
            {"username": "c", "data": None},
        ]
    )
    assert [s.values for s in ds] == [(), (), ()]


def test_non_numeric_values_are_dropped() -> None:
    (s,) = normalize_dataset(
        [{"username": "a", "data": [1, "2", None, math.nan, math.inf, True, 3.5]}]
    )
    assert s.values == (1.0, 3.5)


def test_palette_colours_assigned_by_index() -> None:
    ds = normalize_dataset(
        [{"username": f"u{i}", "data": []} for i in range(3)] + [{"username": "x", "color": "red"}]
    )
    assert [s.color for s in ds] == [*DEFAULT_CONFIG.palette[:3], "red"]


def test_duplicate_username_first_wins(caplog: pytest.LogCaptureFixture) -> None:
    ds = normalize_dataset(
        [{"username": "a", "data": [1]}, {"username": "a", "data": [9]}]
    )
    assert len(ds) == 1
    assert ds[0].values == (1.0,)
    assert "duplicate" in caplog.text


def test_missing_username_is_generated_and_series_pass_through() -> None:
    pre = Series(username="kept", values=(2.0,), color="cyan")
    ds = normalize_dataset([{"data": [1]}, pre])
    assert ds[0].username == "user1"
    assert ds[1] is pre or ds[1] == pre


def test_none_is_empty_dataset() -> None:
    assert normalize_dataset(None) == ()


def test_unparseable_colour_falls_back_to_palette(caplog: pytest.LogCaptureFixture) -> None:
    ds = normalize_dataset(
        [
            {"username": "a", "data": [1], "color": "transparent"},
            {"username": "b", "data": [1], "color": 42},
            Series(username="c", values=(1.0,), color="no-such-colour"),
            {"username": "d", "data": [1], "color": "#ff0000"},
        ]
    )
    assert [s.color for s in ds] == [*DEFAULT_CONFIG.palette[:3], "#ff0000"]
    assert "invalid color" in caplog.text


def test_unparseable_colour_does_not_break_rendering() -> None:
    host = BatchHost(300, 200)
    host.set_dataset([{"username": "a", "data": [1], "color": "transparent"}])
    frame = host.step()
    assert frame.pixels.shape == (200, 300, 3)
