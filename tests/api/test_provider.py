from __future__ import annotations

import json

import pytest

from pulsewave.common.errors import PulsewaveError, UserNotFoundError
from pulsewave.api.provider import (
    ActivitySeries,
    JsonFileProvider,
    SyntheticProvider,
    parse_activity,
    resolve_series,
)


@pytest.mark.smoke
def test_parse_contribution_objects_with_dates() -> None:
    s = parse_activity(
        {
            "contributions": [
                {"date": "2024-01-01", "contributionCount": 3},
                {"date": "2024-01-02", "count": 1},
            ]
        }
    )
    assert s.labels == ("2024-01-01", "2024-01-02")
    assert s.data == (3.0, 1.0)


def test_parse_other_shapes() -> None:
    assert parse_activity({"data": [1, 2]}).data == (1.0, 2.0)
    assert parse_activity([{"count": 2}, 5, "x"]).data == (2.0, 5.0, 0.0)
    assert parse_activity({"unexpected": 1}).data == ()


def test_series_length_mismatch_rejected() -> None:
    with pytest.raises(ValueError):
        ActivitySeries(labels=("a",), data=(1.0, 2.0))


def test_json_file_provider(tmp_path) -> None:
    p = tmp_path / "activity.json"
    p.write_text(json.dumps({"alice": {"data": [1, 2, 3]}}), encoding="utf-8")
    prov = JsonFileProvider(p)
    assert prov.fetch("alice").data == (1.0, 2.0, 3.0)
    with pytest.raises(UserNotFoundError):
        prov.fetch("bob")


def test_json_file_provider_errors(tmp_path) -> None:
    with pytest.raises(UserNotFoundError):
        JsonFileProvider(tmp_path / "missing.json").fetch("alice")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(PulsewaveError):
        JsonFileProvider(bad).fetch("alice")


def test_synthetic_provider_is_seedable() -> None:
    a = SyntheticProvider(seed=3).fetch("x")
    b = SyntheticProvider(seed=3).fetch("x")
    assert a == b
    assert len(a.data) == 365
    assert all(0 <= v <= 4 for v in a.data)


class _Failing:
    def fetch(self, username: str) -> ActivitySeries:
        raise UserNotFoundError(username)


class _Empty:
    def fetch(self, username: str) -> ActivitySeries:
        return ActivitySeries()


def test_resolve_series_substitutes_fallback(caplog: pytest.LogCaptureFixture) -> None:
    fb = SyntheticProvider(days=10, seed=1)
    s = resolve_series(_Failing(), "ghost", fb)
    assert len(s.data) == 10
    assert "fallback" in caplog.text

    s = resolve_series(_Empty(), "idle", lambda name: ActivitySeries(data=(7.0,)))
    assert s.data == (7.0,)

    assert resolve_series(_Failing(), "ghost").data == ()
