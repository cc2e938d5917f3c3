from __future__ import annotations

import pytest

from pulsewave.engine.render.overlay import ActivityStatus, classify_status, status_rows


@pytest.mark.smoke
@pytest.mark.parametrize(
    "avg, expected",
    [
        (0.0, ActivityStatus.NO_ACTIVITY),
        (0.5, ActivityStatus.LOW),
        (1.0, ActivityStatus.HEALTHY),
        (2.0, ActivityStatus.HEALTHY),
        (3.0, ActivityStatus.HIGH),
        (4.0, ActivityStatus.HIGH),
    ],
)
def test_classify_status(avg: float, expected: ActivityStatus) -> None:
    assert classify_status(avg) is expected


def test_labels() -> None:
    assert ActivityStatus.NO_ACTIVITY.label == "No activity"
    assert ActivityStatus.HIGH.label == "Monster"


def test_status_rows_format() -> None:
    rows = status_rows([("alice", 2.5, "lime"), ("bob", 0.0, "cyan")])
    assert rows[0].text == "Status:"
    assert rows[1].text == "alice: Healthy (avg 2.50)"
    assert rows[1].color == "lime"
    assert rows[2].text == "bob: No activity (avg 0.00)"


def test_status_rows_header_only_for_empty_dataset() -> None:
    rows = status_rows([])
    assert [r.text for r in rows] == ["Status:"]
