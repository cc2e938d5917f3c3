from __future__ import annotations

import pytest

from pulsewave.engine.core.frame_clock import FrameClock
from pulsewave.engine.core.scheduler import TimerScheduler


@pytest.mark.smoke
def test_each_schedule_fires_once(manual_clock) -> None:
    sch = TimerScheduler(0.0, clock=manual_clock, sleep=manual_clock.advance)
    calls: list[float] = []
    sch.schedule_tick(calls.append)
    assert sch.run() == 1
    assert calls == [0.0]
    assert sch.run() == 0
    assert sch.fired == 1


def test_self_rescheduling_loop_respects_interval(manual_clock) -> None:
    sch = TimerScheduler(0.1, clock=manual_clock, sleep=manual_clock.advance)
    dts: list[float] = []

    def cb(dt: float) -> None:
        dts.append(dt)
        sch.schedule_tick(cb)

    sch.schedule_tick(cb)
    assert sch.run(max_ticks=3) == 3
    assert dts[0] == 0.0
    assert dts[1:] == [pytest.approx(0.1), pytest.approx(0.1)]
    assert manual_clock() == pytest.approx(0.3)
    assert sch.has_pending


def test_cancel_drops_pending(manual_clock) -> None:
    sch = TimerScheduler(clock=manual_clock, sleep=manual_clock.advance)
    sch.schedule_tick(lambda dt: None)
    sch.cancel()
    assert not sch.has_pending
    assert sch.run() == 0


def test_frame_clock_calls_in_order(manual_clock) -> None:
    order: list[tuple[str, float]] = []

    class _T:
        def __init__(self, name: str) -> None:
            self.name = name

        def tick(self, dt: float) -> None:
            order.append((self.name, dt))

    fc = FrameClock([_T("a"), _T("b")], clock=manual_clock)
    manual_clock.advance(0.25)
    fc.tick()
    fc.tick(0.5)
    assert order == [("a", 0.25), ("b", 0.25), ("a", 0.5), ("b", 0.5)]
