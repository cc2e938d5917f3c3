from __future__ import annotations

import numpy as np
import pytest

from pulsewave.engine.signal.buffers import PointBuffer, PointBufferManager


@pytest.mark.smoke
def test_ensure_filled_pads_with_fill_value() -> None:
    buf = PointBuffer()
    buf.ensure_filled(5, 10.0)
    assert len(buf) == 5
    assert np.all(buf.values() == 10.0)


def test_advance_keeps_length_and_order() -> None:
    buf = PointBuffer()
    buf.ensure_filled(5, 10.0)
    for v in (1.0, 2.0):
        buf.advance(v)
    assert len(buf) == 5
    assert buf.values().tolist() == [10.0, 10.0, 10.0, 1.0, 2.0]
    assert buf.latest == 2.0


def test_length_invariant_over_many_ticks() -> None:
    buf = PointBuffer()
    buf.ensure_filled(7, 0.0)
    for i in range(100):
        buf.advance(float(i))
        assert len(buf) == 7
    assert buf.values().tolist() == [93.0, 94.0, 95.0, 96.0, 97.0, 98.0, 99.0]


def test_shrink_drops_oldest_and_grow_pads_left() -> None:
    buf = PointBuffer()
    buf.ensure_filled(5, 10.0)
    buf.advance(1.0)
    buf.advance(2.0)
    buf.ensure_filled(3, 0.0)
    assert buf.values().tolist() == [10.0, 1.0, 2.0]
    buf.ensure_filled(5, -1.0)
    assert buf.values().tolist() == [-1.0, -1.0, 10.0, 1.0, 2.0]


def test_advance_on_empty_buffer_is_noop() -> None:
    buf = PointBuffer()
    buf.advance(3.0)
    assert len(buf) == 0
    with pytest.raises(IndexError):
        _ = buf.latest


def test_manager_creates_and_resets() -> None:
    mgr = PointBufferManager()
    mgr.ensure_filled("alice", 4, 50.0)
    mgr.advance("alice", 40.0)
    assert set(mgr) == {"alice"}
    assert mgr["alice"].latest == 40.0
    mgr.reset()
    assert len(mgr) == 0
