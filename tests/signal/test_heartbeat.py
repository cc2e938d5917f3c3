from __future__ import annotations

import numpy as np
import pytest

from pulsewave.engine.core.config import DEFAULT_CONFIG
from pulsewave.engine.signal.heartbeat import (
    HeartbeatGenerator,
    in_spike_window,
    next_tick,
    phase_of,
    sample,
    spike_value,
)
from pulsewave.engine.signal.params import WaveformParams


@pytest.mark.smoke
def test_spike_peak_at_window_centre() -> None:
    # period 200, tick 164 -> phase 0.82（窓の中心）
    assert spike_value(0.82) == pytest.approx(DEFAULT_CONFIG.r_height, abs=1e-6)
    assert sample(164, 1.0, 200) == pytest.approx(1.6 * 50.0, abs=1e-4)


def test_spike_edges_blend_towards_q_and_s() -> None:
    assert spike_value(0.79) == pytest.approx(DEFAULT_CONFIG.q_depth, abs=1e-6)
    assert spike_value(0.85) == pytest.approx(DEFAULT_CONFIG.s_depth, abs=1e-6)


def test_spike_window_is_deterministic() -> None:
    a = np.random.default_rng(1)
    b = np.random.default_rng(2)
    period = 300
    for tick in range(period):
        if in_spike_window(phase_of(tick, period)):
            assert sample(tick, 1.5, period, a) == sample(tick, 1.5, period, b)


def test_noise_outside_window_is_bounded(rng: np.random.Generator) -> None:
    intensity = 2.0
    bound = 0.1 * 50.0 * intensity / 2.0
    period = 200
    seen = []
    for tick in range(period):
        if in_spike_window(phase_of(tick, period)):
            continue
        v = sample(tick, intensity, period, rng)
        assert abs(v) <= bound
        seen.append(v)
    # 完全な直線ではない
    assert len(set(seen)) > 1


def test_zero_intensity_outside_window_is_exactly_zero(rng: np.random.Generator) -> None:
    assert sample(0, 0.0, 200, rng) == 0.0


def test_generator_seed_reproduces_noise() -> None:
    params = WaveformParams(intensity=1.0, period_ticks=200, average=2.0)
    g1 = HeartbeatGenerator(seed=42)
    g2 = HeartbeatGenerator(seed=42)
    assert [g1.sample(t, params) for t in range(20)] == [g2.sample(t, params) for t in range(20)]
    assert g1.noise_bound(2.0) == pytest.approx(5.0)


def test_next_tick_boosts_inside_reference_window() -> None:
    assert next_tick(0) == 1
    # 参照周期 200 の窓は 158–170
    assert next_tick(160) == 162
    assert next_tick(171) == 172
