"""
どこで: `pulsewave.engine.signal.heartbeat`。
何を: tick/強度/周期から 1 サンプルの変位を返す心拍様波形（QRS 三角尖峰 + 微小ノイズ）。
なぜ: 活動量の統計を ECG 風の鼓動として視覚化するため。

注意:
- 尖峰窓（`qrs_center ± qrs_width/2`）内の出力は (tick, intensity, period) の純関数で決定的。
- 窓外の出力は一様乱数の揺らぎで非決定的。乱数源は `numpy.random.Generator` を注入できる。
"""

from __future__ import annotations

import numpy as np

from ..core.config import DEFAULT_CONFIG, RenderConfig
from .params import WaveformParams


def phase_of(tick: int, period: float) -> float:
    """周期内の位置（0 以上 1 未満）。"""
    return float(tick % period) / float(period)


def in_spike_window(phase: float, config: RenderConfig = DEFAULT_CONFIG) -> bool:
    half_w = config.qrs_width * 0.5
    return (config.qrs_center - half_w) <= phase <= (config.qrs_center + half_w)


def spike_value(phase: float, config: RenderConfig = DEFAULT_CONFIG) -> float:
    """尖峰窓内の単位波形値（振幅倍率前）。

    窓中心からの正規化距離で三角形 `peak` を作り、左半は Q→R、右半は S→R を線形補間する。
    """
    half_w = config.qrs_width * 0.5
    left = config.qrs_center - half_w
    right = config.qrs_center + half_w
    centre = (left + right) / 2
    dist = abs(phase - centre) / half_w  # 0: 中心, 1: 端
    peak = 1.0 - dist
    if phase < centre:
        return config.q_depth * (1.0 - peak) + config.r_height * peak
    return config.s_depth * (1.0 - peak) + config.r_height * peak


def sample(
    tick: int,
    intensity: float,
    period: float,
    rng: np.random.Generator | None = None,
    config: RenderConfig = DEFAULT_CONFIG,
) -> float:
    """1 サンプル分の変位（px, 正が上向き）を返す。"""
    scale = config.amp_base * intensity
    phase = phase_of(tick, period)
    if in_spike_window(phase, config):
        return spike_value(phase, config) * scale
    # その他: 基線 + 微小揺らぎ（完全な直線を避ける）
    noise = config.noise_frac * scale
    if noise <= 0.0:
        return 0.0
    gen = rng if rng is not None else np.random.default_rng()
    return float(gen.uniform(-noise, noise))


def next_tick(tick: int, config: RenderConfig = DEFAULT_CONFIG) -> int:
    """描画後の次 tick。基準周期の尖峰窓内では `qrs_tick_boost` 歩進める。"""
    ref = config.tick_reference_period
    step = config.qrs_tick_boost if in_spike_window(phase_of(tick, ref), config) else 1
    return int(tick) + int(step)


class HeartbeatGenerator:
    """乱数源と設定を束ねた生成器。描画器はこれを 1 つ保持して全トラックで共有する。"""

    def __init__(
        self,
        config: RenderConfig = DEFAULT_CONFIG,
        *,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, tick: int, params: WaveformParams) -> float:
        return sample(tick, params.intensity, params.period_ticks, self.rng, self.config)

    def noise_bound(self, intensity: float) -> float:
        """窓外出力の絶対値上限。"""
        return self.config.noise_frac * self.config.amp_base * intensity


__all__ = [
    "HeartbeatGenerator",
    "sample",
    "next_tick",
    "phase_of",
    "in_spike_window",
    "spike_value",
]
