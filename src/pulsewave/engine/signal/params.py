"""
どこで: `pulsewave.engine.signal.params`。
何を: 日次活動量の数列から強度/周期/平均を算出する（SignalParameterMapper）。
なぜ: 平均活動量が多いほど「大きく速い」鼓動になるよう、単純な単調写像で心拍パラメータを決めるため。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..core.config import DEFAULT_CONFIG, RenderConfig


@dataclass(frozen=True)
class WaveformParams:
    intensity: float
    period_ticks: int
    average: float


def average_of(values: Iterable[float]) -> float:
    """算術平均（空なら 0.0）。"""
    vals = list(values)
    if not vals:
        return 0.0
    return float(sum(vals)) / len(vals)


def compute_params(values: Iterable[float], config: RenderConfig = DEFAULT_CONFIG) -> WaveformParams:
    """数列を波形パラメータへ写像する。

    - `intensity = min(avg * intensity_per_avg, max_intensity)`
    - `period = max(min_period, round(speed_base - avg * speed_slope))`
    - 空列は平均 0（平坦な基線）になる。エラーは送出しない。
    """
    avg = average_of(values)
    intensity = min(avg * config.intensity_per_avg, config.max_intensity)
    intensity = max(0.0, intensity)
    period = max(int(config.min_period), int(round(config.speed_base - avg * config.speed_slope)))
    return WaveformParams(intensity=float(intensity), period_ticks=period, average=avg)


__all__ = ["WaveformParams", "compute_params", "average_of"]
