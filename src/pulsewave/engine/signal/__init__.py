"""
どこで: `pulsewave.engine.signal`。
何を: 活動量系列 → 波形パラメータ、心拍様サンプル生成、ユーザー毎のリングバッファ。
"""

from .buffers import PointBuffer, PointBufferManager
from .heartbeat import HeartbeatGenerator, next_tick, sample
from .params import WaveformParams, compute_params

__all__ = [
    "PointBuffer",
    "PointBufferManager",
    "HeartbeatGenerator",
    "sample",
    "next_tick",
    "WaveformParams",
    "compute_params",
]
