"""
どこで: `pulsewave.engine.render`。
何を: トラック配置、走査光、ラスタサーフェス、ステータスオーバーレイ、フレーム合成。
"""

from .layout import Layout, TrackGeometry, amplitude_scale, compute_layout
from .overlay import ActivityStatus, classify_status
from .renderer import FrameRenderer
from .scan import ScanBeam, ScanBeamController
from .surface import PillowSurface, RasterSurface

__all__ = [
    "Layout",
    "TrackGeometry",
    "compute_layout",
    "amplitude_scale",
    "ActivityStatus",
    "classify_status",
    "FrameRenderer",
    "ScanBeam",
    "ScanBeamController",
    "RasterSurface",
    "PillowSurface",
]
