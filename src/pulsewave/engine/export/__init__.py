"""
どこで: `pulsewave.engine.export`。
何を: 録画パイプライン（状態機械）、GIF エンコーダ、SVG スナップショット。
"""

from .gif import GifEncoder, GifExportParams
from .recording import RecordingPipeline, RecordingProgress, RecordingState
from .svg import SvgExportParams, build_svg, write_svg

__all__ = [
    "GifEncoder",
    "GifExportParams",
    "RecordingPipeline",
    "RecordingProgress",
    "RecordingState",
    "SvgExportParams",
    "build_svg",
    "write_svg",
]
