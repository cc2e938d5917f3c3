"""
どこで: `pulsewave.engine.core`。
何を: 描画設定・セッション状態・tick 駆動（FrameClock/Scheduler）の基盤。
"""

from .config import DEFAULT_CONFIG, RenderConfig
from .state import RenderState

__all__ = ["RenderConfig", "DEFAULT_CONFIG", "RenderState"]
