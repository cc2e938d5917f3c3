"""
どこで: `pulsewave.engine.host`。
何を: 描画ループを所有するホスト（ヘッドレスのバッチ / pyglet の対話）。

対話ホストは pyglet を import するため、ここでは再輸出しない（`engine.host.interactive` を直接参照）。
"""

from .base import RenderHost
from .batch import BatchHost

__all__ = ["RenderHost", "BatchHost"]
