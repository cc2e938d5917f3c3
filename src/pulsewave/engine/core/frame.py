"""
どこで: `pulsewave.engine.core` の描画結果型。
何を: 1 tick ぶんの合成済みラスタ（H×W×3, uint8）と、その描画 tick を表す。
なぜ: ホスト/録画パイプライン/エンコーダ間の契約を明示し、duck-typing を排除するため。
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RenderFrame:
    """合成済み 1 フレーム。保持せずエンコード後は破棄する。"""

    tick: int
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


__all__ = ["RenderFrame"]
