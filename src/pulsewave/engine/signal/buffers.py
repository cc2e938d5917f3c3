"""
どこで: `pulsewave.engine.signal.buffers`。
何を: ユーザー毎の固定長リングバッファ（サンプルの y 座標列）と、その集合の管理。
なぜ: 1 tick ごとに最新値を右端へ積み最古を捨てる「スクロール表示」を O(1) で行うため。

不変条件:
- `advance` は長さを変えない（追記 + 最古の破棄）。
- `ensure_filled` は左側を塗り値（トラック中線）で埋めるか、最古から切り詰めて長さを合わせる。
"""

from __future__ import annotations

from typing import Iterator, Mapping

import numpy as np


class PointBuffer:
    """固定長リングバッファ。論理順序は「最古 → 最新」。"""

    __slots__ = ("_data", "_head")

    def __init__(self) -> None:
        self._data = np.empty(0, dtype=np.float64)
        self._head = 0  # 次に書き込む物理位置 = 最古の位置

    def __len__(self) -> int:
        return int(self._data.shape[0])

    def values(self) -> np.ndarray:
        """論理順（最古 → 最新）のコピーを返す。"""
        if self._head == 0:
            return self._data.copy()
        return np.concatenate((self._data[self._head :], self._data[: self._head]))

    @property
    def latest(self) -> float:
        if len(self) == 0:
            raise IndexError("PointBuffer is empty")
        return float(self._data[(self._head - 1) % len(self)])

    def ensure_filled(self, required_length: int, fill_value: float) -> None:
        """長さを `required_length` に揃える。短ければ左詰め、長ければ最古から捨てる。"""
        n = max(0, int(required_length))
        cur = len(self)
        if cur == n:
            return
        ordered = self.values()
        if cur < n:
            pad = np.full(n - cur, float(fill_value), dtype=np.float64)
            ordered = np.concatenate((pad, ordered))
        else:
            ordered = ordered[cur - n :]
        self._data = np.ascontiguousarray(ordered, dtype=np.float64)
        self._head = 0

    def advance(self, value: float) -> None:
        """最新値を追記し、最古を 1 つ捨てる（長さ不変）。空バッファでは何もしない。"""
        n = len(self)
        if n == 0:
            return
        self._data[self._head] = float(value)
        self._head = (self._head + 1) % n

    def clear(self) -> None:
        self._data = np.empty(0, dtype=np.float64)
        self._head = 0


class PointBufferManager(Mapping[str, PointBuffer]):
    """username → PointBuffer の対応を所有する。RenderState の一部として保持される。"""

    def __init__(self) -> None:
        self._buffers: dict[str, PointBuffer] = {}

    # ---- Mapping ----
    def __getitem__(self, username: str) -> PointBuffer:
        return self._buffers[username]

    def __iter__(self) -> Iterator[str]:
        return iter(self._buffers)

    def __len__(self) -> int:
        return len(self._buffers)

    # ---- operations ----
    def buffer_for(self, username: str) -> PointBuffer:
        buf = self._buffers.get(username)
        if buf is None:
            buf = PointBuffer()
            self._buffers[username] = buf
        return buf

    def ensure_filled(self, username: str, required_length: int, fill_value: float) -> PointBuffer:
        buf = self.buffer_for(username)
        buf.ensure_filled(required_length, fill_value)
        return buf

    def advance(self, username: str, value: float) -> None:
        self._buffers[username].advance(value)

    def reset(self) -> None:
        """全バッファを破棄する（次の `ensure_filled` で中線から再充填される）。"""
        self._buffers.clear()


__all__ = ["PointBuffer", "PointBufferManager"]
