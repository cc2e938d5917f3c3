"""
どこで: `pulsewave.engine.core.scheduler`。
何を: 次の tick を予約する `Scheduler` Protocol と、ヘッドレス用のソフトウェアタイマ実装。
なぜ: 対話ホスト（表示リフレッシュ駆動）とバッチホスト（タイマ駆動）で同じ協調ループを共有するため。

- どちらの実装も 1 回の予約につき 1 回だけコールバックを呼ぶ（requestAnimationFrame 相当）。
- コールバックは同期的に完了してから次の予約が処理される（協調的・単一スレッド）。
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Protocol

TickCallback = Callable[[float], None]

logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """次の tick を 1 回だけ予約するインターフェース。"""

    def schedule_tick(self, callback: TickCallback) -> None:
        """次の tick で `callback(dt)` を 1 回呼ぶよう予約する。"""

    def cancel(self) -> None:
        """未実行の予約をすべて取り消す。"""


class TimerScheduler:
    """一定間隔のソフトウェアタイマで tick を発火させる協調スケジューラ。

    Parameters
    ----------
    interval : float
        tick 間隔（秒）。0 なら待たずに即時発火する。
    clock : Callable[[], float]
        単調時計（秒）。テストでは手動時計を注入する。
    sleep : Callable[[float], None]
        待機関数。テストでは no-op を注入する。
    """

    def __init__(
        self,
        interval: float = 0.0,
        *,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = max(0.0, float(interval))
        self._clock = clock
        self._sleep = sleep
        self._pending: list[tuple[float, TickCallback]] = []
        self._last_fire: float | None = None
        self._fired = 0

    @property
    def fired(self) -> int:
        """これまでに発火した tick 数。"""
        return self._fired

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def schedule_tick(self, callback: TickCallback) -> None:
        base = self._last_fire if self._last_fire is not None else self._clock()
        self._pending.append((base + self.interval, callback))

    def cancel(self) -> None:
        self._pending.clear()

    def run(self, *, max_ticks: int | None = None) -> int:
        """予約が尽きるまで（または `max_ticks` 回）tick を発火させ、発火数を返す。"""
        count = 0
        while self._pending:
            if max_ticks is not None and count >= max_ticks:
                break
            due, callback = self._pending.pop(0)
            now = self._clock()
            if due > now:
                self._sleep(due - now)
                now = max(self._clock(), due)
            dt = 0.0 if self._last_fire is None else now - self._last_fire
            self._last_fire = now
            self._fired += 1
            count += 1
            callback(dt)
        return count


__all__ = ["Scheduler", "TimerScheduler", "TickCallback"]
