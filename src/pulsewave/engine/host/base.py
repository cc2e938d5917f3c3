"""
どこで: `pulsewave.engine.host.base`。
何を: 描画状態・描画器・ラスタ面を所有し、スケジューラから 1 tick ずつフレームを進めるホストの共通部。
なぜ: 対話ホスト（pyglet）とバッチホスト（ヘッドレス）で「1 tick = 1 描画 + 接続済み Tickable の更新」を
     同じ順序で実行するため。

tick の順序（FrameClock で固定）:
1) 描画ステップ（`FrameRenderer.render`）→ `last_frame` を更新
2) 接続済み Tickable（録画パイプライン等）を接続順に呼ぶ

`attach/detach` は次の tick から反映される（tick 中の変更は安全）。
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from ..core.config import DEFAULT_CONFIG, RenderConfig
from ..core.dataset import Dataset, Series
from ..core.frame import RenderFrame
from ..core.frame_clock import FrameClock
from ..core.scheduler import Scheduler
from ..core.state import RenderState
from ..core.tickable import Tickable
from ..render.renderer import FrameRenderer
from ..render.surface import PillowSurface, RasterSurface

logger = logging.getLogger(__name__)


class _RenderStep(Tickable):
    """FrameClock の先頭で描画を 1 回行う Tickable。"""

    def __init__(self, host: "RenderHost") -> None:
        self._host = host

    def tick(self, dt: float) -> None:
        self._host._render_once()


class _AttachedTickables(Tickable):
    """接続済み Tickable をスナップショット順に呼ぶ。"""

    def __init__(self) -> None:
        self.items: list[Tickable] = []

    def tick(self, dt: float) -> None:
        for t in tuple(self.items):
            t.tick(dt)


class RenderHost:
    """スケジューラ駆動で描画を進めるホストの基底クラス。

    Parameters
    ----------
    width, height : int
        ラスタ面の寸法（最小寸法へ切り上げ）。不正値は `RenderTargetError`。
    scheduler : Scheduler
        次 tick の予約先。
    config : RenderConfig
        描画定数。
    renderer : FrameRenderer | None
        共有描画器。省略時は `config` から生成。
    """

    realtime: bool = False

    def __init__(
        self,
        width: int,
        height: int,
        scheduler: Scheduler,
        *,
        config: RenderConfig = DEFAULT_CONFIG,
        renderer: FrameRenderer | None = None,
    ) -> None:
        self.config = config
        self.state = RenderState.create(width, height, config)
        self.renderer = renderer if renderer is not None else FrameRenderer(config)
        self.surface: RasterSurface = self._make_surface(
            self.state.surface_width, self.state.surface_height
        )
        self.scheduler = scheduler
        self._attached = _AttachedTickables()
        self._clock = FrameClock([_RenderStep(self), self._attached])
        self._last_frame: RenderFrame | None = None
        self._running = False

    # ---- properties ----
    @property
    def last_frame(self) -> RenderFrame | None:
        """直近の tick で描いたフレーム（未描画なら None）。"""
        return self._last_frame

    @property
    def running(self) -> bool:
        return self._running

    @property
    def dataset(self) -> Dataset:
        return self.renderer.dataset

    # ---- attach ----
    def attach(self, tickable: Tickable) -> None:
        if tickable not in self._attached.items:
            self._attached.items.append(tickable)

    def detach(self, tickable: Tickable) -> None:
        if tickable in self._attached.items:
            self._attached.items.remove(tickable)

    # ---- lifecycle ----
    def start(self) -> None:
        """描画ループを開始する（1 回の予約ごとに次を予約し直す）。"""
        if self._running:
            return
        self._running = True
        logger.debug("%s started", type(self).__name__)
        self.scheduler.schedule_tick(self._on_tick)

    def stop(self) -> None:
        """以後の tick を予約しない。実行中の tick は最後まで完了する。"""
        if not self._running:
            return
        self._running = False
        self.scheduler.cancel()
        logger.debug("%s stopped", type(self).__name__)

    def step(self, dt: float = 0.0) -> RenderFrame:
        """スケジューラを介さず 1 tick 進め、描いたフレームを返す。"""
        self._clock.tick(dt)
        if self._last_frame is None:
            raise RuntimeError("render step did not produce a frame")
        return self._last_frame

    # ---- data / geometry ----
    def set_dataset(self, entries: Iterable[Mapping[str, Any] | Series] | None) -> Dataset:
        """データセットを差し替え、次の tick の前に状態を初期化する。"""
        return self.renderer.set_dataset(entries, self.state)

    def resize(self, width: int, height: int) -> bool:
        """寸法を更新する。変化があれば状態を初期化し、ラスタ面を作り直す。"""
        changed = self.state.resize(width, height, self.config)
        if changed:
            self.surface = self._make_surface(self.state.surface_width, self.state.surface_height)
        return changed

    # ---- internal ----
    def _make_surface(self, width: int, height: int) -> RasterSurface:
        return PillowSurface(width, height, self.config.background)

    def _on_tick(self, dt: float) -> None:
        if not self._running:
            return
        self._clock.tick(dt)
        if self._running:
            self.scheduler.schedule_tick(self._on_tick)

    def _render_once(self) -> RenderFrame:
        self._last_frame = self.renderer.render(self.state, self.surface)
        return self._last_frame


__all__ = ["RenderHost"]
