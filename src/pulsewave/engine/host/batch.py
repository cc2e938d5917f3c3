"""
どこで: `pulsewave.engine.host.batch`。
何を: 表示を持たないヘッドレスホスト。ソフトウェアタイマで tick を刻み、フレームを録画へ流す。
なぜ: CI やスクリプトから、対話ホストと同じ描画結果のアニメーションを生成するため。

- `realtime=False`: 録画パイプラインは毎 tick のフレームを取り込む（時間間引きなし）。
- タイマ間隔は既定 0（待たずに次 tick）。実時間で回したい場合のみ間隔を与える。
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.config import DEFAULT_CONFIG, RenderConfig
from ..core.scheduler import TimerScheduler
from ..export.recording import RecordingPipeline
from ..render.renderer import FrameRenderer
from .base import RenderHost

logger = logging.getLogger(__name__)


class BatchHost(RenderHost):
    """タイマ駆動のヘッドレスホスト。"""

    realtime = False

    def __init__(
        self,
        width: int,
        height: int,
        *,
        config: RenderConfig = DEFAULT_CONFIG,
        renderer: FrameRenderer | None = None,
        scheduler: TimerScheduler | None = None,
    ) -> None:
        super().__init__(
            width,
            height,
            scheduler if scheduler is not None else TimerScheduler(),
            config=config,
            renderer=renderer,
        )
        self.timer: TimerScheduler = self.scheduler  # type: ignore[assignment]

    def run_ticks(self, n: int) -> int:
        """`n` tick だけ描画ループを回して停止する。発火した tick 数を返す。"""
        self.start()
        try:
            return self.timer.run(max_ticks=max(0, int(n)))
        finally:
            self.stop()

    def record(self, pipeline: RecordingPipeline, *, max_ticks: int | None = None) -> Any:
        """録画が終端状態になるまで tick を回し、`pipeline.result()` を返す。

        `max_ticks` を超えても終わらない場合は録画を中断する（`RecordingAbortedError`）。
        """
        pipeline.start(self)
        limit = max_ticks if max_ticks is not None else pipeline.total * 4 + 16
        self.start()
        try:
            ticks = 0
            while not pipeline.state.is_terminal and ticks < limit:
                fired = self.timer.run(max_ticks=1)
                if fired == 0:
                    break
                ticks += fired
            if not pipeline.state.is_terminal:
                logger.warning("recording did not finish within %d ticks", limit)
                pipeline.cancel()
        finally:
            self.stop()
        return pipeline.result()


__all__ = ["BatchHost"]
