"""
どこで: `pulsewave.engine.export.recording`。
何を: ホストが描いたフレームを一定レートで取り込み、固定枚数に達したらエンコーダを確定させる状態機械。
なぜ: 対話ホスト（実時間）とバッチホスト（毎 tick）のどちらからでも、枚数と時間間隔が正しい
     アニメーションを得るため。

状態遷移:
    IDLE → CAPTURING → ENCODING → {DONE | ABORTED | ERROR}

- 取り込みは `Tickable.tick()` で行う。ホストの FrameClock が描画ステップの直後に呼ぶ。
- 実時間ホスト: 前回取り込みから `1000 / fps` ms 以上経過した tick のみ取り込む（初回は即時）。
- ヘッドレスホスト: 毎 tick 取り込む。
- 同じ tick のフレームは 2 度取り込まない（tick は厳密に増加）。
- `cancel()` は以後の取り込みを止めるだけで、送信済みフレームは取り消さない。
- エンコーダ失敗時は溜めたフレームを破棄し、原因を保持して ERROR へ遷移する。
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol

import numpy as np

from ...common.errors import RecordingAbortedError, RecordingBusyError, RecordingFailedError
from ..core.frame import RenderFrame
from ..core.state import RenderState
from ..core.tickable import Tickable
from .gif import frame_delay_ms, total_frames

logger = logging.getLogger(__name__)


class RecordingState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    ENCODING = "encoding"
    DONE = "done"
    ABORTED = "aborted"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (RecordingState.DONE, RecordingState.ABORTED, RecordingState.ERROR)


@dataclass(frozen=True)
class RecordingProgress:
    state: RecordingState
    captured: int
    total: int
    error: str | None


class FrameEncoder(Protocol):
    """録画パイプラインが駆動するエンコーダの契約。"""

    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None: ...

    def finish(self) -> Any: ...

    def abort(self) -> None: ...


class FrameSource(Protocol):
    """フレームを供給するホストの契約（`BatchHost` / `InteractiveHost`）。"""

    state: RenderState
    realtime: bool

    @property
    def last_frame(self) -> RenderFrame | None: ...

    def attach(self, tickable: Tickable) -> None: ...

    def detach(self, tickable: Tickable) -> None: ...


class RecordingPipeline(Tickable):
    """固定枚数のフレームを取り込み、エンコーダへ渡して確定させる。"""

    def __init__(
        self,
        encoder: FrameEncoder,
        *,
        seconds: float,
        fps: int,
        clock: Callable[[], float] = time.perf_counter,
        on_done: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        on_abort: Callable[[], None] | None = None,
    ) -> None:
        self.encoder = encoder
        self.fps = max(1, int(fps))
        self.total = total_frames(seconds, self.fps)
        self.delay_ms = frame_delay_ms(self.fps)
        self._clock = clock
        self._on_done = on_done
        self._on_error = on_error
        self._on_abort = on_abort

        self._state = RecordingState.IDLE
        self._source: FrameSource | None = None
        self._captured = 0
        self._last_tick: int | None = None
        self._last_capture_ms: float | None = None
        self._captured_ticks: list[int] = []
        self._result: Any = None
        self._error: BaseException | None = None

    # ---- state ----
    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def captured_ticks(self) -> tuple[int, ...]:
        """取り込んだフレームの tick（取り込み順）。"""
        return tuple(self._captured_ticks)

    @property
    def error(self) -> BaseException | None:
        return self._error

    def progress(self) -> RecordingProgress:
        err = None if self._error is None else str(self._error)
        return RecordingProgress(self._state, self._captured, self.total, err)

    def result(self) -> Any:
        """DONE なら結果を返す。ABORTED/ERROR は対応する例外、未完了は `RuntimeError`。"""
        if self._state is RecordingState.DONE:
            return self._result
        if self._state is RecordingState.ABORTED:
            raise RecordingAbortedError("recording aborted")
        if self._state is RecordingState.ERROR:
            raise RecordingFailedError(f"recording failed: {self._error}") from self._error
        raise RuntimeError(f"recording not finished (state={self._state.value})")

    # ---- control ----
    def start(self, source: FrameSource) -> None:
        """ホストへ接続して取り込みを開始する。同一 RenderState に 2 本目は `RecordingBusyError`。"""
        if self._state is not RecordingState.IDLE:
            raise RuntimeError(f"recording already started (state={self._state.value})")
        owner = source.state.recording_owner
        if owner is not None and owner is not self:
            raise RecordingBusyError("a recording is already running on this render state")
        source.state.recording_owner = self
        self._source = source
        self._state = RecordingState.CAPTURING
        source.attach(self)
        logger.info(
            "recording started: frames=%d fps=%d realtime=%s", self.total, self.fps, source.realtime
        )

    def cancel(self) -> None:
        """取り込みを中断する。送信済みフレームは取り消さない。"""
        if self._state in (RecordingState.IDLE, RecordingState.CAPTURING):
            self._abort()

    # ---- Tickable ----
    def tick(self, dt: float) -> None:
        if self._state is not RecordingState.CAPTURING or self._source is None:
            return
        frame = self._source.last_frame
        if frame is None:
            return
        if self._last_tick is not None and frame.tick <= self._last_tick:
            return
        if self._source.realtime and not self._throttle_ready():
            return
        try:
            self.encoder.add_frame(frame.pixels, self.delay_ms)
        except Exception as e:  # エンコーダ起因の失敗は ERROR へ
            self._fail(e)
            return
        self._captured += 1
        self._last_tick = frame.tick
        self._captured_ticks.append(frame.tick)
        self._log_progress()
        if self._captured >= self.total:
            self._encode()

    # ---- internal helpers ----
    def _throttle_ready(self) -> bool:
        now_ms = self._clock() * 1000.0
        if self._last_capture_ms is not None and now_ms - self._last_capture_ms < 1000.0 / self.fps:
            return False
        self._last_capture_ms = now_ms
        return True

    def _log_progress(self) -> None:
        step = max(1, self.total // 10)
        if self._captured % step == 0 or self._captured == self.total:
            pct = int(round(100 * self._captured / self.total))
            logger.info("recording progress: %d%% (%d/%d)", pct, self._captured, self.total)

    def _release(self) -> None:
        src = self._source
        if src is None:
            return
        src.detach(self)
        if src.state.recording_owner is self:
            src.state.recording_owner = None

    def _encode(self) -> None:
        self._release()
        self._state = RecordingState.ENCODING
        try:
            result = self.encoder.finish()
        except Exception as e:
            self._fail(e)
            return
        self._result = result
        self._state = RecordingState.DONE
        logger.info("recording done: %d frames", self._captured)
        if self._on_done is not None:
            self._on_done(result)

    def _fail(self, error: BaseException) -> None:
        self._release()
        self.encoder.abort()
        self._error = error
        self._state = RecordingState.ERROR
        logger.error("recording failed: %s", error)
        if self._on_error is not None:
            self._on_error(error)

    def _abort(self) -> None:
        self._release()
        self.encoder.abort()
        self._state = RecordingState.ABORTED
        logger.warning("recording aborted after %d/%d frames", self._captured, self.total)
        if self._on_abort is not None:
            self._on_abort()


__all__ = [
    "RecordingPipeline",
    "RecordingProgress",
    "RecordingState",
    "FrameEncoder",
    "FrameSource",
]
