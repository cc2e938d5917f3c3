from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from pulsewave.common.errors import (
    RecordingAbortedError,
    RecordingBusyError,
    RecordingFailedError,
)
from pulsewave.engine.core.frame import RenderFrame
from pulsewave.engine.core.state import RenderState
from pulsewave.engine.export.gif import GifEncoder, GifExportParams
from pulsewave.engine.export.recording import RecordingPipeline, RecordingState
from pulsewave.engine.host.batch import BatchHost


class _FakeEncoder:
    def __init__(self, *, fail_on_finish: Exception | None = None) -> None:
        self.frames: list[np.ndarray] = []
        self.delays: list[int] = []
        self.aborted = False
        self.fail_on_finish = fail_on_finish

    def add_frame(self, pixels: np.ndarray, delay_ms: int) -> None:
        self.frames.append(pixels)
        self.delays.append(delay_ms)

    def finish(self) -> str:
        if self.fail_on_finish is not None:
            raise self.fail_on_finish
        return "done"

    def abort(self) -> None:
        self.aborted = True
        self.frames.clear()


class _FakeSource:
    """実時間ホスト相当（フレームは手で差し替える）。"""

    realtime = True

    def __init__(self) -> None:
        self.state = RenderState.create(300, 200)
        self.last_frame: RenderFrame | None = None
        self.attached: list = []

    def attach(self, t) -> None:
        self.attached.append(t)

    def detach(self, t) -> None:
        self.attached.remove(t)

    def show(self, tick: int) -> None:
        self.last_frame = RenderFrame(tick=tick, pixels=np.zeros((2, 2, 3), np.uint8))


@pytest.mark.integration
def test_headless_recording_captures_exact_frame_count(small_dataset) -> None:
    host = BatchHost(300, 200)
    host.set_dataset(small_dataset)
    enc = _FakeEncoder()
    pipe = RecordingPipeline(enc, seconds=5, fps=10)
    assert pipe.total == 50

    assert host.record(pipe) == "done"
    assert len(enc.frames) == 50
    assert set(enc.delays) == {100}
    ticks = pipe.captured_ticks
    assert len(ticks) == 50
    assert all(b > a for a, b in zip(ticks, ticks[1:]))
    assert pipe.state is RecordingState.DONE
    assert pipe.progress().captured == 50
    assert host.state.recording_owner is None


def test_second_pipeline_on_same_state_is_busy() -> None:
    host = BatchHost(300, 200)
    first = RecordingPipeline(_FakeEncoder(), seconds=1, fps=10)
    first.start(host)
    second = RecordingPipeline(_FakeEncoder(), seconds=1, fps=10)
    with pytest.raises(RecordingBusyError):
        second.start(host)
    first.cancel()
    # 解放後は開始できる
    second.start(host)
    assert second.state is RecordingState.CAPTURING


def test_cancel_stops_capture_and_aborts_encoder(small_dataset) -> None:
    host = BatchHost(300, 200)
    host.set_dataset(small_dataset)
    enc = _FakeEncoder()
    pipe = RecordingPipeline(enc, seconds=5, fps=10)
    pipe.start(host)
    host.run_ticks(3)
    assert pipe.progress().captured == 3

    pipe.cancel()
    assert pipe.state is RecordingState.ABORTED
    assert enc.aborted
    assert host.state.recording_owner is None
    with pytest.raises(RecordingAbortedError):
        pipe.result()

    host.run_ticks(3)
    assert pipe.progress().captured == 3


def test_encoder_failure_surfaces_as_error(small_dataset) -> None:
    host = BatchHost(300, 200)
    host.set_dataset(small_dataset)
    boom = OSError("disk full")
    enc = _FakeEncoder(fail_on_finish=boom)
    errors: list[BaseException] = []
    pipe = RecordingPipeline(enc, seconds=0.3, fps=10, on_error=errors.append)

    with pytest.raises(RecordingFailedError) as ei:
        host.record(pipe)
    assert ei.value.__cause__ is boom
    assert pipe.state is RecordingState.ERROR
    assert enc.aborted
    assert errors == [boom]
    assert "disk full" in (pipe.progress().error or "")


def test_realtime_capture_is_throttled(manual_clock) -> None:
    src = _FakeSource()
    enc = _FakeEncoder()
    pipe = RecordingPipeline(enc, seconds=1, fps=10, clock=manual_clock)
    pipe.start(src)

    src.show(1)
    pipe.tick(0.0)
    assert len(enc.frames) == 1  # 初回は即時

    src.show(2)
    manual_clock.advance(0.05)
    pipe.tick(0.05)
    assert len(enc.frames) == 1  # 100ms 未満

    src.show(3)
    manual_clock.advance(0.1)
    pipe.tick(0.1)
    assert len(enc.frames) == 2

    # 同じ tick は二度取り込まない
    manual_clock.advance(1.0)
    pipe.tick(1.0)
    assert len(enc.frames) == 2
    assert pipe.captured_ticks == (1, 3)


def test_result_before_finish_is_an_error() -> None:
    pipe = RecordingPipeline(_FakeEncoder(), seconds=1, fps=10)
    with pytest.raises(RuntimeError):
        pipe.result()
    assert pipe.progress().state is RecordingState.IDLE


@pytest.mark.integration
def test_resize_during_recording_keeps_start_size(small_dataset) -> None:
    host = BatchHost(300, 200)
    host.set_dataset(small_dataset)
    enc = GifEncoder(GifExportParams(seconds=1, fps=10))
    pipe = RecordingPipeline(enc, seconds=1, fps=10)
    pipe.start(host)
    host.run_ticks(3)
    assert host.resize(400, 300)
    host.run_ticks(20)

    assert pipe.state is RecordingState.DONE, pipe.error
    assert pipe.progress().captured == 10
    assert enc.source_size == (300, 200)
    with Image.open(io.BytesIO(pipe.result())) as im:
        assert im.size == (300, 200)
