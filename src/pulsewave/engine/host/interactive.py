"""
どこで: `pulsewave.engine.host.interactive`。
何を: pyglet ウィンドウ上で波形をライブ表示する対話ホスト。キー操作で GIF 録画/SVG 保存を行う。
なぜ: 表示リフレッシュに合わせて描画しつつ、バッチと同じ描画コアでフレームを得るため。

キー操作:
- G: GIF 録画を開始（既定秒数/fps）。録画中は無視して警告のみ。
- S: 現在の状態を SVG へ保存。
- Esc: ウィンドウを閉じて終了。

注意:
- ラスタ化は Pillow（CPU）で行い、毎フレームの画像を `ImageData` としてウィンドウへ貼る。
- ヘッドレス/仮想環境では pyglet の初期化に失敗する場合がある（呼び出し側で `RenderTargetError`）。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pyglet
from pyglet.window import key

from ...common.errors import RecordingBusyError, RenderTargetError
from ...util.paths import default_export_path, ensure_gif_dir, ensure_svg_dir
from ..core.config import DEFAULT_CONFIG, RenderConfig
from ..core.scheduler import TickCallback
from ..export.gif import GifEncoder, GifExportParams
from ..export.recording import RecordingPipeline
from ..export.svg import SvgExportParams, write_svg
from ..render.renderer import FrameRenderer
from .base import RenderHost

logger = logging.getLogger(__name__)


class PygletScheduler:
    """`pyglet.clock.schedule_once` による表示駆動スケジューラ。"""

    def __init__(self, interval: float = 1.0 / 60.0) -> None:
        self.interval = max(0.0, float(interval))
        self._pending: list[Callable[[float], None]] = []

    def schedule_tick(self, callback: TickCallback) -> None:
        def _fire(dt: float) -> None:
            if _fire in self._pending:
                self._pending.remove(_fire)
            callback(dt)

        self._pending.append(_fire)
        pyglet.clock.schedule_once(_fire, self.interval)

    def cancel(self) -> None:
        for fn in self._pending:
            pyglet.clock.unschedule(fn)
        self._pending.clear()


def frame_to_image_data(pixels: Any) -> pyglet.image.ImageData:
    """H×W×3 uint8 配列を pyglet の ImageData（上→下の行順）に変換する。"""
    h, w = int(pixels.shape[0]), int(pixels.shape[1])
    return pyglet.image.ImageData(w, h, "RGB", pixels.tobytes(), pitch=-w * 3)


class EcgWindow(pyglet.window.Window):
    """ホストの最新フレームを貼り付けるだけのウィンドウ。"""

    def __init__(self, host: "InteractiveHost", width: int, height: int, caption: str) -> None:
        super().__init__(width=width, height=height, caption=caption, resizable=True)
        self._host = host

    def on_draw(self):  # pyglet 既定のイベント名
        self.clear()
        frame = self._host.last_frame
        if frame is None:
            return
        frame_to_image_data(frame.pixels).blit(0, 0)

    def on_resize(self, width, height):  # noqa: ANN001
        super().on_resize(width, height)
        if width > 0 and height > 0:
            self._host.resize(width, height)

    def on_key_press(self, symbol, modifiers):  # noqa: ANN001
        if symbol == key.ESCAPE:
            self.close()
            return
        if symbol == key.G:
            self._host.export_gif()
        if symbol == key.S:
            self._host.export_svg()

    def on_close(self):
        self._host.stop()
        super().on_close()
        pyglet.app.exit()


class InteractiveHost(RenderHost):
    """pyglet のイベントループ上で描画を進める対話ホスト。"""

    realtime = True

    def __init__(
        self,
        width: int,
        height: int,
        *,
        config: RenderConfig = DEFAULT_CONFIG,
        renderer: FrameRenderer | None = None,
        caption: str = "pulsewave",
        refresh_hz: float = 60.0,
        gif_params: GifExportParams | None = None,
        svg_params: SvgExportParams | None = None,
        name_prefix: str | None = None,
    ) -> None:
        super().__init__(
            width,
            height,
            PygletScheduler(1.0 / max(1.0, float(refresh_hz))),
            config=config,
            renderer=renderer,
        )
        self.gif_params = gif_params if gif_params is not None else GifExportParams()
        self.svg_params = svg_params if svg_params is not None else SvgExportParams()
        self.name_prefix = name_prefix
        self.recording: RecordingPipeline | None = None
        try:
            self.window = EcgWindow(
                self, self.state.surface_width, self.state.surface_height, caption
            )
        except Exception as e:  # pyglet の初期化失敗（ディスプレイ無し等）
            raise RenderTargetError(f"cannot open render window: {e}") from e

    # ---- exports ----
    def export_gif(self) -> RecordingPipeline | None:
        """GIF 録画を開始する。録画中なら警告して None。"""
        path = default_export_path(
            ensure_gif_dir(),
            self.state.surface_width,
            self.state.surface_height,
            ".gif",
            self.name_prefix,
        )
        encoder = GifEncoder(self.gif_params, path)
        pipeline = RecordingPipeline(
            encoder,
            seconds=self.gif_params.seconds,
            fps=self.gif_params.fps,
            on_done=lambda result: logger.info("GIF saved: %s", result),
            on_error=lambda err: logger.error("GIF export failed: %s", err),
        )
        try:
            pipeline.start(self)
        except RecordingBusyError:
            logger.warning("recording already in progress; ignored")
            return None
        self.recording = pipeline
        return pipeline

    def export_svg(self) -> Path:
        path = default_export_path(
            ensure_svg_dir(),
            self.state.surface_width,
            self.state.surface_height,
            ".svg",
            self.name_prefix,
        )
        return write_svg(path, self.state, self.renderer, self.svg_params)

    # ---- loop ----
    def run(self) -> None:
        """描画ループを開始し、ウィンドウが閉じられるまでブロックする。"""
        self.start()
        try:
            pyglet.app.run()
        finally:
            self.stop()
            if self.recording is not None and not self.recording.state.is_terminal:
                self.recording.cancel()


__all__ = ["InteractiveHost", "PygletScheduler", "EcgWindow", "frame_to_image_data"]
