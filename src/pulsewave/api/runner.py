"""
どこで: `pulsewave.api.runner`。
何を: データセットから GIF/SVG を書き出す、またはライブ表示するための高水準関数。
なぜ: CLI やスクリプトから、ホスト/パイプライン/エンコーダの組み立てを意識せずに使えるようにするため。

既定値の解決順:
1) 引数で明示された値
2) `configs/default.yaml`（+ ルート `config.yaml`）の `gif` / `svg` / `live` 節
3) 環境変数由来の設定（`PWV_*`, `common.settings`）
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..common import settings
from ..engine.core.config import DEFAULT_CONFIG, RenderConfig
from ..engine.core.dataset import Series
from ..engine.export.gif import GifEncoder, GifExportParams
from ..engine.export.recording import RecordingPipeline
from ..engine.export.svg import SvgExportParams, build_svg, write_svg
from ..engine.host.batch import BatchHost
from ..engine.render.renderer import FrameRenderer
from ..engine.signal.heartbeat import HeartbeatGenerator
from ..util.utils import config_section

logger = logging.getLogger(__name__)

DatasetInput = Iterable[Mapping[str, Any] | Series] | None


def _known_fields(cls: type, section: Mapping[str, Any]) -> dict[str, Any]:
    names = {f.name for f in dataclasses.fields(cls)}
    return {k: v for k, v in section.items() if k in names and v is not None}


def resolve_gif_params(**overrides: Any) -> GifExportParams:
    """設定ファイル/環境変数/引数から `GifExportParams` を組み立てる。"""
    s = settings.get()
    merged: dict[str, Any] = {"seconds": s.DEFAULT_SECONDS, "fps": s.DEFAULT_FPS}
    merged.update(_known_fields(GifExportParams, config_section("gif")))
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return GifExportParams(**merged)


def resolve_svg_params(**overrides: Any) -> SvgExportParams:
    merged = _known_fields(SvgExportParams, config_section("svg"))
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return SvgExportParams(**merged)


def resolve_size(width: int | None, height: int | None) -> tuple[int, int]:
    s = settings.get()
    render = config_section("render")
    w = width or render.get("width") or s.BATCH_WIDTH
    h = height or render.get("height") or s.BATCH_HEIGHT
    return int(w), int(h)


def make_renderer(config: RenderConfig = DEFAULT_CONFIG, seed: int | None = None) -> FrameRenderer:
    """ノイズ乱数のシードを反映した描画器を作る（None は設定の `PWV_NOISE_SEED`）。"""
    if seed is None:
        seed = settings.get().NOISE_SEED
    return FrameRenderer(config, generator=HeartbeatGenerator(config, seed=seed))


def render_gif(
    dataset: DatasetInput,
    *,
    out: Path | str | None = None,
    params: GifExportParams | None = None,
    width: int | None = None,
    height: int | None = None,
    config: RenderConfig = DEFAULT_CONFIG,
    seed: int | None = None,
) -> Path | bytes:
    """ヘッドレスで録画して GIF を返す。`out` 指定時はファイルパス、省略時はバイト列。"""
    p = params if params is not None else resolve_gif_params()
    w, h = resolve_size(width, height)
    host = BatchHost(w, h, config=config, renderer=make_renderer(config, seed))
    host.set_dataset(dataset)
    encoder = GifEncoder(p, out)
    pipeline = RecordingPipeline(encoder, seconds=p.seconds, fps=p.fps)
    logger.info(
        "rendering GIF: %dx%d users=%d frames=%d", w, h, len(host.dataset), pipeline.total
    )
    return host.record(pipeline)


def render_svg(
    dataset: DatasetInput,
    *,
    out: Path | str | None = None,
    params: SvgExportParams | None = None,
    warmup_ticks: int | None = None,
    width: int | None = None,
    height: int | None = None,
    config: RenderConfig = DEFAULT_CONFIG,
    seed: int | None = None,
) -> Path | str:
    """`warmup_ticks`（既定: 描画幅ぶん）進めた状態の SVG を返す。`out` 指定時はファイルパス。"""
    p = params if params is not None else resolve_svg_params()
    w, h = resolve_size(width, height)
    host = BatchHost(w, h, config=config, renderer=make_renderer(config, seed))
    host.set_dataset(dataset)
    if warmup_ticks is None:
        warmup_ticks = config_section("svg").get("warmup_ticks") or host.renderer.layout_for(
            host.state
        ).plot_width
    host.run_ticks(int(warmup_ticks))
    if out is None:
        return build_svg(host.state, host.renderer, p)
    return write_svg(out, host.state, host.renderer, p)


def run_live(
    dataset: DatasetInput,
    *,
    width: int | None = None,
    height: int | None = None,
    config: RenderConfig = DEFAULT_CONFIG,
    seed: int | None = None,
    gif_params: GifExportParams | None = None,
    svg_params: SvgExportParams | None = None,
    name_prefix: str | None = None,
) -> None:
    """pyglet ウィンドウでライブ表示する（ウィンドウを閉じるまでブロック）。"""
    # pyglet はここで初めて import する（ヘッドレス環境でのバッチ利用を妨げない）
    from ..engine.host.interactive import InteractiveHost

    live = config_section("live")
    w, h = resolve_size(width, height)
    host = InteractiveHost(
        w,
        h,
        config=config,
        renderer=make_renderer(config, seed),
        refresh_hz=float(live.get("refresh_hz", 60.0)),
        gif_params=gif_params if gif_params is not None else resolve_gif_params(),
        svg_params=svg_params if svg_params is not None else resolve_svg_params(),
        name_prefix=name_prefix,
    )
    host.set_dataset(dataset)
    logger.info("live view: %dx%d users=%d (G: GIF, S: SVG, Esc: quit)", w, h, len(host.dataset))
    host.run()


__all__ = [
    "render_gif",
    "render_svg",
    "run_live",
    "resolve_gif_params",
    "resolve_svg_params",
    "resolve_size",
    "make_renderer",
]
