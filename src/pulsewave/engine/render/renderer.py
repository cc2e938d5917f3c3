"""
どこで: `pulsewave.engine.render.renderer`。
何を: 1 tick ぶんのフレームを固定順序で合成する `FrameRenderer`。
なぜ: 対話/バッチの両ホストで共有する唯一の描画コアとし、描画順と状態更新を 1 か所に閉じ込めるため。

描画順（入れ替え不可）:
1) 背景クリア
2) グリッド（目標列数から間隔を決める）
3) ユーザー毎: バッファ前進 → 折れ線 → 末端発光点
4) 走査光（全トラックにまたがるグラデーション帯）
5) ステータスパネル（常に最前面）

副作用: 1 回の `render()` でバッファ/走査位置/tick をちょうど 1 回だけ進める。
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

import numpy as np

from ..core.config import DEFAULT_CONFIG, RenderConfig
from ..core.dataset import Dataset, Series, normalize_dataset
from ..core.frame import RenderFrame
from ..core.state import RenderState
from ..signal.heartbeat import HeartbeatGenerator, next_tick
from ..signal.params import WaveformParams, compute_params
from ...util.color import with_alpha
from .layout import Layout, amplitude_scale, compute_layout
from .overlay import draw_status_panel, status_rows
from .scan import ScanBeamController
from .surface import RasterSurface

logger = logging.getLogger(__name__)


class FrameRenderer:
    """データセットと波形パラメータを保持し、`RenderState` を進めながらフレームを描く。"""

    def __init__(
        self,
        config: RenderConfig = DEFAULT_CONFIG,
        *,
        generator: HeartbeatGenerator | None = None,
        scan: ScanBeamController | None = None,
    ) -> None:
        self.config = config
        self.generator = generator if generator is not None else HeartbeatGenerator(config)
        self.scan = scan if scan is not None else ScanBeamController(config)
        self._dataset: Dataset = ()
        self._params: tuple[WaveformParams, ...] = ()

    # ---- dataset ----
    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def params(self) -> tuple[WaveformParams, ...]:
        return self._params

    def set_dataset(
        self,
        entries: Iterable[Mapping[str, Any] | Series] | None,
        state: RenderState | None = None,
    ) -> Dataset:
        """データセットを丸ごと差し替え、パラメータを再計算する。

        `state` を渡した場合は次の tick より前にバッファ/走査位置を初期化する。
        """
        self._dataset = normalize_dataset(entries, self.config)
        self._params = tuple(compute_params(s.values, self.config) for s in self._dataset)
        if state is not None:
            state.reset()
        logger.debug("dataset replaced: %d series", len(self._dataset))
        return self._dataset

    def layout_for(self, state: RenderState) -> Layout:
        return compute_layout(state.surface_width, state.surface_height, len(self._dataset), self.config)

    # ---- render ----
    def render(self, state: RenderState, surface: RasterSurface) -> RenderFrame:
        """1 tick ぶん描画して状態を進め、描画に使った tick 付きのフレームを返す。"""
        cfg = self.config
        layout = self.layout_for(state)
        state.track_height = layout.track_height
        tick = state.tick

        # 1) 背景
        surface.clear(cfg.background)
        # 2) グリッド
        self._draw_grid(surface, layout)
        # 3) 波形
        for idx, (series, params) in enumerate(zip(self._dataset, self._params)):
            self._draw_track(surface, state, layout, idx, series, params, tick)
        # 4) 走査光
        if self._dataset:
            self._draw_scan_beam(surface, state, layout)
        self.scan.advance(state, layout.plot_width)
        # 5) ステータス
        rows = status_rows(
            [(s.username, p.average, s.color) for s, p in zip(self._dataset, self._params)],
            cfg,
        )
        draw_status_panel(surface, rows, cfg)

        state.tick = next_tick(tick, cfg)
        return RenderFrame(tick=tick, pixels=surface.to_array())

    # ---- steps ----
    def grid_spacing(self, width: int) -> int:
        return max(self.config.grid_min_spacing, int(width) // self.config.grid_target_columns)

    def _draw_grid(self, surface: RasterSurface, layout: Layout) -> None:
        cfg = self.config
        w, h = layout.surface_width, layout.surface_height
        step = self.grid_spacing(w)
        for x in range(0, w + 1, step):
            surface.stroke_path(((x, 0), (x, h)), cfg.grid_color, cfg.grid_line_width)
        for y in range(0, h + 1, step):
            surface.stroke_path(((0, y), (w, y)), cfg.grid_color, cfg.grid_line_width)

    def _draw_track(
        self,
        surface: RasterSurface,
        state: RenderState,
        layout: Layout,
        idx: int,
        series: Series,
        params: WaveformParams,
        tick: int,
    ) -> None:
        cfg = self.config
        track = layout.tracks[idx]
        scale = amplitude_scale(track.height, params.intensity, cfg)

        buf = state.buffers.ensure_filled(series.username, layout.plot_width, track.midline)
        displacement = self.generator.sample(tick, params) * scale
        # 変位は上向き正、サーフェスの y は下向き
        buf.advance(track.midline - displacement)

        ys = buf.values()
        xs = layout.plot_x0 + np.arange(ys.shape[0], dtype=np.float64)
        surface.stroke_path(np.column_stack((xs, ys)), series.color, cfg.line_width)

        glow_x = float(xs[-1])
        glow_y = float(ys[-1])
        surface.fill_arc(glow_x, glow_y, cfg.glow_radius, series.color, glow=cfg.glow_blur)

    def _draw_scan_beam(self, surface: RasterSurface, state: RenderState, layout: Layout) -> None:
        cfg = self.config
        beam = self.scan.beam(state, layout)
        if beam.width <= 0:
            return
        surface.linear_gradient_fill(
            beam.left_x,
            beam.top,
            beam.width,
            beam.bottom - beam.top,
            with_alpha(cfg.beam_color, 0.0),
            with_alpha(cfg.beam_color, cfg.beam_opacity),
        )


__all__ = ["FrameRenderer"]
