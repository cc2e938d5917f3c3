"""
どこで: `pulsewave.engine.render.layout`。
何を: サーフェス寸法とユーザー数から、トラック帯（上端/中線/高さ）と描画幅を決める。
なぜ: トラック同士が重ならず、右端の発光点が欠けない配置を 1 か所で計算するため。
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.config import DEFAULT_CONFIG, RenderConfig


@dataclass(frozen=True)
class TrackGeometry:
    index: int
    top: int
    midline: int
    height: int


@dataclass(frozen=True)
class Layout:
    surface_width: int
    surface_height: int
    track_height: int
    track_count: int
    plot_x0: int
    plot_width: int
    tracks: tuple[TrackGeometry, ...]

    @property
    def tracks_top(self) -> int:
        return self.tracks[0].top if self.tracks else 0

    @property
    def tracks_bottom(self) -> int:
        return self.tracks_top + self.track_count * self.track_height


def compute_layout(
    width: int, height: int, n_users: int, config: RenderConfig = DEFAULT_CONFIG
) -> Layout:
    """トラック配置を計算する。

    - `track_count = max(1, n_users)`（0 人でも 1 帯ぶんの枠を確保）
    - `track_height = max(min_track_height, (height - top - bottom) // track_count)`
    - `plot_width = max(min_plot_width, width - left - right_safe_pad)`
    """
    track_count = max(1, int(n_users))
    usable_h = int(height) - config.top_pad - config.bottom_pad
    track_h = max(config.min_track_height, usable_h // track_count)
    plot_w = max(config.min_plot_width, int(width) - config.left_pad - config.right_safe_pad)
    tracks = tuple(
        TrackGeometry(
            index=i,
            top=config.top_pad + i * track_h,
            midline=config.top_pad + i * track_h + track_h // 2,
            height=track_h,
        )
        for i in range(track_count)
    )
    return Layout(
        surface_width=int(width),
        surface_height=int(height),
        track_height=track_h,
        track_count=track_count,
        plot_x0=config.left_pad,
        plot_width=plot_w,
        tracks=tracks,
    )


def amplitude_scale(
    track_height: int, intensity: float, config: RenderConfig = DEFAULT_CONFIG
) -> float:
    """トラック内の最大変位を `max_amplitude_frac * track_height` に収める倍率（<= 1）。"""
    expected_peak = config.unit_peak * max(float(intensity), config.intensity_epsilon)
    max_amplitude = float(track_height) * config.max_amplitude_frac
    return min(1.0, max_amplitude / expected_peak)


__all__ = ["TrackGeometry", "Layout", "compute_layout", "amplitude_scale"]
