"""
どこで: `pulsewave.engine.core.config`。
何を: 波形生成・レイアウト・描画・オーバーレイの定数を 1 つの不変データクラスにまとめる。
なぜ: 対話ホストとバッチホストが同じ値を共有し、ピクセル単位で同じフレームを得るため。
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RenderConfig:
    """ECG 描画の定数一式。

    Parameters
    ----------
    grid_target_columns : int
        グリッドの目標列数。間隔は `max(grid_min_spacing, width // grid_target_columns)`。
    amp_base : float
        基礎振幅（px）。強度 1.0 で QRS 単位波形がこの倍率で描かれる。
    max_intensity, intensity_per_avg : float
        平均活動量 → 強度の写像（上限つき線形）。
    speed_base, speed_slope, min_period : float/int
        平均活動量 → 周期（tick 数）の写像。平均が大きいほど周期が短い。
    qrs_center, qrs_width : float
        1 周期内の尖峰窓の中心と幅（位相 0–1）。
    q_depth, r_height, s_depth : float
        尖峰の Q/R/S 水準（単位振幅比）。
    noise_frac : float
        尖峰窓外の揺らぎ振幅（`amp_base * intensity` 比）。
    qrs_tick_boost, tick_reference_period : int
        基準周期の尖峰窓内で tick を何歩進めるか（尖峰を鋭く見せる）。
    glow_radius, glow_blur : int
        末端発光点の半径とぼかし量（px）。
    top_pad, left_pad, bottom_pad, right_extra : int
        余白。右余白は `glow_radius + right_extra`（発光点を欠けずに描く）。
    min_track_height, min_plot_width : int
        トラック高さ/描画幅の下限。
    max_amplitude_frac : float
        トラック高さに対する最大振幅比。
    beam_opacity, beam_width_frac, beam_min_width, scan_step : float/int
        走査光の不透明度・幅・1 tick あたりの移動量。
    diag_* : 各種
        左上ステータスパネルの書式。
    palette : tuple[str, ...]
        系列色の既定パレット（インデックス順に循環）。
    min_surface_width, min_surface_height : int
        リサイズ時の最小サーフェス寸法。
    """

    # grid
    grid_target_columns: int = 40
    grid_min_spacing: int = 20
    grid_color: str = "rgba(0,255,0,0.35)"
    grid_line_width: int = 1

    # signal
    amp_base: float = 50.0
    max_intensity: float = 3.0
    intensity_per_avg: float = 0.5
    speed_base: float = 400.0
    speed_slope: float = 10.0
    min_period: int = 80
    qrs_center: float = 0.82
    qrs_width: float = 0.06
    q_depth: float = -0.55
    r_height: float = 1.6
    s_depth: float = -0.45
    noise_frac: float = 0.05
    qrs_tick_boost: int = 2
    tick_reference_period: int = 200

    # waveform
    background: str = "black"
    line_width: int = 2
    glow_radius: int = 6
    glow_blur: int = 20

    # layout
    top_pad: int = 10
    left_pad: int = 10
    bottom_pad: int = 10
    right_extra: int = 4
    min_track_height: int = 50
    min_plot_width: int = 60
    max_amplitude_frac: float = 0.45
    intensity_epsilon: float = 0.001

    # scan beam
    beam_color: str = "lime"
    beam_opacity: float = 0.25
    beam_width_frac: float = 0.08
    beam_min_width: int = 60
    scan_step: int = 1

    # status overlay
    diag_font_size: int = 14
    diag_line_height: int = 18
    diag_pad_x: int = 10
    diag_pad_y: int = 10
    diag_baseline: int = 12
    diag_color: str = "rgba(0,255,0,0.9)"
    diag_glow: int = 8
    diag_glow_color: str = "lime"
    diag_panel_color: str = "rgba(0,0,0,0.7)"

    palette: tuple[str, ...] = (
        "lime",
        "cyan",
        "yellow",
        "magenta",
        "orange",
        "deepskyblue",
        "springgreen",
        "gold",
    )

    # surface
    min_surface_width: int = 300
    min_surface_height: int = 200

    @property
    def right_safe_pad(self) -> int:
        return int(self.glow_radius + self.right_extra)

    @property
    def unit_peak(self) -> float:
        """強度 1.0 の単位波形が取りうる最大絶対変位（px）。"""
        return float(self.amp_base) * max(
            abs(self.q_depth), abs(self.r_height), abs(self.s_depth)
        )

    def pick_color(self, index: int, override: str | None = None) -> str:
        if override:
            return override
        return self.palette[index % len(self.palette)]


DEFAULT_CONFIG = RenderConfig()

__all__ = ["RenderConfig", "DEFAULT_CONFIG"]
