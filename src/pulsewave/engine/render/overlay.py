"""
どこで: `pulsewave.engine.render.overlay`。
何を: 平均活動量から状態（no activity/low/healthy/high）を判定し、左上のステータスパネルを描く。
なぜ: 波形と同じフレームに診断を焼き込み、書き出した GIF 単体でも状態が読めるようにするため。

判定しきい値（固定）:
- avg == 0 → no activity
- 0 < avg < 1 → low
- 1 <= avg < 3 → healthy
- avg >= 3 → high（表示名 "Monster"）
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from ..core.config import DEFAULT_CONFIG, RenderConfig
from .surface import RasterSurface


class ActivityStatus(str, Enum):
    NO_ACTIVITY = "no activity"
    LOW = "low"
    HEALTHY = "healthy"
    HIGH = "high"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ActivityStatus.NO_ACTIVITY: "No activity",
    ActivityStatus.LOW: "Low",
    ActivityStatus.HEALTHY: "Healthy",
    ActivityStatus.HIGH: "Monster",
}


def classify_status(average: float) -> ActivityStatus:
    if average <= 0:
        return ActivityStatus.NO_ACTIVITY
    if average < 1:
        return ActivityStatus.LOW
    if average < 3:
        return ActivityStatus.HEALTHY
    return ActivityStatus.HIGH


@dataclass(frozen=True)
class OverlayRow:
    text: str
    color: str


def status_rows(
    entries: Sequence[tuple[str, float, str]], config: RenderConfig = DEFAULT_CONFIG
) -> list[OverlayRow]:
    """`(username, average, color)` 列からパネル行（見出し + 1 ユーザー 1 行）を作る。"""
    rows = [OverlayRow("Status:", config.diag_color)]
    for username, avg, color in entries:
        status = classify_status(avg)
        rows.append(OverlayRow(f"{username}: {status.label} (avg {avg:.2f})", color))
    return rows


def panel_size(
    surface: RasterSurface, rows: Sequence[OverlayRow], config: RenderConfig = DEFAULT_CONFIG
) -> tuple[int, int]:
    max_w = max((surface.measure_text(r.text, config.diag_font_size) for r in rows), default=0.0)
    panel_w = int(-(-(max_w + config.diag_pad_x * 2) // 1))
    panel_h = len(rows) * config.diag_line_height + config.diag_pad_y * 2
    return panel_w, panel_h


def draw_status_panel(
    surface: RasterSurface, rows: Sequence[OverlayRow], config: RenderConfig = DEFAULT_CONFIG
) -> tuple[int, int]:
    """半透明の下地に行を描き、パネルの (幅, 高さ) を返す。最前面に描くこと。"""
    panel_w, panel_h = panel_size(surface, rows, config)
    surface.fill_rect(0, 0, panel_w, panel_h, config.diag_panel_color)
    y = config.diag_pad_y + config.diag_baseline
    for r in rows:
        surface.fill_text(
            config.diag_pad_x,
            y,
            r.text,
            r.color,
            config.diag_font_size,
            glow=config.diag_glow,
            glow_color=config.diag_glow_color,
        )
        y += config.diag_line_height
    return panel_w, panel_h


__all__ = [
    "ActivityStatus",
    "classify_status",
    "OverlayRow",
    "status_rows",
    "panel_size",
    "draw_status_panel",
]
