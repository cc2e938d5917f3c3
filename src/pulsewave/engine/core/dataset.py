"""
どこで: `pulsewave.engine.core.dataset`。
何を: 入力データセット（`{username, data, color?}` の列）を不変の `Series` タプルへ正規化する。
なぜ: 描画コアが受け取る形を 1 つに固定し、欠損/不正な `data` をエラーにせず空系列として扱うため。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ...util.color import to_u8_rgba
from .config import DEFAULT_CONFIG, RenderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Series:
    username: str
    values: tuple[float, ...]
    color: str


Dataset = tuple[Series, ...]


def _clean_values(raw: Any) -> tuple[float, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    out: list[float] = []
    for v in raw:
        # bool は int の派生だが件数ではない
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            continue
        f = float(v)
        if math.isnan(f) or math.isinf(f):
            continue
        out.append(f)
    return tuple(out)


def _valid_color(value: Any, username: str) -> Any:
    """描画できない色指定は None（パレットへ戻す）。"""
    if value is None:
        return None
    try:
        to_u8_rgba(value)
    except (TypeError, ValueError):
        logger.warning("invalid color %r for %r; using palette", value, username)
        return None
    return value


def normalize_dataset(
    entries: Iterable[Mapping[str, Any] | Series] | None,
    config: RenderConfig = DEFAULT_CONFIG,
) -> Dataset:
    """データセットを正規化する。

    - `data` が無い/配列でない → 空系列。
    - 配列内の非数値・NaN・inf は捨てる。
    - `color` 未指定、または解釈できない色 → パレットから順番に割り当てる。
    - username 重複は先勝ち（警告ログ）。
    """
    result: list[Series] = []
    seen: set[str] = set()
    for i, entry in enumerate(entries or ()):
        if isinstance(entry, Series):
            username, values, color = entry.username, entry.values, entry.color
        else:
            username = str(entry.get("username", "") or f"user{i + 1}")
            values = _clean_values(entry.get("data"))
            color = entry.get("color") or None
        if username in seen:
            logger.warning("duplicate username %r ignored", username)
            continue
        seen.add(username)
        color = config.pick_color(i, _valid_color(color, username))
        result.append(Series(username=username, values=tuple(values), color=color))
    return tuple(result)


__all__ = ["Series", "Dataset", "normalize_dataset"]
