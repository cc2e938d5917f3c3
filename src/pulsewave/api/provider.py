"""
どこで: `pulsewave.api.provider`。
何を: 活動系列（日付ラベル + 日毎の件数）を供給するプロバイダの契約と、ローカル JSON / 合成データの実装。
なぜ: 描画コアはデータの出所を知らずに済み、取得失敗時は代替系列へ透過的に差し替えられるようにするため。

受理する JSON 形状（いずれか）:
- `{"contributions": [...]}`
- `{"data": [...]}`
- `[...]`
- 上記に加えて `{"<username>": <上記いずれか>}`（ユーザー名で索引できる場合）

要素は数値、または `contributionCount` / `count`（数値）と任意の `date` を持つオブジェクト。
それ以外の要素は 0 件として数える。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Protocol

import numpy as np

from ..common.errors import PulsewaveError, UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivitySeries:
    """日付ラベルと同じ長さの件数列。"""

    labels: tuple[str, ...] = field(default_factory=tuple)
    data: tuple[float, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.labels and len(self.labels) != len(self.data):
            raise ValueError("labels and data must have the same length")


class ActivityProvider(Protocol):
    """ユーザー名から活動系列を返す。見つからなければ `UserNotFoundError`。"""

    def fetch(self, username: str) -> ActivitySeries: ...


def _count_of(item: Any) -> float:
    if isinstance(item, bool):
        return 0.0
    if isinstance(item, (int, float)):
        return float(item)
    if isinstance(item, dict):
        for k in ("contributionCount", "count"):
            v = item.get(k)
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                return float(v)
    return 0.0


def _items_of(payload: Any) -> list[Any] | None:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for k in ("contributions", "data"):
            v = payload.get(k)
            if isinstance(v, list):
                return v
    return None


def parse_activity(payload: Any) -> ActivitySeries:
    """JSON 由来のオブジェクトを `ActivitySeries` に変換する（形状不明は空系列）。"""
    items = _items_of(payload)
    if items is None:
        return ActivitySeries()
    data = tuple(_count_of(it) for it in items)
    dates = [it.get("date") if isinstance(it, dict) else None for it in items]
    if items and all(isinstance(d, str) for d in dates):
        return ActivitySeries(labels=tuple(dates), data=data)  # type: ignore[arg-type]
    return ActivitySeries(labels=(), data=data)


class JsonFileProvider:
    """ローカルの JSON エクスポートから活動系列を読む。"""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def fetch(self, username: str) -> ActivitySeries:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise UserNotFoundError(f"activity file not found: {self.path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise PulsewaveError(f"failed to read activity file {self.path}: {e}") from e
        if isinstance(payload, dict) and username in payload:
            payload = payload[username]
        if _items_of(payload) is None:
            raise UserNotFoundError(f"no activity for user: {username}")
        series = parse_activity(payload)
        logger.debug("loaded %d days for %s from %s", len(series.data), username, self.path)
        return series


class SyntheticProvider:
    """ランダムな日毎件数（0–`high`）を返す代替プロバイダ。"""

    def __init__(self, days: int = 365, high: int = 4, *, seed: int | None = None) -> None:
        self.days = max(0, int(days))
        self.high = max(0, int(high))
        self._rng = np.random.default_rng(seed)

    def fetch(self, username: str) -> ActivitySeries:
        values = self._rng.integers(0, self.high + 1, size=self.days)
        return ActivitySeries(labels=(), data=tuple(float(v) for v in values))


def resolve_series(
    provider: ActivityProvider,
    username: str,
    fallback: ActivityProvider | Callable[[str], ActivitySeries] | None = None,
) -> ActivitySeries:
    """プロバイダから取得し、失敗/空なら代替系列を返す（警告ログのみ）。

    代替が無い場合は空系列（平坦な波形）を返す。
    """
    try:
        series = provider.fetch(username)
    except PulsewaveError as e:
        logger.warning("activity provider failed for %s: %s; using fallback", username, e)
        series = None
    if series is not None and series.data:
        return series
    if series is not None:
        logger.warning("no activity data for %s; using fallback", username)
    if fallback is None:
        return ActivitySeries()
    if callable(getattr(fallback, "fetch", None)):
        return fallback.fetch(username)  # type: ignore[union-attr]
    return fallback(username)  # type: ignore[operator]


__all__ = [
    "ActivitySeries",
    "ActivityProvider",
    "JsonFileProvider",
    "SyntheticProvider",
    "parse_activity",
    "resolve_series",
]
