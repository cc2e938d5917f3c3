"""
どこで: `pulsewave.api.dataset`。
何を: データセット（`[{username, data, color?}, ...]`）の読み込みと、プロバイダ経由の組み立て。
なぜ: CLI/スクリプトの入力を、描画コアが受け取る正規化前のエントリ列へ揃えるため。

正規化（非数値の除去・色割り当て・重複排除）は `engine.core.dataset.normalize_dataset` が行う。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from ..common.errors import PulsewaveError
from ..engine.core.dataset import Dataset, Series, normalize_dataset
from .provider import ActivityProvider, resolve_series

logger = logging.getLogger(__name__)


def load_dataset_file(path: Path | str) -> list[dict[str, Any]]:
    """JSON ファイルからエントリ列を読む（1 エントリのオブジェクトも受理）。"""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise PulsewaveError(f"failed to read dataset {p}: {e}") from e
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise PulsewaveError(f"dataset must be a list of entries: {p}")
    return [e for e in payload if isinstance(e, dict)]


def dataset_for_users(
    usernames: Iterable[str],
    provider: ActivityProvider,
    fallback: ActivityProvider | None = None,
) -> list[dict[str, Any]]:
    """ユーザー毎にプロバイダから系列を取得してエントリ列を作る（失敗時は代替系列）。"""
    entries: list[dict[str, Any]] = []
    for name in usernames:
        series = resolve_series(provider, name, fallback)
        logger.info("%s: %d days of activity", name, len(series.data))
        entries.append({"username": name, "data": list(series.data)})
    return entries


__all__ = ["Dataset", "Series", "normalize_dataset", "load_dataset_file", "dataset_for_users"]
