"""共通フィクスチャ。

- 乱数シード固定
- 小さなデータセット試料
- 手動時計（録画の間引き/スケジューラ検証用）
- 出力先を一時ディレクトリへ向ける設定
"""

from __future__ import annotations

from typing import Iterator

import numpy as np
import pytest

from pulsewave.common import settings


@pytest.fixture(scope="session", autouse=True)
def np_seed() -> None:
    """NumPy の乱数を固定。"""
    np.random.seed(12345)


@pytest.fixture()
def rng() -> np.random.Generator:
    return np.random.default_rng(7)


@pytest.fixture()
def small_dataset() -> list[dict]:
    return [
        {"username": "alice", "data": [1, 2, 3, 4]},
        {"username": "bob", "data": [0, 0, 1]},
    ]


class ManualClock:
    """`time.perf_counter` 互換の手動時計。`sleep` として渡すと時刻が進む。"""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += float(dt)


@pytest.fixture()
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def out_dir(tmp_path, monkeypatch: pytest.MonkeyPatch) -> Iterator:
    monkeypatch.setenv("PWV_OUTPUT_DIR", str(tmp_path))
    settings.reload_from_env()
    yield tmp_path
    monkeypatch.delenv("PWV_OUTPUT_DIR", raising=False)
    settings.reload_from_env()
