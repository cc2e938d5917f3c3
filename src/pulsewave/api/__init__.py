"""
どこで: `pulsewave.api`（公開 API の入口）。
何を: データセット正規化、活動プロバイダ、GIF/SVG 書き出しとライブ表示の高水準関数を再輸出する。

使用例:
    from pulsewave.api import render_gif

    render_gif([{"username": "alice", "data": [0, 3, 5, 1]}], out="alice.gif")
"""

from .dataset import Dataset, Series, dataset_for_users, load_dataset_file, normalize_dataset
from .provider import (
    ActivityProvider,
    ActivitySeries,
    JsonFileProvider,
    SyntheticProvider,
    parse_activity,
    resolve_series,
)
from .runner import render_gif, render_svg, run_live

__all__ = [
    "Dataset",
    "Series",
    "normalize_dataset",
    "load_dataset_file",
    "dataset_for_users",
    "ActivityProvider",
    "ActivitySeries",
    "JsonFileProvider",
    "SyntheticProvider",
    "parse_activity",
    "resolve_series",
    "render_gif",
    "render_svg",
    "run_live",
]
