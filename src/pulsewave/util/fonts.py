"""
どこで: `pulsewave.util.fonts`。
何を: オーバーレイ用の等幅フォントを OS フォントディレクトリから解決し、Pillow のフォントとして返す。
なぜ: 対話ホストとバッチホストで同じフォントを使い、文字幅計測とラスタ結果を一致させるため。
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache
from pathlib import Path

from PIL import ImageFont

logger = logging.getLogger(__name__)

# 優先順（先勝ち）
MONO_CANDIDATES: tuple[str, ...] = (
    "DejaVuSansMono.ttf",
    "LiberationMono-Regular.ttf",
    "Menlo.ttc",
    "consola.ttf",
    "cour.ttf",
)


def os_font_dirs() -> list[Path]:
    """OS 既定のフォントディレクトリ一覧（存在するもののみ）。"""
    home = Path.home()
    dirs: list[Path] = []
    if sys.platform == "darwin":
        dirs = [
            home / "Library" / "Fonts",
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
        ]
    elif sys.platform.startswith("linux"):
        dirs = [
            Path("/usr/share/fonts"),
            Path("/usr/local/share/fonts"),
            home / ".fonts",
            home / ".local/share/fonts",
        ]
    elif sys.platform.startswith("win"):
        dirs = [Path("C:/Windows/Fonts")]
    return [d for d in dirs if d.is_dir()]


def find_font_file(names: tuple[str, ...] = MONO_CANDIDATES) -> Path | None:
    """候補名に一致する最初のフォントファイルを再帰探索で返す。"""
    for name in names:
        for d in os_font_dirs():
            hits = sorted(d.rglob(name))
            if hits:
                return hits[0]
    return None


@lru_cache(maxsize=8)
def load_mono_font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """等幅フォントを `size` px で読み込む。

    見つからない場合は Pillow 同梱の既定フォントを同サイズで返す。
    """
    path = find_font_file()
    if path is not None:
        try:
            return ImageFont.truetype(str(path), int(size))
        except OSError as e:
            logger.warning("font load failed (%s): %s", path, e)
    return ImageFont.load_default(size=int(size))


__all__ = ["load_mono_font", "find_font_file", "os_font_dirs", "MONO_CANDIDATES"]
