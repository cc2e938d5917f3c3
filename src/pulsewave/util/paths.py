"""
どこで: `pulsewave.util.paths`。
何を: GIF/SVG 保存先ディレクトリの生成と、一意なファイル名の解決を提供する。
なぜ: ランタイムから簡潔に保存先を扱え、並行呼び出しでも安全に作成できるようにするため。
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from ..common import settings
from .utils import _find_project_root


def _output_root() -> Path:
    override = settings.get().OUTPUT_DIR
    if override:
        return Path(override).expanduser()
    return _find_project_root(Path(__file__).parent) / "data"


def ensure_gif_dir() -> Path:
    """GIF 出力先 `data/gif/` を作成して返す。

    - `PWV_OUTPUT_DIR` があればその直下、無ければプロジェクトルートの `data/` 直下。
    - 既存の場合もそのまま Path を返す。
    - 並行呼び出しに対して `exist_ok=True` で安全。
    """
    out = _output_root() / "gif"
    out.mkdir(parents=True, exist_ok=True)
    return out


def ensure_svg_dir() -> Path:
    """SVG 出力先 `data/svg/` を作成して返す。"""
    out = _output_root() / "svg"
    out.mkdir(parents=True, exist_ok=True)
    return out


def default_export_path(
    out_dir: Path, width: int, height: int, suffix: str, name_prefix: str | None = None
) -> Path:
    """`{prefix_}{W}x{H}_{timestamp}{suffix}` 形式の未使用パスを返す。"""
    ts = datetime.now().strftime("%y%m%d_%H%M%S")
    dims = f"{int(width)}x{int(height)}"
    if name_prefix and name_prefix.strip():
        base = f"{name_prefix.strip()}_{dims}_{ts}"
    else:
        base = f"{dims}_{ts}"
    return unique_path(out_dir / f"{base}{suffix}")


def unique_path(path: Path) -> Path:
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    parent = path.parent
    i = 1
    while True:
        cand = parent / f"{stem}-{i}{suffix}"
        if not cand.exists():
            return cand
        i += 1


__all__ = ["ensure_gif_dir", "ensure_svg_dir", "default_export_path", "unique_path"]
