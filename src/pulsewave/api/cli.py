"""
どこで: `pulsewave.api.cli`（コンソールスクリプト `pulsewave`）。
何を: `gif` / `svg` / `live` サブコマンドでデータセットを読み込み、書き出し/ライブ表示を行う。
なぜ: 定期ジョブ（CI）から日次の心電図 GIF を生成し、手元では同じ描画をウィンドウで確認するため。

データの与え方:
- `--data FILE`: `[{username, data, color?}, ...]` 形式の JSON。
- `--username NAME`（複数可）: `--activity-file` があればそこから、無ければ合成データを使う。
  省略時は `PWV_USERNAME` / `GITHUB_USERNAME` / `GITHUB_REPOSITORY_OWNER` を順に参照する。

失敗時は `PulsewaveError` をログに出して終了コード 1 を返す。
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import Any, Sequence

from ..common import settings
from ..common.errors import PulsewaveError
from ..common.logging import setup_default_logging
from ..util.paths import default_export_path, ensure_gif_dir, ensure_svg_dir
from .dataset import dataset_for_users, load_dataset_file
from .provider import JsonFileProvider, SyntheticProvider
from .runner import (
    render_gif,
    render_svg,
    resolve_gif_params,
    resolve_size,
    resolve_svg_params,
    run_live,
)

logger = logging.getLogger(__name__)

USERNAME_ENV_VARS = ("PWV_USERNAME", "GITHUB_USERNAME", "GITHUB_REPOSITORY_OWNER")


def username_from_env() -> str | None:
    for name in USERNAME_ENV_VARS:
        v = os.getenv(name)
        if v and v.strip():
            return v.strip()
    return None


def build_dataset(args: argparse.Namespace) -> list[dict[str, Any]]:
    if args.data is not None:
        return load_dataset_file(Path(args.data))
    usernames = list(args.username or [])
    if not usernames:
        env_user = username_from_env()
        if env_user:
            usernames = [env_user]
    if not usernames:
        raise PulsewaveError(
            "no dataset: pass --data FILE or --username NAME (or set PWV_USERNAME)"
        )
    seed = args.seed if args.seed is not None else settings.get().NOISE_SEED
    fallback = SyntheticProvider(seed=seed)
    provider = JsonFileProvider(args.activity_file) if args.activity_file else fallback
    return dataset_for_users(usernames, provider, fallback)


def _add_common(p: argparse.ArgumentParser) -> None:
    src = p.add_mutually_exclusive_group()
    src.add_argument("--data", help="dataset JSON file ([{username, data, color?}, ...])")
    src.add_argument("--username", action="append", help="user to render (repeatable)")
    p.add_argument("--activity-file", help="activity JSON export used with --username")
    p.add_argument("--width", type=int, default=None)
    p.add_argument("--height", type=int, default=None)
    p.add_argument("--seed", type=int, default=None, help="noise RNG seed")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pulsewave", description="Activity ECG renderer")
    parser.add_argument("--log-level", default=None, help="logging level (default: PWV_LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    gif = sub.add_parser("gif", help="record an animated GIF headlessly")
    _add_common(gif)
    gif.add_argument("--out", default=None, help="output .gif path (default: data/gif/)")
    gif.add_argument("--seconds", type=float, default=None)
    gif.add_argument("--fps", type=int, default=None)
    gif.add_argument("--quality", type=int, default=None, help="1 (best) .. 30 (coarsest)")
    gif.add_argument("--max-width", type=int, default=None)
    gif.add_argument("--max-height", type=int, default=None)

    svg = sub.add_parser("svg", help="write an animated SVG snapshot")
    _add_common(svg)
    svg.add_argument("--out", default=None, help="output .svg path (default: data/svg/)")
    svg.add_argument("--warmup", type=int, default=None, help="ticks to run before the snapshot")
    svg.add_argument("--wave-mode", choices=("none", "dash", "marquee"), default=None)
    svg.add_argument("--wave-direction", choices=("left", "right"), default=None)
    svg.add_argument("--no-grid", action="store_true")

    live = sub.add_parser("live", help="open an interactive window")
    _add_common(live)
    return parser


def _default_out(args: argparse.Namespace, dataset: list[dict[str, Any]]) -> Path:
    w, h = resolve_size(args.width, args.height)
    prefix = str(dataset[0].get("username", "")) if len(dataset) == 1 else None
    if args.command == "gif":
        return default_export_path(ensure_gif_dir(), w, h, ".gif", prefix)
    return default_export_path(ensure_svg_dir(), w, h, ".svg", prefix)


def _run(args: argparse.Namespace) -> None:
    dataset = build_dataset(args)
    if args.command in ("gif", "svg") and args.out is None:
        args.out = _default_out(args, dataset)
    if args.command == "gif":
        params = resolve_gif_params(
            seconds=args.seconds,
            fps=args.fps,
            quality=args.quality,
            max_width=args.max_width,
            max_height=args.max_height,
        )
        out = render_gif(
            dataset, out=args.out, params=params, width=args.width, height=args.height, seed=args.seed
        )
        logger.info("wrote %s", out)
    elif args.command == "svg":
        params = resolve_svg_params(
            animate_wave_mode=args.wave_mode,
            wave_direction=args.wave_direction,
            grid=False if args.no_grid else None,
        )
        out = render_svg(
            dataset,
            out=args.out,
            params=params,
            warmup_ticks=args.warmup,
            width=args.width,
            height=args.height,
            seed=args.seed,
        )
        logger.info("wrote %s", out)
    else:
        run_live(dataset, width=args.width, height=args.height, seed=args.seed)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_default_logging(args.log_level or settings.get().LOG_LEVEL)
    try:
        _run(args)
    except PulsewaveError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
