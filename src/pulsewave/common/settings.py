"""
どこで: `pulsewave.common.settings`
何を: プロジェクトの環境変数を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int, env_str


@dataclass
class _Settings:
    # 出力
    OUTPUT_DIR: str | None = None
    LOG_LEVEL: str = "INFO"

    # 録画/エクスポート既定
    DEFAULT_FPS: int = 30
    DEFAULT_SECONDS: float = 5.0

    # バッチ描画の既定サーフェス寸法
    BATCH_WIDTH: int = 1200
    BATCH_HEIGHT: int = 600

    # ノイズ乱数シード（None で非決定）
    NOISE_SEED: int | None = None


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - int は `env_int`、float は `env_float` を使用。
    - 寸法/FPS は下限丸めを適用。
    """
    _settings.OUTPUT_DIR = env_str("PWV_OUTPUT_DIR", None)
    _settings.LOG_LEVEL = env_str("PWV_LOG_LEVEL", "INFO") or "INFO"

    _settings.DEFAULT_FPS = env_int("PWV_FPS", 30, min_value=1) or 30
    _settings.DEFAULT_SECONDS = env_float("PWV_SECONDS", 5.0, min_value=0.0) or 5.0

    _settings.BATCH_WIDTH = env_int("PWV_WIDTH", 1200, min_value=300) or 1200
    _settings.BATCH_HEIGHT = env_int("PWV_HEIGHT", 600, min_value=200) or 600

    _settings.NOISE_SEED = env_int("PWV_NOISE_SEED", None)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
