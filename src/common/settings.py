"""
どこで: `common.settings`
何を: ステージ/パイプラインの環境変数設定を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_float, env_int, env_str


@dataclass
class _Settings:
    # Stage
    STAGE_SIZE: int = 2048
    DEFAULT_TIMEZONE: str = "UTC"

    # 座標の安全範囲
    SCALE_MIN: float = 0.01
    SCALE_MAX: float = 10.0

    # Culling（静的は数 px、アニメーションは数十 px）
    CULL_PADDING_STATIC: int = 4
    CULL_PADDING_ANIMATED: int = 64
    DROP_STATIC_OFFSTAGE: bool = True

    # Caches
    MAPPING_CACHE_MAXSIZE: int | None = 256
    FRAME_CACHE_ENABLED: bool = True


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、int は `env_int`、float は `env_float` を使用。
    - 一部は下限丸めやフォールバックを適用。
    """
    _settings.STAGE_SIZE = env_int("LST_STAGE_SIZE", 2048, min_value=1) or 2048
    _settings.DEFAULT_TIMEZONE = env_str("LST_DEFAULT_TIMEZONE", "UTC")

    _settings.SCALE_MIN = env_float("LST_SCALE_MIN", 0.01, min_value=1e-6)
    _settings.SCALE_MAX = env_float("LST_SCALE_MAX", 10.0, min_value=_settings.SCALE_MIN)

    _settings.CULL_PADDING_STATIC = env_int("LST_CULL_PADDING_STATIC", 4, min_value=0) or 0
    _settings.CULL_PADDING_ANIMATED = env_int("LST_CULL_PADDING_ANIMATED", 64, min_value=0) or 0
    _settings.DROP_STATIC_OFFSTAGE = env_bool("LST_DROP_STATIC_OFFSTAGE", True)

    _settings.MAPPING_CACHE_MAXSIZE = env_int("LST_MAPPING_CACHE_MAXSIZE", 256)
    if _settings.MAPPING_CACHE_MAXSIZE is not None and _settings.MAPPING_CACHE_MAXSIZE < 0:
        _settings.MAPPING_CACHE_MAXSIZE = 0
    _settings.FRAME_CACHE_ENABLED = env_bool("LST_FRAME_CACHE_ENABLED", True)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
