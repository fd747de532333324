"""
どこで: `api` 入口（高レベル公開 API）。
何を: `Stage`・アセット解決・設定読み込み・ロギング初期化などを再輸出。
なぜ: 利用者が単一名前空間から 設定読込→ステージ構築→フレーム計算 まで完結できるようにするため。

Usage:
    from api import Stage, StaticAssetResolver, load_layer_entries

    stage = Stage(
        load_layer_entries("stage.yaml"),
        StaticAssetResolver({"hand": {"src": "hand.png", "width": 40, "height": 400}}),
    )
    frame = stage.compute_frame(timestamp_ms)
"""

from common.logging import setup_default_logging
from common.oscillator import oscillator
from effects.registry import processor as processor  # 公開唯一経路（api.processor）
from engine.core.frame_clock import FrameClock
from engine.render.types import LayerOutput
from engine.runtime.frame import StageFrame

from .assets import AssetResolver, ResolvedAsset, StaticAssetResolver
from .config import entries_from_dicts, entry_from_dict, load_layer_entries, stage_options
from .stage import Stage

__all__ = [
    # メインAPI
    "Stage",
    "StageFrame",
    "LayerOutput",
    "FrameClock",
    # 設定/アセット
    "load_layer_entries",
    "entries_from_dicts",
    "entry_from_dict",
    "stage_options",
    "AssetResolver",
    "ResolvedAsset",
    "StaticAssetResolver",
    # 拡張
    "processor",  # ユーザー拡張用デコレータ
    "oscillator",
    "setup_default_logging",
]

# バージョン情報
__version__ = "2026.10"
