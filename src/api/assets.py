"""
どこで: `api.assets`
何を: 画像 ID を解決済みアセット（src と自然サイズ）へ引く `AssetResolver` 境界と、その静的実装。
なぜ: コアは寸法だけに依存し、読み込み方法（ファイル/URL/デコード）を外部協調者へ委ねるため。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedAsset:
    src: str
    width: float
    height: float


class AssetResolver(Protocol):
    """`resolve(image_id)` が None を返したレイヤーはステージから外される。"""

    def resolve(self, image_id: str) -> ResolvedAsset | None: ...


def _positive(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        v = float(value)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) and v > 0 else None


def coerce_asset(image_id: str, value: Any) -> ResolvedAsset | None:
    """`ResolvedAsset` / `{src, width, height}` / `(src, width, height)` を受け付ける。"""
    if isinstance(value, ResolvedAsset):
        return value if _positive(value.width) and _positive(value.height) else None
    if isinstance(value, Mapping):
        src = value.get("src", image_id)
        width = _positive(value.get("width"))
        height = _positive(value.get("height"))
    elif isinstance(value, (tuple, list)) and len(value) == 3:
        src, width, height = value[0], _positive(value[1]), _positive(value[2])
    else:
        return None
    if width is None or height is None:
        return None
    return ResolvedAsset(src=str(src), width=width, height=height)


class StaticAssetResolver:
    """辞書で与えたアセット表から引くリゾルバ（寸法が不正な項目は未解決扱い）。"""

    def __init__(self, assets: Mapping[str, Any] | None = None) -> None:
        self._assets: dict[str, ResolvedAsset] = {}
        for image_id, value in (assets or {}).items():
            asset = coerce_asset(str(image_id), value)
            if asset is None:
                logger.warning("asset %r の定義が不正です（src/width/height を確認）", image_id)
                continue
            self._assets[str(image_id)] = asset

    def resolve(self, image_id: str) -> ResolvedAsset | None:
        return self._assets.get(image_id)

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._assets

    def __len__(self) -> int:
        return len(self._assets)


__all__ = ["ResolvedAsset", "AssetResolver", "StaticAssetResolver", "coerce_asset"]
