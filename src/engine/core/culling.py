"""
どこで: `engine.core.culling`
何を: レイヤーの軸平行境界箱（AABB）とステージ（パディング付き）の交差判定。
なぜ: 画面外レイヤーを描画前に落とし、多数レイヤーでも 1 フレームを軽く保つため。

静的レイヤーは位置が変わらないので数 px の狭いパディング、アニメーションする
レイヤーは端でのポップイン/アウトを避けるため数十 px のパディングを使う。
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from common.settings import get as _get_settings
from common.types import Dimensions, Point2D

from .state import LayerRuntimeState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float


def layer_bounds(
    position: Point2D, scale: Point2D, dims: Dimensions, rotation_deg: float = 0.0
) -> Bounds:
    """中心 `position`・倍率・画像サイズから AABB を求める（回転時は外接箱）。"""
    hw = abs(dims.width * scale.x) / 2.0
    hh = abs(dims.height * scale.y) / 2.0
    if rotation_deg:
        r = math.radians(rotation_deg)
        c = abs(math.cos(r))
        s = abs(math.sin(r))
        hw, hh = hw * c + hh * s, hw * s + hh * c
    return Bounds(position.x - hw, position.y - hh, position.x + hw, position.y + hh)


def state_bounds(state: LayerRuntimeState) -> Bounds:
    t = state.transform
    return layer_bounds(t.position, t.scale, state.mapping.image_dimensions, t.rotation)


def is_visible(bounds: Bounds, stage_size: float, padding: float = 0.0) -> bool:
    """`[-padding, stage_size + padding]` と両軸で重なれば True。"""
    lo = -float(padding)
    hi = float(stage_size) + float(padding)
    return not (
        bounds.max_x < lo or bounds.min_x > hi or bounds.max_y < lo or bounds.min_y > hi
    )


def padding_for(state: LayerRuntimeState) -> int:
    s = _get_settings()
    return s.CULL_PADDING_ANIMATED if state.animated else s.CULL_PADDING_STATIC


def cull(state: LayerRuntimeState, stage_size: float) -> LayerRuntimeState:
    """可視性を判定し、変化がある場合のみ `visual.visible` を更新する。"""
    visible = is_visible(state_bounds(state), stage_size, padding_for(state))
    if visible == state.visual.visible:
        return state
    return state.with_visual(visible=visible)


def _bounds_array(states: Sequence[LayerRuntimeState]) -> np.ndarray:
    """(N, 4) の [min_x, min_y, max_x, max_y] 配列。"""
    n = len(states)
    pos = np.empty((n, 2), dtype=np.float64)
    half = np.empty((n, 2), dtype=np.float64)
    rot = np.empty(n, dtype=np.float64)
    for i, st in enumerate(states):
        t = st.transform
        d = st.mapping.image_dimensions
        pos[i] = (t.position.x, t.position.y)
        half[i] = (abs(d.width * t.scale.x) / 2.0, abs(d.height * t.scale.y) / 2.0)
        rot[i] = t.rotation
    r = np.radians(rot)
    c = np.abs(np.cos(r))
    s = np.abs(np.sin(r))
    hw = half[:, 0] * c + half[:, 1] * s
    hh = half[:, 0] * s + half[:, 1] * c
    return np.stack([pos[:, 0] - hw, pos[:, 1] - hh, pos[:, 0] + hw, pos[:, 1] + hh], axis=1)


def visibility_mask(
    states: Sequence[LayerRuntimeState], stage_size: float
) -> np.ndarray:
    """各状態の可視フラグ（bool 配列）。パディングは静的/アニメで切り替える。"""
    if not states:
        return np.zeros(0, dtype=bool)
    s = _get_settings()
    b = _bounds_array(states)
    pad = np.array(
        [s.CULL_PADDING_ANIMATED if st.animated else s.CULL_PADDING_STATIC for st in states],
        dtype=np.float64,
    )
    lo = -pad
    hi = float(stage_size) + pad
    outside = (b[:, 2] < lo) | (b[:, 0] > hi) | (b[:, 3] < lo) | (b[:, 1] > hi)
    return ~outside


def cull_batch(
    states: Sequence[LayerRuntimeState], stage_size: float
) -> list[LayerRuntimeState]:
    """`cull` のベクトル化版。入力順を保つ。"""
    mask = visibility_mask(states, stage_size)
    out: list[LayerRuntimeState] = []
    for st, vis in zip(states, mask):
        v = bool(vis)
        out.append(st if v == st.visual.visible else st.with_visual(visible=v))
    return out


def drop_static_offstage(
    states: Sequence[LayerRuntimeState], stage_size: float
) -> list[LayerRuntimeState]:
    """画面外で始まる静的レイヤーを取り除く（アニメーションするレイヤーは残す）。"""
    if not states:
        return []
    mask = visibility_mask(states, stage_size)
    kept: list[LayerRuntimeState] = []
    for st, vis in zip(states, mask):
        if not st.animated and not bool(vis):
            logger.debug("static layer %s is offstage; dropped", st.layer_id)
            continue
        kept.append(st)
    return kept


__all__ = [
    "Bounds",
    "layer_bounds",
    "state_bounds",
    "is_visible",
    "padding_for",
    "cull",
    "visibility_mask",
    "cull_batch",
    "drop_static_offstage",
]
