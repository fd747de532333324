"""
どこで: `api.config`
何を: 辞書/YAML のレイヤー定義を `LayerConfigEntry` へ変換し、z 昇順に並べる読み込み口。
なぜ: 設定の生の型（数値/文字列/配列）をここで 1 回だけ解釈し、コアへは不変データだけを渡すため。

形式（YAML の `layers:` 要素）:
    id, image, renderer, z, position [x, y], position_image_point [x%, y%],
    scale (数値 or [x%, y%]), angle, tip_angle, base_angle,
    spin / orbit / clock / pulse / fade（各ブロックは辞書）

速度は `speed: 2` / `speed: "minute"` / `speed: {value: 2, direction: ccw}` のいずれか。
不正な要素は警告して読み飛ばす（フェイルソフト）。
"""

from __future__ import annotations

import logging
import math
import numbers
from pathlib import Path
from typing import Any, Iterable, Mapping

from common.settings import get as _get_settings
from common.types import PercentPoint, Point2D
from engine.core.coordinates import normalize_pair
from engine.core.layer_config import (
    ClockConfig,
    FadeConfig,
    LayerConfigEntry,
    OrbitConfig,
    PulseConfig,
    SpinConfig,
)
from engine.core.motion import MotionSpec
from util.utils import load_config, load_yaml

logger = logging.getLogger(__name__)


def _float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    return v if math.isfinite(v) else default


def _int(value: Any, default: int) -> int:
    return int(_float(value, float(default)))


def _bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
    return bool(value)


def _point(value: Any) -> Point2D | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        value = (value.get("x"), value.get("y"))
    x, y = normalize_pair(value, (math.nan, math.nan))
    if math.isnan(x) or math.isnan(y):
        return None
    return Point2D(x, y)


def _percent(value: Any, default: PercentPoint) -> PercentPoint:
    if isinstance(value, Mapping):
        value = (value.get("x"), value.get("y"))
    x, y = normalize_pair(value, default.as_tuple())
    return PercentPoint(x, y)


def _scale(value: Any) -> tuple[float, float]:
    if value is None:
        return (100.0, 100.0)
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        v = _float(value, 100.0)
        return (v, v)
    return normalize_pair(value, (100.0, 100.0))


def motion_spec_from(block: Mapping[str, Any]) -> MotionSpec:
    """`speed`/`direction`/`format`/`timezone` を MotionSpec へ。"""
    speed = block.get("speed")
    direction = block.get("direction")
    if isinstance(speed, Mapping):
        direction = speed.get("direction", direction)
        speed = speed.get("value")
    fmt = block.get("format", block.get("time_format"))
    tz = block.get("timezone")
    return MotionSpec(
        speed=speed if isinstance(speed, (numbers.Real, str)) else None,
        direction=str(direction) if direction is not None else None,
        time_format=str(fmt) if fmt is not None else None,
        timezone=str(tz) if tz is not None else None,
    )


def _spin(block: Mapping[str, Any]) -> SpinConfig:
    return SpinConfig(
        motion=motion_spec_from(block),
        pivot=_percent(block.get("pivot"), PercentPoint(50.0, 50.0)),
    )


def _orbit(block: Mapping[str, Any]) -> OrbitConfig:
    return OrbitConfig(
        motion=motion_spec_from(block),
        center=_point(block.get("center")),
        line_point=_point(block.get("line_point")),
        image_point=_percent(block.get("image_point"), PercentPoint(50.0, 50.0)),
        orient=_bool(block.get("orient")),
        show_line=_bool(block.get("show_line")),
    )


def _clock(block: Mapping[str, Any]) -> ClockConfig:
    tz = block.get("timezone")
    return ClockConfig(
        mode=str(block.get("mode", "none")),
        angle=_float(block.get("angle"), 0.0),
        tick_mode=str(block.get("tick_mode", "smooth")),
        time_format=str(block.get("time_format", block.get("format", "24"))),
        timezone=str(tz) if tz is not None else None,
        center=_point(block.get("center")),
        base_radius=_float(block.get("base_radius"), 0.0),
    )


def _pulse(block: Mapping[str, Any]) -> PulseConfig:
    return PulseConfig(
        amplitude=_float(block.get("amplitude"), 0.1),
        frequency=_float(block.get("frequency"), 1.0),
        phase=_float(block.get("phase"), 0.0),
        wave=str(block.get("wave", "sine")),
    )


def _fade(block: Mapping[str, Any]) -> FadeConfig:
    return FadeConfig(
        min=_float(block.get("min"), 0.0),
        max=_float(block.get("max"), 1.0),
        frequency=_float(block.get("frequency"), 1.0),
        phase=_float(block.get("phase"), 0.0),
        wave=str(block.get("wave", "sine")),
        zero_frequency=str(block.get("zero_frequency", "midpoint")),
    )


_BLOCKS = {
    "spin": _spin,
    "orbit": _orbit,
    "clock": _clock,
    "pulse": _pulse,
    "fade": _fade,
}


def entry_from_dict(data: Mapping[str, Any]) -> LayerConfigEntry:
    """1 レイヤーぶんの辞書を変換する。

    例外:
    - ValueError: `id` または `image` が無い場合。
    """
    layer_id = data.get("id", data.get("layer_id"))
    image_id = data.get("image", data.get("image_id"))
    if not layer_id or not image_id:
        raise ValueError("レイヤー定義には id と image が必要です")

    blocks: dict[str, Any] = {}
    for key, parse in _BLOCKS.items():
        raw = data.get(key)
        if raw is None or raw is False:
            continue
        if not isinstance(raw, Mapping):
            logger.warning("layer %s: %s ブロックは辞書である必要があります", layer_id, key)
            continue
        blocks[key] = parse(raw)

    return LayerConfigEntry(
        layer_id=str(layer_id),
        image_id=str(image_id),
        renderer=str(data.get("renderer", "canvas")),
        z_index=_int(data.get("z", data.get("z_index")), 0),
        position=_point(data.get("position")),
        position_image_point=_percent(data.get("position_image_point"), PercentPoint(50.0, 50.0)),
        scale=_scale(data.get("scale")),
        angle=_float(data.get("angle"), 0.0),
        tip_angle=_float(data.get("tip_angle"), 90.0),
        base_angle=_float(data.get("base_angle"), 270.0),
        **blocks,
    )


def first_definitions(entries: Iterable[LayerConfigEntry]) -> list[LayerConfigEntry]:
    """layer id ごとに定義順で最初のものだけを残す（以降は警告して捨てる）。"""
    seen: set[str] = set()
    unique: list[LayerConfigEntry] = []
    for entry in entries:
        if entry.layer_id in seen:
            logger.warning("layer id %r が重複しています。後続を読み飛ばします", entry.layer_id)
            continue
        seen.add(entry.layer_id)
        unique.append(entry)
    return unique


def entries_from_dicts(items: Iterable[Any]) -> list[LayerConfigEntry]:
    """不正な要素と重複 id は警告して読み飛ばし、z 昇順（同順位は定義順）で返す。"""
    entries: list[LayerConfigEntry] = []
    for i, item in enumerate(items or ()):
        if not isinstance(item, Mapping):
            logger.warning("layers[%d] は辞書ではありません。読み飛ばします", i)
            continue
        try:
            entries.append(entry_from_dict(item))
        except ValueError as e:
            logger.warning("layers[%d] を読み飛ばします: %s", i, e)
    return sorted(first_definitions(entries), key=lambda e: e.z_index)


def load_layer_entries(path: Path | str | None = None) -> list[LayerConfigEntry]:
    """YAML の `layers:` を読む。`path` 省略時は `load_config()` を使う。"""
    cfg = load_yaml(path) if path is not None else load_config()
    layers = cfg.get("layers") or []
    if not isinstance(layers, list):
        logger.warning("layers はリストである必要があります")
        return []
    return entries_from_dicts(layers)


def stage_options(cfg: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """`stage:` セクションから `size`/`timezone` を取り出す（環境設定が既定値）。"""
    s = _get_settings()
    section = (cfg if cfg is not None else load_config()).get("stage") or {}
    if not isinstance(section, Mapping):
        section = {}
    size = _float(section.get("size"), float(s.STAGE_SIZE))
    return {
        "stage_size": size if size > 0 else float(s.STAGE_SIZE),
        "default_timezone": str(section.get("timezone") or s.DEFAULT_TIMEZONE),
    }


__all__ = [
    "motion_spec_from",
    "entry_from_dict",
    "entries_from_dicts",
    "first_definitions",
    "load_layer_entries",
    "stage_options",
]
