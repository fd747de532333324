"""
どこで: `common.env`
何を: `LST_*` 環境変数を型付きで読むヘルパ（未設定/不正値は既定値、必要なら下限で丸める）。
なぜ: `common.settings` の再読込を 1 行ずつ宣言的に書けるようにするため。
"""

from __future__ import annotations

import math
import os
from typing import Optional

_TRUE = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE = frozenset({"0", "false", "f", "no", "n", "off"})


def _raw(name: str) -> Optional[str]:
    """前後空白を除いた値。未設定/空白のみは None。"""
    value = os.environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def env_int(
    name: str, default: Optional[int] = None, *, min_value: Optional[int] = None
) -> Optional[int]:
    """整数として読む。

    - 未設定/整数として読めない → `default`（None も可）
    - `min_value` 指定時は下回った値を下限へ丸める
    """
    raw = _raw(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def env_float(
    name: str, default: float, *, min_value: Optional[float] = None
) -> float:
    """有限の浮動小数として読む（NaN/Inf は既定値）。"""
    raw = _raw(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if not math.isfinite(value):
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def env_bool(name: str, default: bool = False) -> bool:
    """真偽として読む。数値は 0 以外を真、語は on/off・yes/no・true/false を解釈。"""
    raw = _raw(name)
    if raw is None:
        return bool(default)
    try:
        return int(raw) != 0
    except ValueError:
        pass
    word = raw.lower()
    if word in _TRUE:
        return True
    if word in _FALSE:
        return False
    return bool(default)


def env_str(name: str, default: str) -> str:
    raw = _raw(name)
    return default if raw is None else raw


__all__ = ["env_int", "env_float", "env_bool", "env_str"]
