"""
どこで: `common.base_registry`
何を: 名前 → オブジェクトの登録表。キーは正規化し（"ClockFollow" / "clock-follow" → "clock_follow"）、登録順を保つ。
なぜ: プロセッサ（spin/orbit/clock/pulse/fade と利用者拡張）を同じ規則で引けるようにするため。
"""

from __future__ import annotations

import re
from typing import Any, Callable, Iterator

_WORD_BOUNDARY = re.compile(r"(.)([A-Z][a-z]+)")
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")


def normalize_key(name: str) -> str:
    """登録キーを正規化する。

    - ハイフンはアンダースコアへ
    - 大文字を含む場合はキャメル → スネーク、含まなければ小文字化のみ

    例外:
    - TypeError: `name` が str でない場合。
    - ValueError: 空文字の場合。
    """
    if not isinstance(name, str):
        raise TypeError("レジストリキーは str である必要があります")
    if not name:
        raise ValueError("レジストリキーは空であってはなりません")
    key = name.replace("-", "_")
    if not any(c.isupper() for c in key):
        return key.lower()
    key = _WORD_BOUNDARY.sub(r"\1_\2", key)
    return _LOWER_UPPER.sub(r"\1_\2", key).lower()


class BaseRegistry:
    """正規化キーで引く登録表（挿入順を保持）。

    同名の別オブジェクトを重ねて登録すると ValueError。`replace=True` なら差し替え、
    元の位置（登録順）はそのまま残る。
    """

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def add(self, name: str, obj: Any, *, replace: bool = False) -> Any:
        """`name` で `obj` を登録して `obj` を返す。"""
        key = normalize_key(name)
        current = self._entries.get(key)
        if current is not None and current is not obj and not replace:
            raise ValueError(f"'{key}' は既に登録されています")
        self._entries[key] = obj
        return obj

    def register(self, name: str | None = None, *, replace: bool = False) -> Callable[[Any], Any]:
        """デコレータ版の `add`。`name` 省略時は `__name__` から推論する。"""

        def decorator(obj: Any) -> Any:
            return self.add(name or obj.__name__, obj, replace=replace)

        return decorator

    def get(self, name: str) -> Any:
        key = normalize_key(name)
        try:
            return self._entries[key]
        except KeyError:
            raise KeyError(f"'{name}' は登録されていません") from None

    def is_registered(self, name: str) -> bool:
        return normalize_key(name) in self._entries

    def unregister(self, name: str) -> None:
        """登録を外す（未登録なら何もしない）。"""
        self._entries.pop(normalize_key(name), None)

    def list_all(self) -> list[str]:
        """正規化済みキーを登録順で返す。"""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def registry(self) -> dict[str, Any]:
        """登録表のコピー（書き換えても本体には影響しない）。"""
        return dict(self._entries)


__all__ = ["BaseRegistry", "normalize_key"]
