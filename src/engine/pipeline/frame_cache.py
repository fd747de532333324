"""
どこで: `engine.pipeline.frame_cache`
何を: `(layer_id, epoch)` をキーにしたフレームスコープのメモ化キャッシュ。
なぜ: `next_frame()` で全体を O(1) に無効化し（エポックを進めるだけ）、エントリ毎の追い出しを不要にするため。

1 インスタンスは 1 つの描画ループに属する。異なるフレーム ID を同じインスタンスへ
並行に流す使い方は想定しない。
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class FrameCache(Generic[T]):
    """エポック付きのレイヤー状態キャッシュ。"""

    def __init__(self, enabled: bool = True) -> None:
        self._entries: dict[str, tuple[int, T]] = {}
        self._epoch = 0
        self._enabled = bool(enabled)
        self._hits = 0
        self._misses = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def enabled(self) -> bool:
        return self._enabled

    def next_frame(self) -> int:
        """新しいフレームを開始する（既存エントリはすべて無効になる）。"""
        self._epoch += 1
        return self._epoch

    def get(self, layer_id: str) -> T | None:
        if not self._enabled:
            return None
        entry = self._entries.get(layer_id)
        if entry is None or entry[0] != self._epoch:
            return None
        return entry[1]

    def put(self, layer_id: str, value: T) -> None:
        if self._enabled:
            self._entries[layer_id] = (self._epoch, value)

    def get_or_compute(self, layer_id: str, compute: Callable[[], T]) -> T:
        cached = self.get(layer_id)
        if cached is not None:
            self._hits += 1
            return cached
        self._misses += 1
        value = compute()
        self.put(layer_id, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def counters(self) -> dict[str, int]:
        live = sum(1 for e, _ in self._entries.values() if e == self._epoch)
        return {"epoch": self._epoch, "live": live, "hits": self._hits, "misses": self._misses}


__all__ = ["FrameCache"]
