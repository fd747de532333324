"""
どこで: `engine.core.frame_clock`
何を: 描画バックエンドのフレームコールバックから呼ぶ最小のフレームドライバ。
なぜ: ループを持たずに dt だけを測り、複数ステージを登録順で同じ dt で進めるため。
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, Sequence


class Tickable(Protocol):
    """`tick(dt)` で dt 秒ぶん進むもの（`api.Stage` など）。"""

    def tick(self, dt: float) -> None: ...


class FrameClock:
    """登録された Tickable を固定順序で進める。

    `tick()` を dt 無しで呼ぶと、前回呼び出しからの経過秒を `clock` で測る。
    """

    def __init__(
        self,
        tickables: Sequence[Tickable],
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._tickables = tuple(tickables)
        self._clock = clock
        self._last = clock()
        self._frames = 0

    @property
    def frames(self) -> int:
        """これまでに進めたフレーム数。"""
        return self._frames

    def tick(self, dt: float | None = None) -> float:
        if dt is None:
            now = self._clock()
            dt, self._last = now - self._last, now
        for target in self._tickables:
            target.tick(dt)
        self._frames += 1
        return dt
