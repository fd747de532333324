"""
プロジェクト向けの軽量ロギングユーティリティ。

要点:
- 既定では各モジュールが `logging.getLogger(__name__)` でロガーを取得する。
- アプリ側で設定が無い場合でも、妥当な最小構成を 1 度だけ適用するヘルパーを提供する。
- プロセッサの「診断は 1 回だけ」を表現する `OnceLogger` を提供する。
"""

from __future__ import annotations

import logging
from typing import Any, Hashable


def setup_default_logging(level: int | str = "INFO") -> None:
    """最小限のロギング設定を 1 度だけ適用する。

    - ルートロガーにハンドラが既にあれば何もしない（no-op）
    - 上位のランナー/CLI から呼び出す想定
    """
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.INFO)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        # Assume the app has configured logging
        return
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


class OnceLogger:
    """キーごとに 1 回だけ出力するロガーラッパ。

    毎フレーム呼ばれるプロセッサから同じ診断を出し続けないために使う。
    既出キーの集合はインスタンスごとに持つ（プロセス全体では共有しない）。
    """

    __slots__ = ("_logger", "_seen")

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._seen: set[Hashable] = set()

    def _emit(self, level: int, key: Hashable, msg: str, *args: Any) -> bool:
        if key in self._seen:
            return False
        self._seen.add(key)
        self._logger.log(level, msg, *args)
        return True

    def warning(self, key: Hashable, msg: str, *args: Any) -> bool:
        """未出力のキーなら WARNING を出して True を返す。"""
        return self._emit(logging.WARNING, key, msg, *args)

    def debug(self, key: Hashable, msg: str, *args: Any) -> bool:
        return self._emit(logging.DEBUG, key, msg, *args)

    def seen(self, key: Hashable) -> bool:
        return key in self._seen

    def reset(self) -> None:
        self._seen.clear()


__all__ = ["setup_default_logging", "OnceLogger"]
