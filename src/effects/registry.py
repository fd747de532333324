"""
どこで: `effects` のレジストリ層（プロセッサプラグイン専用）。
何を: `@processor` デコレータによる登録と、設定に応じたプロセッサ列の組み立てを提供（キーは正規化）。
なぜ: spin/orbit などを「どのファイルを import したか」ではなく設定で選び、順序契約を一箇所で守るため。

公開 API 概要:
- `processor`（デコレータ）: `create(entry, ctx) -> Processor` を登録
- `processors_for_entry(entry, ctx)`: 付与すべきプロセッサを order 昇順で返す
- `is_animated(proc)`: 時間とともに位置/スケール/回転を変えるプロセッサか（`__animates__` 属性）
- `get_plugin(name)` / `list_processors()` / `is_processor_registered(name)` / `unregister(name)`
- `get_registry()`: 読み取り専用ビュー（テスト/診断用）
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from common.base_registry import BaseRegistry, normalize_key
from engine.core.layer_config import LayerConfigEntry
from engine.core.motion import MotionClock
from engine.core.state import Processor

logger = logging.getLogger(__name__)


@dataclass
class ProcessorContext:
    """プロセッサ生成時に渡すステージ単位のコンテキスト。"""

    motion_clock: MotionClock = field(default_factory=MotionClock)
    stage_size: float = 2048.0
    default_timezone_minutes: int = 0


AttachFn = Callable[[LayerConfigEntry], bool]
CreateFn = Callable[[LayerConfigEntry, ProcessorContext], Processor]


@dataclass(frozen=True)
class ProcessorPlugin:
    """`attach` が True のレイヤーに `create` で生成したプロセッサを付与する。

    `suppressed_by` に挙げたプラグインが同じレイヤーに付く場合は付与しない。
    """

    name: str
    order: int
    attach: AttachFn
    create: CreateFn
    suppressed_by: tuple[str, ...] = ()


_processor_registry = BaseRegistry()


def processor(
    name: str,
    *,
    order: int,
    attach: AttachFn,
    suppressed_by: tuple[str, ...] = (),
    replace: bool = False,
):
    """プロセッサ生成関数を登録するデコレータ。

    例外:
    - TypeError: 関数以外を登録しようとした場合。
    - ValueError: 同名が登録済みで `replace=False` の場合。
    """

    def decorator(create: Any) -> Any:
        if not inspect.isfunction(create):
            raise TypeError(f"@processor は関数のみ登録可能です: got {create!r}")
        plugin = ProcessorPlugin(
            name=name,
            order=int(order),
            attach=attach,
            create=create,
            suppressed_by=tuple(suppressed_by),
        )
        _processor_registry.add(name, plugin, replace=replace)
        return create

    return decorator


def _sorted_plugins() -> list[tuple[str, ProcessorPlugin]]:
    items = list(_processor_registry.registry.items())
    # order が同じなら登録順
    return sorted(items, key=lambda kv: kv[1].order)


def processors_for_entry(
    entry: LayerConfigEntry, ctx: ProcessorContext
) -> list[Processor]:
    """レイヤー設定に付与すべきプロセッサを順序どおりに生成して返す。

    `attach`/`create` が例外を投げたプラグインは警告を出して飛ばす
    （1 レイヤーの不正設定で他のプロセッサを失わないため）。
    """
    attached: list[tuple[str, ProcessorPlugin]] = []
    for key, plugin in _sorted_plugins():
        try:
            if plugin.attach(entry):
                attached.append((key, plugin))
        except Exception as e:
            logger.warning(
                "processor %r の付与判定に失敗しました (layer=%s): %s", plugin.name, entry.layer_id, e
            )

    names = {key for key, _ in attached}
    result: list[Processor] = []
    for key, plugin in attached:
        blockers = [normalize_key(n) for n in plugin.suppressed_by]
        hit = [b for b in blockers if b in names]
        if hit:
            logger.warning(
                "layer %s: %s は %s と併用できないため無効化します",
                entry.layer_id,
                plugin.name,
                ", ".join(hit),
            )
            continue
        try:
            result.append(plugin.create(entry, ctx))
        except Exception as e:
            logger.warning(
                "processor %r の生成に失敗しました (layer=%s): %s", plugin.name, entry.layer_id, e
            )
    return result


def is_animated(proc: Processor) -> bool:
    """`proc` が時間とともに位置/スケール/回転を動かすか。

    生成関数が返すプロセッサに `__animates__ = True` を付けて宣言する。属性の無い
    プロセッサ（静的角度の clock や不透明度だけの fade など）は静的扱い。
    """
    return bool(getattr(proc, "__animates__", False))


def get_plugin(name: str) -> ProcessorPlugin:
    """登録されたプラグインを取得。

    例外:
    - KeyError: 未登録名の場合。
    """
    return _processor_registry.get(name)


def list_processors() -> list[str]:
    """登録済みプロセッサ名を実行順で返す。"""
    return [key for key, _ in _sorted_plugins()]


def is_processor_registered(name: str) -> bool:
    return _processor_registry.is_registered(name)


def unregister(name: str) -> None:
    """名前を指定して登録を解除（存在しない場合は無視）。"""
    _processor_registry.unregister(name)


def get_registry() -> Mapping[str, ProcessorPlugin]:
    """読み取り専用ビューとしてレジストリ辞書を返す。"""
    return _processor_registry.registry


__all__ = [
    "ProcessorContext",
    "ProcessorPlugin",
    "processor",
    "processors_for_entry",
    "is_animated",
    "get_plugin",
    "list_processors",
    "is_processor_registered",
    "unregister",
    "get_registry",
]
