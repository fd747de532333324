from __future__ import annotations

import pytest

from common.base_registry import BaseRegistry


def test_register_and_get_with_normalization() -> None:
    reg = BaseRegistry()

    @reg.register(None)
    class ClockFollow:  # noqa: N801 (テスト用)
        pass

    assert reg.is_registered("clock_follow")
    assert reg.get("ClockFollow") is ClockFollow
    assert "clock_follow" in reg.list_all()


def test_duplicate_and_unregister() -> None:
    reg = BaseRegistry()

    @reg.register(None)
    def spin():  # noqa: ANN001 - テスト用
        return 1

    with pytest.raises(ValueError):
        reg.register("spin")(lambda: 2)

    reg.unregister("Spin")
    assert not reg.is_registered("spin")


def test_replace_keeps_registration_order() -> None:
    reg = BaseRegistry()
    reg.add("a", 1)
    reg.add("b", 2)
    reg.add("a", 3, replace=True)
    assert reg.list_all() == ["a", "b"]
    assert reg.get("a") == 3


def test_unknown_key_raises_key_error() -> None:
    reg = BaseRegistry()
    reg.unregister("nonexistent")  # 例外にならない
    with pytest.raises(KeyError):
        reg.get("nonexistent")


@pytest.mark.parametrize("bad", ["", 1])
def test_invalid_keys_rejected(bad: object) -> None:
    reg = BaseRegistry()
    with pytest.raises((TypeError, ValueError)):
        reg.is_registered(bad)  # type: ignore[arg-type]


def test_registry_view_is_a_copy() -> None:
    reg = BaseRegistry()
    reg.add("fade", object())
    snap = reg.registry
    snap["bogus"] = object()
    assert not reg.is_registered("bogus")
    reg.clear()
    assert reg.list_all() == []
