from __future__ import annotations

import logging
import math

import pytest

from api import FrameClock, Stage, StaticAssetResolver, entries_from_dicts, entry_from_dict
from common.types import Point2D

HOUR_MS = 3_600_000

ASSETS = {
    "dial": {"src": "dial.png", "width": 400, "height": 400},
    "hand": {"src": "hand.png", "width": 20, "height": 200},
    "ball": ("ball.png", 50, 50),
}


def _stage(layers, **kw) -> Stage:
    return Stage(entries_from_dicts(layers), StaticAssetResolver(ASSETS), **kw)


@pytest.mark.smoke
def test_static_layer_end_to_end() -> None:
    stage = Stage(
        entries_from_dicts([{"id": "sq", "image": "sq", "position": [1024, 1024]}]),
        StaticAssetResolver({"sq": {"width": 100, "height": 100}}),
    )
    (layer,) = stage.layers
    m = layer.base.mapping
    assert m.image_tip.x == pytest.approx(50.0) and m.image_tip.y == pytest.approx(0.0)
    assert m.image_base.x == pytest.approx(50.0) and m.image_base.y == pytest.approx(100.0)
    assert m.display_axis_angle == pytest.approx(90.0)
    assert m.display_rotation == pytest.approx(0.0)

    frame = stage.compute_frame(0.0)
    out = frame.layer("sq")
    assert out is not None
    assert out.position == (1024.0, 1024.0)
    assert out.scale == (1.0, 1.0)
    assert out.rotation == 0.0
    assert out.opacity == 1.0 and out.visible is True
    assert out.as_dict()["position"] == {"x": 1024.0, "y": 1024.0}


def test_unresolvable_asset_skips_only_that_layer(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="api.stage"):
        stage = _stage(
            [
                {"id": "dial", "image": "dial", "position": [1024, 1024]},
                {"id": "ghost", "image": "missing", "position": [1024, 1024]},
            ]
        )
        frame = stage.compute_frame(0.0)
    assert [o.layer_id for o in frame.layers] == ["dial"]
    assert stage.skipped == ("ghost",)
    assert any("ghost" in r.getMessage() for r in caplog.records)


def test_frame_layers_sorted_by_z() -> None:
    stage = _stage(
        [
            {"id": "hand", "image": "hand", "z": 3, "position": [1024, 1024]},
            {"id": "dial", "image": "dial", "z": 0, "position": [1024, 1024]},
            {"id": "ball", "image": "ball", "z": 1, "position": [1024, 1024]},
        ]
    )
    assert [o.layer_id for o in stage.compute_frame(0.0).layers] == ["dial", "ball", "hand"]


def test_duplicate_ids_keep_first() -> None:
    stage = _stage(
        [
            {"id": "x", "image": "dial", "position": [100, 100]},
            {"id": "x", "image": "ball", "position": [200, 200]},
        ]
    )
    (layer,) = stage.layers
    assert layer.base.image_id == "dial"


def test_mapping_cache_shared_between_layers() -> None:
    stage = _stage([{"id": f"h{i}", "image": "hand", "position": [1024, 1024]} for i in range(5)])
    stage.prepare()
    assert stage.mapping_cache.counters() == {"size": 1, "hits": 4, "misses": 1}


def test_static_offstage_layer_dropped_but_animated_kept() -> None:
    stage = _stage(
        [
            {"id": "far", "image": "ball", "position": [-900, 100]},
            {"id": "far_spin", "image": "ball", "position": [-900, 100], "spin": {"speed": 1}},
        ]
    )
    assert [p.layer_id for p in stage.layers] == ["far_spin"]
    frame = stage.compute_frame(0.0)
    assert frame.layers == ()
    hidden = stage.compute_frame(0.0, include_hidden=True)
    assert [(o.layer_id, o.visible) for o in hidden.layers] == [("far_spin", False)]


def test_drop_static_offstage_can_be_disabled(monkeypatch) -> None:
    from common import settings

    monkeypatch.setenv("LST_DROP_STATIC_OFFSTAGE", "0")
    settings.reload_from_env()
    stage = _stage([{"id": "far", "image": "ball", "position": [-900, 100]}])
    assert [p.layer_id for p in stage.layers] == ["far"]
    assert stage.compute_frame(0.0).layers == ()


def test_orbiting_layer_moves_between_frames() -> None:
    stage = _stage(
        [
            {
                "id": "planet",
                "image": "ball",
                "position": [1124, 1024],
                "orbit": {"speed": 1, "center": [1024, 1024], "line_point": [1124, 1024]},
            }
        ]
    )
    a = stage.compute_frame(0.0).layer("planet")
    b = stage.compute_frame(HOUR_MS / 4).layer("planet")
    assert a is not None and b is not None
    assert a.position == pytest.approx((1124.0, 1024.0))
    assert b.position == pytest.approx((1024.0, 1124.0))


def test_layer_state_is_cached_within_a_frame() -> None:
    stage = _stage([{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 60}}])
    stage.compute_frame(0.0)
    first = stage.layer_state("s", 0.0)
    # 同一フレーム内では別の時刻を渡しても再計算しない
    again = stage.layer_state("s", 30_000.0)
    assert first is again
    stage.next_frame()
    moved = stage.layer_state("s", 30_000.0)
    assert moved is not None and first is not None
    assert moved.transform.rotation != first.transform.rotation
    assert stage.layer_state("unknown", 0.0) is None


def test_stages_do_not_share_motion_start() -> None:
    layers = [{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 1}}]
    one, two = _stage(layers), _stage(layers)
    one.compute_frame(0.0)
    out_one = one.compute_frame(HOUR_MS / 4).layer("s")
    out_two = two.compute_frame(HOUR_MS / 4).layer("s")
    assert out_one is not None and out_two is not None
    assert out_one.rotation == pytest.approx(90.0)
    assert out_two.rotation == 0.0


def test_reset_motion_restarts_angle() -> None:
    stage = _stage([{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 1}}])
    stage.compute_frame(0.0)
    stage.reset_motion("s")
    out = stage.compute_frame(HOUR_MS / 4).layer("s")
    assert out is not None and out.rotation == 0.0


def test_processor_failure_does_not_break_frame() -> None:
    stage = _stage(
        [
            {"id": "ok", "image": "dial", "position": [1024, 1024]},
            {"id": "bad", "image": "ball", "position": [1024, 1024], "spin": {"speed": 1}},
        ]
    )
    layers = stage.layers
    bad = next(p for p in layers if p.layer_id == "bad")

    def broken(state, ts):  # noqa: ANN001 - テスト用
        raise ZeroDivisionError

    object.__setattr__(bad, "processors", (broken,))
    frame = stage.compute_frame(1000.0)
    assert {o.layer_id for o in frame.layers} == {"ok", "bad"}
    assert frame.layer("bad").rotation == 0.0  # type: ignore[union-attr]


def test_tick_advances_internal_clock() -> None:
    stage = _stage(
        [{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 3600}}],
        clock_origin_ms=0.0,
    )
    clock = FrameClock([stage])
    clock.tick(0.0)
    clock.tick(0.25)
    frame = stage.last_frame
    assert frame is not None
    assert frame.timestamp_ms == pytest.approx(250.0)
    # 3600 回転/時 = 1 回転/秒 → 0.25 秒で 90°
    assert frame.layer("s").rotation == pytest.approx(90.0)  # type: ignore[union-attr]


def test_explicit_stage_size_and_timezone() -> None:
    stage = _stage(
        [{"id": "h", "image": "hand", "position": [256, 256], "clock": {"mode": "hour", "format": "12"}}],
        stage_size=512,
        default_timezone="UTC+3",
    )
    assert stage.stage_size == 512.0
    frame = stage.compute_frame(0.0)
    assert frame.stage_size == 512.0
    assert frame.layer("h").rotation == pytest.approx(90.0)  # type: ignore[union-attr]


def test_output_position_is_image_center_in_stage_space() -> None:
    stage = _stage([{"id": "b", "image": "ball", "position": [0, 0], "position_image_point": [0, 0], "scale": 200}])
    out = stage.compute_frame(0.0).layer("b")
    assert out is not None
    # 左上角を (0,0) に置く → 中心は (50, 50)（50px × 2 倍の半分）
    assert Point2D(*out.position) == Point2D(50.0, 50.0)
    assert (out.width, out.height) == (50.0, 50.0)


@pytest.mark.parametrize("size", [math.nan, -100.0, 0.0])
def test_invalid_stage_size_falls_back_to_setting(caplog, size) -> None:
    with caplog.at_level(logging.WARNING, logger="api.stage"):
        stage = _stage([{"id": "dial", "image": "dial", "position": [1024, 1024]}], stage_size=size)
    assert stage.stage_size == 2048.0
    assert any("stage_size" in r.getMessage() for r in caplog.records)
    frame = stage.compute_frame(0.0)
    assert frame.stage_size == 2048.0
    assert [o.layer_id for o in frame.layers] == ["dial"]


def test_nan_stage_size_still_culls_offstage_layers() -> None:
    stage = _stage(
        [{"id": "far", "image": "ball", "position": [-900, 100], "spin": {"speed": 1}}],
        stage_size=math.nan,
    )
    assert stage.compute_frame(0.0).layers == ()


def test_duplicate_ids_keep_first_definition_regardless_of_z() -> None:
    entries = [
        entry_from_dict({"id": "x", "image": "dial", "z": 5, "position": [100, 100]}),
        entry_from_dict({"id": "x", "image": "ball", "z": 0, "position": [900, 900]}),
    ]
    stage = Stage(entries, StaticAssetResolver(ASSETS))
    (layer,) = stage.layers
    assert layer.base.image_id == "dial"
    assert layer.base.transform.position == Point2D(100.0, 100.0)

    (from_dicts,) = entries_from_dicts(
        [
            {"id": "y", "image": "dial", "z": 5},
            {"id": "y", "image": "ball", "z": 0},
        ]
    )
    assert from_dicts.image_id == "dial"


def test_repeated_timestamp_shares_the_frame() -> None:
    stage = _stage([{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 60}}])
    first = stage.compute_frame(1000.0)
    again = stage.compute_frame(1000.0)
    counters = stage.frame_cache.counters()
    assert again.frame_id == first.frame_id
    assert (counters["misses"], counters["hits"]) == (1, 1)
    assert again.layers == first.layers

    later = stage.compute_frame(2000.0)
    assert later.frame_id == first.frame_id + 1
    assert stage.frame_cache.counters()["misses"] == 2


def test_reset_motion_starts_a_new_frame_for_same_timestamp() -> None:
    stage = _stage([{"id": "s", "image": "hand", "position": [1024, 1024], "spin": {"speed": 1}}])
    stage.compute_frame(0.0)
    turned = stage.compute_frame(HOUR_MS / 4).layer("s")
    stage.reset_motion()
    restarted = stage.compute_frame(HOUR_MS / 4).layer("s")
    assert turned is not None and restarted is not None
    assert turned.rotation == pytest.approx(90.0)
    assert restarted.rotation == 0.0


@pytest.mark.parametrize(
    "blocks",
    [
        {"clock": {"mode": "none", "angle": 45}},
        {"orbit": {"show_line": True, "orient": True, "center": [-800, 100]}},
        {"fade": {"min": 0.2, "max": 0.8, "frequency": 0.5}},
    ],
    ids=["static-clock", "line-only-orbit", "fade"],
)
def test_layers_that_do_not_move_are_static(blocks) -> None:
    stage = _stage([{"id": "far", "image": "ball", "position": [-900, 100], **blocks}])
    assert stage.layers == ()


@pytest.mark.parametrize(
    "blocks",
    [
        {"spin": {"speed": 1}},
        {"orbit": {"speed": 1, "center": [-800, 100]}},
        {"clock": {"mode": "second", "center": [-800, 100]}},
        {"pulse": {"amplitude": 0.5, "frequency": 1}},
    ],
    ids=["spin", "orbit", "alias-clock", "pulse"],
)
def test_moving_layers_are_animated(blocks) -> None:
    stage = _stage([{"id": "far", "image": "ball", "position": [-900, 100], **blocks}])
    (layer,) = stage.layers
    assert layer.base.animated is True
