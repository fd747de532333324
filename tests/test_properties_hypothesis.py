import math

import pytest

hypothesis = pytest.importorskip("hypothesis", reason="hypothesis is a dev optional dependency")
from hypothesis import HealthCheck, given, settings, strategies as st  # type: ignore

from common.types import Dimensions, Point2D
from effects import ProcessorContext, build_base_state, processors_for_entry
from engine.core.anchor_geometry import compute_image_mapping
from engine.core.angles import normalize360
from engine.core.coordinates import image_to_stage, stage_to_image
from engine.core.layer_config import LayerConfigEntry, OrbitConfig
from engine.core.motion import MotionClock, MotionSpec
from engine.pipeline import run_pipeline

coord = st.floats(-5000, 5000, allow_nan=False)
size = st.floats(1, 4000, allow_nan=False)
scale = st.floats(0.01, 10, allow_nan=False)

# conftest の autouse（設定の再読込）は例を跨いでも無害
relaxed = settings(suppress_health_check=[HealthCheck.function_scoped_fixture])


@relaxed
@given(px=coord, py=coord, w=size, h=size, sx=scale, sy=scale, ox=coord, oy=coord)
def test_stage_image_round_trip(px, py, w, h, sx, sy, ox, oy):
    dims = Dimensions(w, h)
    s = Point2D(sx, sy)
    pos = Point2D(ox, oy)
    p = Point2D(px, py)
    back = image_to_stage(stage_to_image(p, dims, s, pos), dims, s, pos)
    assert back.x == pytest.approx(p.x, rel=1e-9, abs=1e-6)
    assert back.y == pytest.approx(p.y, rel=1e-9, abs=1e-6)


@relaxed
@given(a=st.floats(allow_nan=True, allow_infinity=True))
def test_normalize360_range_and_idempotent(a):
    n = normalize360(a)
    assert 0.0 <= n < 360.0
    assert normalize360(n) == n


@relaxed
@given(
    speed=st.floats(0.01, 500, allow_nan=False),
    ccw=st.booleans(),
    r=st.floats(1, 1500, allow_nan=False),
    bearing=st.floats(0, 360, allow_nan=False),
    t=st.floats(0, 1e9, allow_nan=False),
)
def test_orbit_distance_equals_radius(speed, ccw, r, bearing, t):
    center = Point2D(1024.0, 1024.0)
    a = math.radians(bearing)
    line = Point2D(center.x + r * math.cos(a), center.y - r * math.sin(a))
    entry = LayerConfigEntry(
        layer_id="p",
        image_id="img",
        position=center,
        orbit=OrbitConfig(
            MotionSpec(speed=speed, direction="ccw" if ccw else "cw"),
            center=center,
            line_point=line,
        ),
    )
    ctx = ProcessorContext(motion_clock=MotionClock())
    procs = processors_for_entry(entry, ctx)
    base = build_base_state(entry, compute_image_mapping(Dimensions(40.0, 40.0)), 2048.0)
    run_pipeline(base, procs, 0.0)
    out = run_pipeline(base, procs, t)
    p = out.transform.position
    assert math.hypot(p.x - center.x, p.y - center.y) == pytest.approx(r, rel=1e-6)
