import math

import numpy as np
import pytest

from gesturematrix.core.config import (
    DEFAULT_PRESET, STATIC_PRESET, GestureOptions, Preset, PresetName,
)
from gesturematrix.core.matrix import (
    apply_to_point, compose, decompose, identity, rotate_about, scale_about, translate,
)
from gesturematrix.core.types import (
    Alignment, InertialMode, SessionState, UpdateSource, Vec2,
)
from gesturematrix.core.value_updater import UpdaterNotSeeded
from gesturematrix.interpreter.focal import make_focal_resolver
from gesturematrix.interpreter.state_machine import GestureSession


def pinch(s: GestureSession, t=0, focal=Vec2(100.0, 100.0), steps=10, scale_step=0.05,
          gap_ms=150, velocity=Vec2(5.0, 5.0)):
    """Two fingers down, spread, lift `gap_ms` apart. Returns the chosen mode."""
    s.pointer_down(t); s.pointer_down(t)
    s.start(focal)
    for i in range(1, steps + 1):
        t += 16
        s.update(focal, 1.0 + scale_step * i)
    t += 16
    s.pointer_up(t)
    s.pointer_up(t + gap_ms)
    return s.end(velocity)


def pan(s: GestureSession, t=0, start=Vec2(0.0, 0.0), step=Vec2(10.0, 0.0), steps=5,
        velocity=Vec2(300.0, 0.0)):
    s.pointer_down(t)
    s.start(start)
    p = start
    for _ in range(steps):
        t += 16
        p = p + step
        s.update(p)
    s.pointer_up(t)
    return s.end(velocity)


def drain(s: GestureSession, limit=10_000):
    out, ticks = [], 0
    while s.is_animating and ticks < limit:
        upd, _ = s.step()
        ticks += 1
        if upd is not None:
            out.append(upd)
    return out, ticks


# ---------------------- manual updates ----------------------

def test_update_reports_identity_for_skipped_kinds():
    seen = []
    s = GestureSession(on_update=seen.append)
    s.start((10.0, 10.0))
    upd = s.update((15.0, 10.0))

    assert seen == [upd]
    assert upd.source == UpdateSource.GESTURE
    assert np.allclose(upd.translation_delta, translate(5.0, 0.0))
    assert np.array_equal(upd.scale_delta, identity())
    assert np.array_equal(upd.rotation_delta, identity())
    assert np.allclose(upd.matrix, translate(5.0, 0.0))
    assert s.state == SessionState.ACTIVE


def test_scale_pivots_on_focal_point_and_uses_ratios():
    s = GestureSession()
    f = Vec2(50.0, 50.0)
    s.start(f)
    s.update(f, 2.0)
    assert np.allclose(s.matrix, scale_about(2.0, f))
    assert s.last_scale_ratio == 2.0

    upd = s.update(f, 3.0)
    assert upd.scale_delta[0, 0] == pytest.approx(1.5)
    assert decompose(s.matrix).scale == pytest.approx(3.0)
    assert np.allclose(apply_to_point(s.matrix, f).to_tuple(), f.to_tuple())


def test_unit_scale_sample_is_no_change():
    s = GestureSession()
    s.start((0.0, 0.0))
    s.update((0.0, 0.0), 1.5)
    upd = s.update((0.0, 0.0), 1.0)
    assert np.array_equal(upd.scale_delta, identity())
    assert s.last_scale_ratio == 1.5


def test_first_rotation_sample_only_sets_baseline():
    f = Vec2(40.0, 30.0)
    s = GestureSession()
    s.start(f)
    first = s.update(f, rotation=0.2)
    assert np.array_equal(first.rotation_delta, identity())
    assert np.allclose(s.matrix, identity())

    second = s.update(f, rotation=0.5)
    assert np.allclose(second.rotation_delta, rotate_about(0.3, f))
    assert decompose(s.matrix).rotation == pytest.approx(0.3)


def test_rotation_baseline_resets_each_session():
    f = Vec2(0.0, 0.0)
    s = GestureSession()
    s.start(f)
    s.update(f, rotation=0.2)
    s.update(f, rotation=0.4)
    s.end(Vec2())
    s.start(f)
    upd = s.update(f, rotation=1.0)
    assert np.array_equal(upd.rotation_delta, identity())


def test_translation_is_folded_in_before_scale():
    s = GestureSession()
    s.start((0.0, 0.0))
    s.update((10.0, 0.0), 2.0)
    expected = compose(None, translate(10.0, 0.0), scale_about(2.0, Vec2(10.0, 0.0)))
    assert np.allclose(s.matrix, expected)


def test_disabled_kinds_stay_identity():
    preset = Preset(name=PresetName.DEFAULT, gestures=GestureOptions(should_translate=False, should_rotate=False))
    s = GestureSession(preset)
    s.start((0.0, 0.0))
    s.update((20.0, 5.0), 1.0, 0.1)
    upd = s.update((30.0, 5.0), 1.0, 0.4)
    assert np.array_equal(upd.translation_delta, identity())
    assert np.array_equal(upd.rotation_delta, identity())
    assert np.allclose(s.matrix, identity())


def test_alignment_focal_point_is_fixed():
    opts = GestureOptions(focal_point_alignment=Alignment.CENTER)
    preset = Preset(name=PresetName.DEFAULT, gestures=opts)
    s = GestureSession(preset, focal_resolver=make_focal_resolver(opts, size=(200.0, 100.0)))
    s.start((10.0, 10.0))
    s.update((10.0, 10.0), 2.0)
    p = apply_to_point(s.matrix, Vec2(100.0, 50.0))
    assert p.x == pytest.approx(100.0)
    assert p.y == pytest.approx(50.0)
    assert s.last_focal_point == Vec2(100.0, 50.0)


def test_update_before_start_fails_fast():
    with pytest.raises(UpdaterNotSeeded):
        GestureSession().update((0.0, 0.0))


def test_static_compose_and_decompose_are_exposed():
    m = GestureSession.compose(None, translate(1.0, 2.0))
    assert GestureSession.decompose(m).translation == Vec2(1.0, 2.0)


# ---------------------- release / inertia ----------------------

def test_end_leaves_matrix_alone():
    s = GestureSession(STATIC_PRESET)
    s.pointer_down(0)
    s.start((0.0, 0.0))
    s.update((25.0, 0.0))
    before = s.matrix
    assert s.end(Vec2(500.0, 0.0)) == InertialMode.NONE
    assert np.array_equal(s.matrix, before)
    assert s.state == SessionState.IDLE


def test_quick_two_finger_release_settles_scale():
    s = GestureSession()
    mode = pinch(s, gap_ms=150, velocity=Vec2(5.0, 5.0))
    assert mode == InertialMode.SETTLE_SCALE
    assert s.inertial_mode == InertialMode.SETTLE_SCALE
    assert s.state == SessionState.INERTIAL


def test_slow_two_finger_release_flings():
    s = GestureSession()
    assert pinch(s, gap_ms=400) == InertialMode.FLING


def test_one_finger_release_flings_or_stops():
    s = GestureSession()
    assert pan(s, velocity=Vec2(300.0, 0.0)) == InertialMode.FLING
    s.cancel_inertia()
    assert pan(s, velocity=Vec2(0.0, 0.0)) == InertialMode.NONE


def test_inertia_can_be_disabled():
    s = GestureSession(STATIC_PRESET)
    assert pinch(s) == InertialMode.NONE
    assert not s.is_animating
    assert s.tick() is None


def test_stale_release_gap_is_not_reused():
    s = GestureSession()
    assert pinch(s, gap_ms=20) == InertialMode.SETTLE_SCALE
    drain(s)

    # second pinch ends while one finger is still down
    f = Vec2(100.0, 100.0)
    s.pointer_down(2000); s.pointer_down(2000)
    s.start(f)
    s.update(f, 1.2)
    s.pointer_up(2100)
    assert s.end(Vec2(40.0, 0.0)) == InertialMode.FLING


def test_fling_continues_the_pan():
    s = GestureSession()
    pan(s, steps=5, velocity=Vec2(300.0, 0.0))
    x_released = decompose(s.matrix).translation.x
    assert x_released == pytest.approx(50.0)

    updates, ticks = drain(s)
    assert ticks > 1
    assert all(u.source == UpdateSource.FLING for u in updates)
    dxs = [u.translation_delta[0, 3] for u in updates]
    assert all(d > 0 for d in dxs)
    assert dxs == sorted(dxs, reverse=True)
    # total glide is bounded by v0 / decay
    glide = decompose(s.matrix).translation.x - x_released
    assert 0 < glide < 300.0 / 8.0
    assert s.state == SessionState.IDLE


def test_settle_continues_the_zoom():
    seen = []
    s = GestureSession(on_update=seen.append)
    pinch(s, steps=10, scale_step=0.05)
    r0 = s.last_scale_ratio
    assert r0 > 1.0
    scale_released = decompose(s.matrix).scale
    seen.clear()

    updates, ticks = drain(s)
    assert ticks == 34
    assert len(updates) == 33
    assert seen == updates
    assert all(u.source == UpdateSource.SETTLE for u in updates)
    ratios = [u.scale_delta[0, 0] for u in updates]
    assert all(r >= 1.0 - 1e-12 for r in ratios)
    assert ratios[0] < r0
    scales = [decompose(u.matrix).scale for u in updates]
    assert scale_released <= scales[0]
    assert scales == sorted(scales)
    assert not s.is_animating


def test_new_gesture_cancels_running_inertia():
    s = GestureSession()
    pan(s, velocity=Vec2(900.0, 0.0))
    s.tick(); s.tick()
    assert s.is_animating

    s.pointer_down(5000)
    s.start((0.0, 0.0))
    frozen = s.matrix
    assert not s.is_animating
    for _ in range(10):
        assert s.step() == (None, True)
    assert np.array_equal(s.matrix, frozen)


def test_new_release_replaces_running_animation():
    s = GestureSession()
    pan(s, velocity=Vec2(900.0, 0.0))
    s.tick()
    assert pinch(s, t=1000, gap_ms=10) == InertialMode.SETTLE_SCALE
    updates, _ = drain(s)
    assert all(u.source == UpdateSource.SETTLE for u in updates)


def test_reset_returns_to_identity():
    s = GestureSession()
    pan(s)
    s.reset()
    assert np.array_equal(s.matrix, identity())
    assert not s.is_animating
    v = s.values()
    assert v.scale == 1.0 and v.rotation == 0.0


def test_debug_prints_release_summary(capsys):
    s = GestureSession(DEFAULT_PRESET, debug=True)
    pinch(s, gap_ms=150)
    out = capsys.readouterr().out
    assert "[GestureMatrix] end:" in out
    assert "SETTLE_SCALE" in out


def test_long_pinch_rotation_round_trip():
    f = Vec2(200.0, 150.0)
    s = GestureSession()
    s.start(f)
    for i in range(1, 31):
        s.update(f, 1.0 + 0.01 * i, math.radians(i))
    v = s.values()
    # baseline is the first sample (1 degree), so 29 degrees were applied
    assert v.rotation == pytest.approx(math.radians(29.0))
    assert v.scale == pytest.approx(1.30)


def test_collapsed_scale_sample_is_skipped():
    f = Vec2(80.0, 60.0)
    s = GestureSession()
    s.start(f)
    upd = s.update(f, 0.0)
    assert np.array_equal(upd.scale_delta, identity())
    assert np.allclose(s.matrix, identity())

    s.update(f, 1.5)
    s.update(f, 2.0)
    assert s.values().scale == pytest.approx(2.0)
    assert s.last_scale_ratio == pytest.approx(2.0 / 1.5)


def test_update_during_inertia_takes_over():
    s = GestureSession()
    pan(s, velocity=Vec2(900.0, 0.0))
    assert s.state == SessionState.INERTIAL

    upd = s.update((60.0, 0.0))
    assert not s.is_animating
    assert s.state == SessionState.ACTIVE
    assert upd.source == UpdateSource.GESTURE
    assert upd.translation_delta[0, 3] == pytest.approx(10.0)
    assert s.step() == (None, True)


@pytest.mark.parametrize("gap_ms,expected", [(30, InertialMode.SETTLE_SCALE), (400, InertialMode.FLING)])
def test_pointer_count_changes_drive_the_release_choice(gap_ms, expected):
    f = Vec2(100.0, 100.0)
    s = GestureSession()
    s.pointer_count_change(+1, 0)
    s.pointer_count_change(+1, 8)
    s.start(f)
    for i in range(1, 6):
        s.update(f, 1.0 + 0.1 * i)
    s.pointer_count_change(-1, 100)
    s.pointer_count_change(-1, 100 + gap_ms)
    assert s.pointers.count == 0
    assert s.end(Vec2(20.0, 0.0)) == expected
