from __future__ import annotations

from typing import Callable, Optional

from gesturematrix.core.config import DEFAULT_PRESET, Preset
from gesturematrix.core.matrix import (
    compose, decompose, identity, rotate_about, scale_about, translate,
)
from gesturematrix.core.types import (
    DecomposedValues, InertialMode, SessionState, Transform2D,
    TransformUpdate, UpdateSource, Vec2, ZERO,
)
from gesturematrix.core.value_updater import (
    RotationTracker, ValueUpdater, make_ratio, offset_delta,
)
from gesturematrix.interpreter.focal import FocalResolver, passthrough
from gesturematrix.interpreter.inertia import (
    FlingAnimation, SettleScaleAnimation, choose_inertia,
)
from gesturematrix.interpreter.pointers import PointerTracker

UpdateCallback = Callable[[TransformUpdate], None]


class GestureSession:
    """
    Deterministic gesture-to-matrix session.

    Feeds start/update/end samples into one cumulative transform and, after
    release, continues it with an inertial animation advanced by step()/tick().
    The host owns the session and drives both: there are no timers in here.
    """

    compose = staticmethod(compose)
    decompose = staticmethod(decompose)

    def __init__(
        self,
        preset: Preset = DEFAULT_PRESET,
        focal_resolver: Optional[FocalResolver] = None,
        on_update: Optional[UpdateCallback] = None,
        debug: bool = False,
    ) -> None:
        self.preset = preset
        self.focal_resolver: FocalResolver = focal_resolver or passthrough
        self.on_update = on_update
        self.debug = debug

        self.state: SessionState = SessionState.IDLE
        self._matrix: Transform2D = identity()

        # shared with the inertial animations so their steps continue the gesture
        self._translation: ValueUpdater[Vec2] = ValueUpdater(offset_delta)
        self._scale: ValueUpdater[float] = ValueUpdater(make_ratio(preset.inertia.min_scale_denominator))
        self._rotation = RotationTracker()

        self.pointers = PointerTracker()

        # inputs for the inertia heuristic
        self._last_focal: Vec2 = ZERO
        self._last_ratio: float = 1.0

        self._animation: FlingAnimation | SettleScaleAnimation | None = None

    # ---------------------- pointers ----------------------

    def pointer_down(self, t_ms: int) -> None:
        self.pointers.down(t_ms)

    def pointer_up(self, t_ms: int) -> None:
        self.pointers.up(t_ms)

    def pointer_count_change(self, delta: int, t_ms: int) -> None:
        self.pointers.change(delta, t_ms)

    # ---------------------- gesture ----------------------

    def start(self, focal) -> None:
        self.cancel_inertia()
        self._translation.seed(Vec2.of(focal))
        self._scale.seed(1.0)
        self._rotation.reset()
        self._last_ratio = 1.0
        self.state = SessionState.ACTIVE

    def update(self, focal, scale: float = 1.0, rotation: float = 0.0) -> TransformUpdate:
        """
        Apply one sample. `scale` and `rotation` are cumulative since start();
        1.0 and 0.0 mean "no change this sample".
        """
        focal = Vec2.of(focal)
        gestures = self.preset.gestures
        if self.state == SessionState.INERTIAL:
            # live samples take over from a running fling or settle
            self.cancel_inertia()
        t_delta = s_delta = r_delta = None

        if gestures.should_translate:
            d = self._translation.update(focal)
            t_delta = translate(d.x, d.y)

        fp = self.focal_resolver(focal)
        self._last_focal = fp

        # near-zero samples are skipped like unit ones and never become the baseline
        if gestures.should_scale and scale != 1.0 and abs(scale) >= self.preset.inertia.min_scale_denominator:
            ratio = self._scale.update(scale)
            if ratio != 1.0:
                self._last_ratio = ratio
            s_delta = scale_about(ratio, fp)

        if gestures.should_rotate and rotation != 0.0:
            # first twist only sets the baseline
            d_angle = self._rotation.feed(rotation)
            if d_angle is not None:
                r_delta = rotate_about(d_angle, fp)

        self._matrix = compose(self._matrix, t_delta, s_delta, r_delta)
        self.state = SessionState.ACTIVE
        return self._emit(t_delta, s_delta, r_delta, UpdateSource.GESTURE)

    def end(self, velocity, pointer_count: int | None = None) -> InertialMode:
        """
        Finish the gesture. The matrix is left as is; a fling or a settling
        zoom may be started (advance it with step()/tick()).
        """
        velocity = Vec2.of(velocity)
        count = self.pointers.count if pointer_count is None else pointer_count
        tuning = self.preset.inertia
        gestures = self.preset.gestures

        mode = InertialMode.NONE
        if tuning.enabled:
            mode = choose_inertia(
                two_pointer=self.pointers.two_pointer,
                pointer_count=count,
                release_gap_ms=self.pointers.release_gap_ms,
                velocity=velocity,
                should_translate=gestures.should_translate,
                should_scale=gestures.should_scale,
                pinch_release_window_ms=tuning.pinch_release_window_ms,
            )

        if self.debug:
            print(
                f"[GestureMatrix] end: pointers={count} two_pointer={self.pointers.two_pointer} "
                f"gap_ms={self.pointers.release_gap_ms} v=({velocity.x:.1f}, {velocity.y:.1f}) "
                f"last_ratio={self._last_ratio:.4f} -> {mode.value}"
            )

        self.state = SessionState.IDLE
        if mode == InertialMode.SETTLE_SCALE:
            self._begin(SettleScaleAnimation(self._last_ratio, self._last_focal, self._scale, tuning))
        elif mode == InertialMode.FLING:
            self._begin(FlingAnimation(velocity, self._translation, tuning))
        return mode

    # ---------------------- inertia ----------------------

    def _begin(self, animation: FlingAnimation | SettleScaleAnimation) -> None:
        self.cancel_inertia()
        self._animation = animation
        self.state = SessionState.INERTIAL

    def cancel_inertia(self) -> None:
        if self._animation is not None:
            self._animation.cancel()
            self._animation = None
        if self.state == SessionState.INERTIAL:
            self.state = SessionState.IDLE

    def step(self, dt: float | None = None) -> tuple[Optional[TransformUpdate], bool]:
        """
        Advance the running animation by `dt` seconds (default: one tick).
        Returns the emitted update (None if nothing was applied) and whether
        the animation has finished.
        """
        anim = self._animation
        if anim is None:
            return None, True

        delta, done = anim.step(dt)
        out = None
        if delta is not None:
            self._matrix = delta @ self._matrix
            if anim.mode == InertialMode.FLING:
                out = self._emit(delta, None, None, anim.source)
            else:
                out = self._emit(None, delta, None, anim.source)

        if done:
            self._animation = None
            if self.state == SessionState.INERTIAL:
                self.state = SessionState.IDLE
        return out, done

    def tick(self, dt: float | None = None) -> Optional[TransformUpdate]:
        return self.step(dt)[0]

    # ---------------------- state ----------------------

    @property
    def matrix(self) -> Transform2D:
        return self._matrix.copy()

    @property
    def inertial_mode(self) -> InertialMode:
        return self._animation.mode if self._animation is not None else InertialMode.NONE

    @property
    def is_animating(self) -> bool:
        return self._animation is not None

    @property
    def last_focal_point(self) -> Vec2:
        return self._last_focal

    @property
    def last_scale_ratio(self) -> float:
        return self._last_ratio

    def values(self) -> DecomposedValues:
        return decompose(self._matrix)

    def reset(self) -> None:
        """Back to identity; pointer bookkeeping is left alone."""
        self.cancel_inertia()
        self._matrix = identity()
        self.state = SessionState.IDLE

    def _emit(self, t_delta, s_delta, r_delta, source: UpdateSource) -> TransformUpdate:
        out = TransformUpdate(
            matrix=self._matrix.copy(),
            translation_delta=identity() if t_delta is None else t_delta,
            scale_delta=identity() if s_delta is None else s_delta,
            rotation_delta=identity() if r_delta is None else r_delta,
            source=source,
        )
        if self.on_update is not None:
            self.on_update(out)
        return out
