from __future__ import annotations

import math
from typing import Optional

from gesturematrix.core.config import InertiaTuning
from gesturematrix.core.curves import decelerate
from gesturematrix.core.matrix import scale_about, translate
from gesturematrix.core.types import InertialMode, Transform2D, UpdateSource, Vec2
from gesturematrix.core.value_updater import ValueUpdater


def choose_inertia(
    two_pointer: bool,
    pointer_count: int,
    release_gap_ms: int | None,
    velocity: Vec2,
    should_translate: bool,
    should_scale: bool,
    pinch_release_window_ms: int = 200,
) -> InertialMode:
    """
    Decide what (if anything) keeps moving after the fingers lift.

    Two fingers lifted almost together reads as a deliberate pinch release,
    so the zoom settles; otherwise a moving release flings the content.
    """
    moving = velocity.distance != 0.0

    if two_pointer and pointer_count in (0, 1) and moving:
        if should_scale and release_gap_ms is not None and release_gap_ms < pinch_release_window_ms:
            return InertialMode.SETTLE_SCALE
        if should_translate:
            return InertialMode.FLING
        return InertialMode.NONE

    if pointer_count == 0 and should_translate and moving:
        return InertialMode.FLING

    return InertialMode.NONE


class _Animation:
    mode = InertialMode.NONE
    source = UpdateSource.GESTURE

    def __init__(self, tuning: InertiaTuning) -> None:
        self.tuning = tuning
        self.elapsed = 0.0
        self.ticks = 0
        self.done = False
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        self.done = True

    def step(self, dt: float | None = None) -> tuple[Optional[Transform2D], bool]:
        if self.done:
            return None, True
        if dt is None:
            dt = self.tuning.tick_s
        self.ticks += 1
        self.elapsed += dt
        return self._advance(dt)

    def _advance(self, dt: float) -> tuple[Optional[Transform2D], bool]:
        raise NotImplementedError


class FlingAnimation(_Animation):
    """
    Keep panning with the release velocity, decaying exponentially.
    Stops once the speed is too small to see.
    """
    mode = InertialMode.FLING
    source = UpdateSource.FLING

    def __init__(self, velocity: Vec2, translation: ValueUpdater[Vec2], tuning: InertiaTuning) -> None:
        super().__init__(tuning)
        self.initial_velocity = velocity
        self.velocity = velocity
        self._translation = translation

    def _advance(self, dt: float) -> tuple[Optional[Transform2D], bool]:
        k = math.exp(-self.tuning.fling_decay * self.elapsed)
        self.velocity = self.initial_velocity * k
        if self.velocity.distance_squared < self.tuning.fling_stop_speed_sq:
            # the last (tiny) step is still applied
            self.done = True

        offset = self._translation.value.translate(self.velocity.x * dt, self.velocity.y * dt)
        delta = self._translation.update(offset)
        return translate(delta.x, delta.y), self.done


class SettleScaleAnimation(_Animation):
    """
    Continue a released pinch: the per-step scale starts at the last pinch
    ratio and eases out to 1.0 over a fixed duration.
    """
    mode = InertialMode.SETTLE_SCALE
    source = UpdateSource.SETTLE

    def __init__(self, ratio: float, focal: Vec2, scale: ValueUpdater[float], tuning: InertiaTuning) -> None:
        super().__init__(tuning)
        self.initial_ratio = ratio
        self.ratio = ratio
        self.focal = focal
        self._scale = scale

    def _advance(self, dt: float) -> tuple[Optional[Transform2D], bool]:
        duration = self.tuning.settle_duration_s
        if self.elapsed >= duration:
            self.done = True
            return None, True

        pct = self.elapsed / duration
        target = 1.0 + (self.initial_ratio - 1.0) * (1.0 - decelerate(pct))
        # the updater holds absolute scale, so its step comes back as `target`
        self.ratio = self._scale.update(self._scale.value * target)
        return scale_about(self.ratio, self.focal), False


def settle_tick_count(tuning: InertiaTuning) -> int:
    """Timer ticks until a settle animation stops (the last one applies nothing)."""
    return int(math.ceil(round(tuning.settle_duration_s / tuning.tick_s, 9)))


def fling_stop_time(speed: float, tuning: InertiaTuning) -> float:
    """Seconds until `speed * exp(-decay * t)` squared drops below the cutoff."""
    if speed * speed < tuning.fling_stop_speed_sq:
        return 0.0
    return math.log(speed * speed / tuning.fling_stop_speed_sq) / (2.0 * tuning.fling_decay)
