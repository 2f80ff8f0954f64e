from __future__ import annotations

from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

from gesturematrix.core.types import Vec2

T = TypeVar("T")

_UNSEEDED = object()


class UpdaterNotSeeded(RuntimeError):
    """update() was called before the updater had a baseline value."""


def offset_delta(old: Vec2, new: Vec2) -> Vec2:
    return new - old


def scalar_delta(old: float, new: float) -> float:
    return new - old


def make_ratio(min_denominator: float = 1e-9) -> Callable[[float, float], float]:
    def ratio(old: float, new: float) -> float:
        # a collapsed previous sample carries no usable scale information
        if abs(old) < min_denominator:
            return 1.0
        return new / old
    return ratio


ratio = make_ratio()


class ValueUpdater(Generic[T]):
    """
    Remembers the last sample and turns each new sample into a step
    (difference or ratio) relative to it.
    """

    def __init__(self, combine: Callable[[T, T], T], value=_UNSEEDED):
        self.combine = combine
        self._value = value

    @property
    def seeded(self) -> bool:
        return self._value is not _UNSEEDED

    @property
    def value(self) -> T:
        if self._value is _UNSEEDED:
            raise UpdaterNotSeeded("value read before seed()")
        return self._value

    def seed(self, value: T) -> None:
        self._value = value

    def reset(self) -> None:
        self._value = _UNSEEDED

    def update(self, new_value: T) -> T:
        if self._value is _UNSEEDED:
            raise UpdaterNotSeeded("update() called before seed()")
        step = self.combine(self._value, new_value)
        self._value = new_value
        return step


class RotationPhase(str, Enum):
    UNSET = "UNSET"
    BASELINE = "BASELINE"
    TRACKING = "TRACKING"


class RotationTracker:
    """
    Rotation samples are absolute angles since gesture start, but the first
    non-zero one is only known once the fingers actually twist, so it becomes
    the baseline and produces no delta.
    """

    def __init__(self) -> None:
        self.phase = RotationPhase.UNSET
        self._updater: ValueUpdater[float] = ValueUpdater(scalar_delta)

    def reset(self) -> None:
        self.phase = RotationPhase.UNSET
        self._updater.reset()

    def feed(self, sample: float) -> Optional[float]:
        if self.phase == RotationPhase.UNSET:
            self._updater.seed(sample)
            self.phase = RotationPhase.BASELINE
            return None
        self.phase = RotationPhase.TRACKING
        return self._updater.update(sample)

    @property
    def last(self) -> Optional[float]:
        return self._updater.value if self._updater.seeded else None
