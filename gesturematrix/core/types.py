"""
GestureMatrix — CORE CONTRACTS

Shared value types passed between the host, the gesture session and the
inertial animator.

Matrices are 4x4 homogeneous numpy arrays (row-major, column vectors),
restricted to 2D affine transforms: bottom row is (0, 0, 0, 1) and the
z-scale stays 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np


# ============================================================
# Geometry
# ============================================================

Transform2D = np.ndarray


@dataclass(frozen=True)
class Vec2:
    """Point, offset or velocity in host pixels (or pixels per second)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> Vec2:
        return self.__mul__(scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    @property
    def distance(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def distance_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    @property
    def direction(self) -> float:
        """Angle in radians, (-pi, pi]."""
        return math.atan2(self.y, self.x)

    def translate(self, dx: float, dy: float) -> Vec2:
        return Vec2(self.x + dx, self.y + dy)

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)

    @staticmethod
    def of(p) -> Vec2:
        if isinstance(p, Vec2):
            return p
        return Vec2(float(p[0]), float(p[1]))


ZERO = Vec2(0.0, 0.0)


@dataclass(frozen=True)
class Alignment:
    """
    Point within a rectangle, in [-1, 1] on both axes.
    (-1, -1) is the top-left corner, (0, 0) the center.
    """
    x: float = 0.0
    y: float = 0.0

    def along_size(self, width: float, height: float) -> Vec2:
        return Vec2((self.x + 1.0) / 2.0 * width, (self.y + 1.0) / 2.0 * height)


Alignment.TOP_LEFT = Alignment(-1.0, -1.0)
Alignment.CENTER = Alignment(0.0, 0.0)
Alignment.BOTTOM_RIGHT = Alignment(1.0, 1.0)


@dataclass(frozen=True)
class DecomposedValues:
    # Only meaningful for matrices without shear or non-uniform scale.
    translation: Vec2
    scale: float
    rotation: float

    def __str__(self) -> str:
        return (
            f"DecomposedValues(translation: ({self.translation.x:.1f}, {self.translation.y:.1f}), "
            f"scale: {self.scale:.3f}, rotation: {self.rotation:.3f})"
        )


# ============================================================
# Session → Host
# ============================================================

class SessionState(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    INERTIAL = "INERTIAL"


class InertialMode(str, Enum):
    NONE = "NONE"
    FLING = "FLING"
    SETTLE_SCALE = "SETTLE_SCALE"


class UpdateSource(str, Enum):
    GESTURE = "gesture"
    FLING = "fling"
    SETTLE = "settle"


@dataclass(frozen=True, eq=False)
class TransformUpdate:
    """
    One emitted transform update.

    `matrix` is the cumulative transform the host renders with; the three
    deltas are what this update contributed (identity when skipped).
    """
    matrix: Transform2D
    translation_delta: Transform2D
    scale_delta: Transform2D
    rotation_delta: Transform2D
    source: UpdateSource = UpdateSource.GESTURE


# ============================================================
# Host → Session (recorded / scripted input)
# ============================================================

class EventType(str, Enum):
    POINTER_DOWN = "POINTER_DOWN"
    POINTER_UP = "POINTER_UP"
    START = "START"
    UPDATE = "UPDATE"
    END = "END"


@dataclass(frozen=True)
class GestureEvent:
    """
    A single host event, used by replay sources.

    Only the fields relevant to `type` are read.
    """
    t_ms: int
    type: EventType
    focal: Optional[Vec2] = None
    scale: float = 1.0
    rotation: float = 0.0
    velocity: Optional[Vec2] = None
