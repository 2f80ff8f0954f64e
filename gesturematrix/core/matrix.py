"""
Elementary 2D affine matrices in 4x4 homogeneous form.

Layout is row-major acting on column vectors [x, y, z, 1]^T, so translation
lives in column 3 and `a @ b` applies `b` first.
"""

from __future__ import annotations

import math
from typing import Optional

import numpy as np

from gesturematrix.core.types import DecomposedValues, Transform2D, Vec2


def identity() -> Transform2D:
    return np.eye(4, dtype=float)


def translate(dx: float, dy: float) -> Transform2D:
    m = np.eye(4, dtype=float)
    m[0, 3] = dx
    m[1, 3] = dy
    return m


def scale_about(scale: float, focal: Vec2) -> Transform2D:
    """Uniform scale that leaves `focal` where it is."""
    m = np.eye(4, dtype=float)
    m[0, 0] = scale
    m[1, 1] = scale
    m[0, 3] = (1.0 - scale) * focal.x
    m[1, 3] = (1.0 - scale) * focal.y
    return m


def rotate_about(angle: float, focal: Vec2) -> Transform2D:
    """Rotation by `angle` radians that leaves `focal` where it is."""
    c = math.cos(angle)
    s = math.sin(angle)
    m = np.eye(4, dtype=float)
    m[0, 0] = c
    m[0, 1] = -s
    m[1, 0] = s
    m[1, 1] = c
    m[0, 3] = (1.0 - c) * focal.x + s * focal.y
    m[1, 3] = (1.0 - c) * focal.y - s * focal.x
    return m


def compose(
    matrix: Optional[Transform2D] = None,
    translation: Optional[Transform2D] = None,
    scale: Optional[Transform2D] = None,
    rotation: Optional[Transform2D] = None,
) -> Transform2D:
    """
    Concatenate translation, then scale, then rotation onto `matrix`
    (identity when None). Any of the three may be None to skip it.

    The result is `rotation @ scale @ translation @ matrix`; `matrix` itself
    is not modified.
    """
    out = identity() if matrix is None else np.array(matrix, dtype=float)
    if translation is not None:
        out = translation @ out
    if scale is not None:
        out = scale @ out
    if rotation is not None:
        out = rotation @ out
    return out


def apply_to_point(m: Transform2D, p: Vec2) -> Vec2:
    v = m @ np.array([p.x, p.y, 0.0, 1.0], dtype=float)
    return Vec2(float(v[0]), float(v[1]))


def decompose(m: Transform2D) -> DecomposedValues:
    """
    Recover translation, uniform scale and rotation (radians, (-pi, pi])
    by mapping the origin and the unit-x point.

    Sheared or non-uniformly scaled matrices give meaningless but finite
    numbers; this is not a general decomposition.
    """
    o = apply_to_point(m, Vec2(0.0, 0.0))
    ux = apply_to_point(m, Vec2(1.0, 0.0))
    delta = ux - o
    return DecomposedValues(translation=o, scale=delta.distance, rotation=delta.direction)

