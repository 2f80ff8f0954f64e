from __future__ import annotations


def clamp01(x: float) -> float:
    if x < 0.0:
        return 0.0
    if x > 1.0:
        return 1.0
    return x


def decelerate(t: float) -> float:
    """Ease-out: fast start, zero velocity at t=1. Maps [0, 1] onto [0, 1]."""
    t = 1.0 - clamp01(t)
    return 1.0 - t * t
