from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from gesturematrix.core.config import GestureOptions
from gesturematrix.core.types import Alignment, Vec2

FocalResolver = Callable[[Vec2], Vec2]


@dataclass
class AlignmentFocus:
    """Fixed pivot inside the target's bounds; the reported focal point is ignored."""
    alignment: Alignment
    size: tuple[float, float]

    def resize(self, size: tuple[float, float]) -> None:
        self.size = size

    def __call__(self, raw: Vec2) -> Vec2:
        w, h = self.size
        return self.alignment.along_size(w, h)


@dataclass
class LocalFocus:
    """Global → target-local conversion for an untransformed target at `origin`."""
    origin: Vec2 = Vec2(0.0, 0.0)

    def __call__(self, raw: Vec2) -> Vec2:
        return raw - self.origin


def passthrough(raw: Vec2) -> Vec2:
    return raw


def make_focal_resolver(
    options: GestureOptions,
    size: Optional[tuple[float, float]] = None,
    origin: Vec2 = Vec2(0.0, 0.0),
) -> FocalResolver:
    if options.focal_point_alignment is not None:
        if size is None:
            raise ValueError("focal_point_alignment needs the target size")
        return AlignmentFocus(options.focal_point_alignment, size)
    if origin != Vec2(0.0, 0.0):
        return LocalFocus(origin)
    return passthrough
