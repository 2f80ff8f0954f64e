from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

from gesturematrix.core.types import Vec2


class GestureSink(Protocol):
    def pointer_down(self, t_ms: int) -> None: ...
    def pointer_up(self, t_ms: int) -> None: ...
    def start(self, focal) -> None: ...
    def update(self, focal, scale: float = 1.0, rotation: float = 0.0): ...
    def end(self, velocity, pointer_count: int | None = None): ...


@dataclass
class MouseGestureSource:
    """
    Turns mouse input into touch-style gesture calls.

    - left drag: one finger, pans
    - right drag: two fingers pinching/twisting around the press point;
      horizontal motion scales, vertical motion rotates. Both fingers lift
      together on release.
    """
    sink: GestureSink
    px_per_scale: float = 200.0
    px_per_radian: float = 200.0
    velocity_window_ms: int = 100

    _mode: str | None = None
    _anchor: Vec2 = Vec2()
    _samples: deque = field(default_factory=lambda: deque(maxlen=32))

    @property
    def active(self) -> bool:
        return self._mode is not None

    def left_down(self, x: float, y: float, t_ms: int) -> None:
        if self._mode is not None:
            return
        self._mode = "pan"
        self._begin(Vec2(x, y), t_ms, fingers=1)

    def right_down(self, x: float, y: float, t_ms: int) -> None:
        if self._mode is not None:
            return
        self._mode = "pinch"
        self._begin(Vec2(x, y), t_ms, fingers=2)

    def move(self, x: float, y: float, t_ms: int):
        if self._mode is None:
            return None
        p = Vec2(x, y)
        self._samples.append((t_ms, p))
        if self._mode == "pan":
            return self.sink.update(p)
        d = p - self._anchor
        scale = max(0.1, 1.0 + d.x / self.px_per_scale)
        return self.sink.update(self._anchor, scale, d.y / self.px_per_radian)

    def left_up(self, x: float, y: float, t_ms: int):
        if self._mode != "pan":
            return None
        return self._finish(Vec2(x, y), t_ms, fingers=1)

    def right_up(self, x: float, y: float, t_ms: int):
        if self._mode != "pinch":
            return None
        return self._finish(Vec2(x, y), t_ms, fingers=2)

    def velocity(self, t_ms: int) -> Vec2:
        """Pixels per second over the recent window."""
        recent = [(t, p) for t, p in self._samples if t_ms - t <= self.velocity_window_ms]
        if len(recent) < 2:
            return Vec2()
        (t0, p0), (t1, p1) = recent[0], recent[-1]
        if t1 <= t0:
            return Vec2()
        return (p1 - p0) * (1000.0 / (t1 - t0))

    def _begin(self, p: Vec2, t_ms: int, fingers: int) -> None:
        self._anchor = p
        self._samples.clear()
        self._samples.append((t_ms, p))
        for _ in range(fingers):
            self.sink.pointer_down(t_ms)
        self.sink.start(p)

    def _finish(self, p: Vec2, t_ms: int, fingers: int):
        self._samples.append((t_ms, p))
        v = self.velocity(t_ms)
        for _ in range(fingers):
            self.sink.pointer_up(t_ms)
        self._mode = None
        return self.sink.end(v)
