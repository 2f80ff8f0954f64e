from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from gesturematrix.core.types import InertialMode, Transform2D, TransformUpdate
from gesturematrix.interpreter.state_machine import GestureSession
from gesturematrix.runtime.ticker import PeriodicTicker

TickerFactory = Callable[..., PeriodicTicker]


@dataclass
class GestureDriver:
    """
    Timer-backed host adapter around a GestureSession.

    Every host call and every timer tick runs under one lock, so the session
    is only ever touched by one thread at a time. At most one ticker is alive:
    start() and a new release cancel the previous one before anything else.
    """
    session: GestureSession
    ticker_factory: TickerFactory = PeriodicTicker
    verbose: bool = False

    _lock: threading.RLock = field(default_factory=threading.RLock)
    _ticker: Optional[PeriodicTicker] = None
    _generation: int = 0

    def pointer_down(self, t_ms: int) -> None:
        with self._lock:
            self.session.pointer_down(t_ms)

    def pointer_up(self, t_ms: int) -> None:
        with self._lock:
            self.session.pointer_up(t_ms)

    def start(self, focal) -> None:
        with self._lock:
            self._stop_ticker()
            self.session.start(focal)

    def update(self, focal, scale: float = 1.0, rotation: float = 0.0) -> TransformUpdate:
        with self._lock:
            return self.session.update(focal, scale, rotation)

    def end(self, velocity, pointer_count: int | None = None) -> InertialMode:
        with self._lock:
            self._stop_ticker()
            mode = self.session.end(velocity, pointer_count)
            if mode != InertialMode.NONE:
                if self.verbose:
                    print(f"[GestureMatrix] inertia: {mode.value}")
                interval = self.session.preset.inertia.tick_s
                gen = self._generation
                self._ticker = self.ticker_factory(interval, lambda dt: self._on_tick(dt, gen), self._lock)
                self._ticker.start()
            return mode

    def close(self) -> None:
        with self._lock:
            self._stop_ticker()
            self.session.cancel_inertia()

    def snapshot(self) -> Transform2D:
        with self._lock:
            return self.session.matrix

    def reset(self) -> None:
        with self._lock:
            self._stop_ticker()
            self.session.reset()

    @property
    def animating(self) -> bool:
        with self._lock:
            return self._ticker is not None

    def _on_tick(self, dt: float, gen: int) -> None:
        with self._lock:
            # a tick from a ticker that has since been replaced
            if gen != self._generation:
                return
            _, done = self.session.step(dt)
            if done:
                if self.verbose:
                    print("[GestureMatrix] inertia finished")
                self._stop_ticker()

    def _stop_ticker(self) -> None:
        self._generation += 1
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
