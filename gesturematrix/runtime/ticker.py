from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class PeriodicTicker:
    """
    Calls `callback(dt)` every `interval_s` on a background thread.

    cancel() is synchronous: once it returns, the callback never runs again.
    The callback runs under `lock` (re-entrant), so it may cancel its own
    ticker. Owners that guard their own state with a lock should pass it in
    to keep a single lock order.
    """
    interval_s: float
    callback: Callable[[float], None]
    lock: threading.RLock = field(default_factory=threading.RLock)
    _stop: threading.Event = field(default_factory=threading.Event)
    _thread: Optional[threading.Thread] = None
    _cancelled: bool = False

    def start(self) -> None:
        with self.lock:
            if self._thread is not None or self._cancelled:
                return
            self._thread = threading.Thread(target=self._run, name="gesturematrix-ticker", daemon=True)
            self._thread.start()

    def cancel(self) -> None:
        with self.lock:
            self._cancelled = True
            self._stop.set()

    @property
    def cancelled(self) -> bool:
        with self.lock:
            return self._cancelled

    def join(self, timeout: float | None = None) -> None:
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.interval_s):
            with self.lock:
                if self._cancelled:
                    return
                # fixed virtual step; wall-clock jitter is not fed into the decay
                self.callback(self.interval_s)
