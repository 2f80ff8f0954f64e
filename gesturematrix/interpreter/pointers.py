from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PointerTracker:
    """
    Raw pointer down/up bookkeeping used only to pick an inertial mode.

    `release_gap_ms` is the time between the second-to-last and the last
    pointer lifting, measured only for two-pointer gestures.
    """
    count: int = 0
    two_pointer: bool = False
    second_up_ms: int | None = None
    release_gap_ms: int | None = None

    def reset_timing(self) -> None:
        self.second_up_ms = None
        self.release_gap_ms = None

    def down(self, t_ms: int) -> None:
        self.count += 1
        # a fresh touch sequence or a new pair must not see the previous pair's timing
        if self.count in (1, 2):
            self.reset_timing()
        self.two_pointer = self.count == 2

    def up(self, t_ms: int) -> None:
        if self.count == 0:
            return
        self.count -= 1
        if self.count == 1:
            self.second_up_ms = t_ms
            self.release_gap_ms = None
        elif self.count == 0 and self.two_pointer and self.second_up_ms is not None:
            self.release_gap_ms = t_ms - self.second_up_ms

    def change(self, delta: int, t_ms: int) -> None:
        if delta > 0:
            self.down(t_ms)
        elif delta < 0:
            self.up(t_ms)
