from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from gesturematrix.core.config import DEFAULT_PRESET, Preset
from gesturematrix.core.types import EventType, GestureEvent, TransformUpdate, UpdateSource, Vec2
from gesturematrix.interpreter.state_machine import GestureSession
from gesturematrix.runtime.profile import apply_profile, load_profile
from gesturematrix.tools.trace_recorder import TraceRecorder


@dataclass
class FakeSource:
    """
    Deterministic scripted touch input to validate runtime wiring:
    a two-finger pinch-zoom with a twist, released together, then a
    one-finger fling.
    """
    start_ms: int = 0
    center: Vec2 = Vec2(400.0, 300.0)

    def events(self) -> list[GestureEvent]:
        t = self.start_ms
        out: list[GestureEvent] = []

        # --- pinch: both fingers down, spread apart and twist
        out.append(GestureEvent(t, EventType.POINTER_DOWN))
        out.append(GestureEvent(t, EventType.POINTER_DOWN))
        out.append(GestureEvent(t, EventType.START, focal=self.center))
        for i in range(1, 21):
            t += 16
            focal = self.center.translate(i * 1.5, i * 0.5)
            out.append(GestureEvent(
                t, EventType.UPDATE, focal=focal,
                scale=1.0 + 0.02 * i, rotation=math.radians(0.8 * i),
            ))
        # fingers leave 40ms apart => pinch release
        t += 16
        out.append(GestureEvent(t, EventType.POINTER_UP))
        t += 40
        out.append(GestureEvent(t, EventType.POINTER_UP))
        out.append(GestureEvent(t, EventType.END, velocity=Vec2(90.0, 30.0)))

        # --- let the zoom settle, then a one-finger fling
        t += 700
        out.append(GestureEvent(t, EventType.POINTER_DOWN))
        out.append(GestureEvent(t, EventType.START, focal=self.center))
        for i in range(1, 11):
            t += 16
            out.append(GestureEvent(t, EventType.UPDATE, focal=self.center.translate(-12.0 * i, 4.0 * i)))
        t += 16
        out.append(GestureEvent(t, EventType.POINTER_UP))
        out.append(GestureEvent(t, EventType.END, velocity=Vec2(-750.0, 250.0)))
        return out


def dispatch(session: GestureSession, ev: GestureEvent) -> Optional[TransformUpdate]:
    if ev.type == EventType.POINTER_DOWN:
        session.pointer_down(ev.t_ms)
    elif ev.type == EventType.POINTER_UP:
        session.pointer_up(ev.t_ms)
    elif ev.type == EventType.START:
        session.start(ev.focal)
    elif ev.type == EventType.UPDATE:
        return session.update(ev.focal, ev.scale, ev.rotation)
    elif ev.type == EventType.END:
        session.end(ev.velocity or Vec2())
    return None


def replay(
    session: GestureSession,
    events: Iterable[GestureEvent],
    tick_ms: int | None = None,
    sleep: Callable[[float], None] | None = None,
) -> list[tuple[int, TransformUpdate]]:
    """
    Feed timestamped events and advance inertia on a fixed frame clock.
    Returns every emitted update with the frame time it was produced at.
    """
    tick_ms = tick_ms or session.preset.inertia.tick_ms
    pending = sorted(events, key=lambda e: e.t_ms)
    out: list[tuple[int, TransformUpdate]] = []
    if not pending:
        return out

    t = pending[0].t_ms
    i = 0
    while i < len(pending) or session.is_animating:
        while i < len(pending) and pending[i].t_ms <= t:
            upd = dispatch(session, pending[i])
            if upd is not None:
                out.append((t, upd))
            i += 1
        if session.is_animating:
            upd = session.tick(tick_ms / 1000.0)
            if upd is not None:
                out.append((t, upd))
        t += tick_ms
        if sleep is not None:
            sleep(tick_ms / 1000.0)
    return out


def run(preset: Preset = DEFAULT_PRESET, realtime: bool = True) -> GestureSession:
    preset = apply_profile(preset, load_profile())
    session = GestureSession(preset, debug=True)
    trace = TraceRecorder.from_env()

    print("[GestureMatrix] Replay loop (FAKE SOURCE). Ctrl+C to exit.")
    if trace is not None:
        print(f"[Trace] writing {trace.path}")

    try:
        updates = replay(
            session,
            FakeSource().events(),
            sleep=time.sleep if realtime else None,
        )
        for t_ms, upd in updates:
            if trace is not None:
                trace.write(upd, t_ms)
        inertial = sum(1 for _, u in updates if u.source != UpdateSource.GESTURE)
        print(f"[GestureMatrix] {len(updates)} updates ({inertial} inertial)")
        print(f"[GestureMatrix] final {session.values()}")
    except KeyboardInterrupt:
        print("\n[GestureMatrix] exiting")
    finally:
        session.cancel_inertia()
        if trace is not None:
            trace.close()
    return session


if __name__ == "__main__":
    run()
