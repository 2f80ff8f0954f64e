from __future__ import annotations

"""
GestureMatrix Trace Recorder
Writes JSONL logs to ~/.cache/gesturematrix/traces/trace_<timestamp>.jsonl
One line = one emitted transform update, decomposed.
"""

import json
import os
import time
from pathlib import Path
from typing import IO, Optional

from gesturematrix.core.matrix import decompose
from gesturematrix.core.types import TransformUpdate


def log_path() -> Path:
    outdir = Path.home() / ".cache" / "gesturematrix" / "traces"
    outdir.mkdir(parents=True, exist_ok=True)
    ts = time.strftime("%Y%m%d_%H%M%S")
    return outdir / f"trace_{ts}.jsonl"


def record(update: TransformUpdate, t_ms: int) -> dict:
    v = decompose(update.matrix)
    return {
        "t_ms": int(t_ms),
        "source": update.source.value,
        "tx": v.translation.x,
        "ty": v.translation.y,
        "scale": v.scale,
        "rotation": v.rotation,
        "d_tx": float(update.translation_delta[0, 3]),
        "d_ty": float(update.translation_delta[1, 3]),
        "d_scale": float(update.scale_delta[0, 0]),
    }


class TraceRecorder:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._f: Optional[IO[str]] = open(self.path, "a", buffering=1)
        self.lines = 0

    @classmethod
    def from_env(cls) -> Optional["TraceRecorder"]:
        p = os.environ.get("TRACE_LOG_PATH")
        if not p:
            return None
        return cls(p)

    def write(self, update: TransformUpdate, t_ms: int | None = None) -> None:
        if self._f is None:
            return
        if t_ms is None:
            t_ms = int(time.time() * 1000)
        self._f.write(json.dumps(record(update, t_ms)) + "\n")
        self.lines += 1

    def close(self) -> None:
        if self._f is not None:
            self._f.close()
            self._f = None

    def __enter__(self) -> "TraceRecorder":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


if __name__ == "__main__":
    p = log_path()
    print(f"[Trace] suggested path: {p}")
    print("[Trace] Set TRACE_LOG_PATH and run the replay loop:")
    print(f"  TRACE_LOG_PATH='{p}' python -m gesturematrix.runtime.run_loop")
