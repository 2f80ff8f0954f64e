from __future__ import annotations

import json
from dataclasses import asdict, fields, replace
from pathlib import Path
from typing import Optional

from gesturematrix.core.config import InertiaTuning, Preset

_TUNING_FIELDS = {f.name for f in fields(InertiaTuning)}


def _profile_path() -> Path:
    p = Path.home() / ".config" / "gesturematrix"
    p.mkdir(parents=True, exist_ok=True)
    return p / "profile.json"


def save_profile(tuning: InertiaTuning, path: Path | None = None) -> Path:
    p = path or _profile_path()
    p.write_text(json.dumps(asdict(tuning), indent=2))
    return p


def load_profile(path: Path | None = None) -> Optional[dict]:
    p = path or _profile_path()
    if not p.exists():
        return None
    try:
        prof = json.loads(p.read_text())
    except (OSError, ValueError) as e:
        print(f"[Profile] ignoring unreadable profile {p}: {e}")
        return None
    if not isinstance(prof, dict):
        print(f"[Profile] ignoring profile {p}: expected an object")
        return None
    return prof


def _coerce(current, value):
    # bool("false") is True, so flags only take real JSON booleans
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise TypeError(f"expected true/false, got {value!r}")
        return value
    return type(current)(value)


def apply_profile(preset: Preset, prof: Optional[dict]) -> Preset:
    """Return `preset` with inertia tuning overridden by known profile keys."""
    if not prof:
        return preset
    overrides = {}
    for key, value in prof.items():
        if key not in _TUNING_FIELDS:
            continue
        current = getattr(preset.inertia, key)
        try:
            overrides[key] = _coerce(current, value)
        except (TypeError, ValueError):
            print(f"[Profile] bad value for {key}: {value!r}")
    if not overrides:
        return preset
    return replace(preset, inertia=replace(preset.inertia, **overrides))
