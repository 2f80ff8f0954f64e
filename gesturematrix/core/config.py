"""
GestureMatrix — Defaults (Presets)

Gesture switches and inertia tuning. The inertia constants are product
tuning, not physics; profiles may override them (see runtime/profile.py).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gesturematrix.core.types import Alignment


class PresetName(str, Enum):
    DEFAULT = "Default"
    PAN_ZOOM = "PanZoom"
    PAN_ONLY = "PanOnly"
    STATIC = "Static"


@dataclass(frozen=True)
class GestureOptions:
    should_translate: bool = True
    should_scale: bool = True
    should_rotate: bool = True
    clip_child: bool = True        # rendering concern, passed through to the host
    # when set, scale/rotation pivot on this point of the target's bounds
    focal_point_alignment: Optional[Alignment] = None


@dataclass(frozen=True)
class InertiaTuning:
    enabled: bool = True
    tick_ms: int = 15
    fling_decay: float = 8.0               # 1/s
    fling_stop_speed_sq: float = 0.1       # (px/s)^2
    settle_duration_s: float = 0.5
    pinch_release_window_ms: int = 200     # both fingers up within this => pinch release
    min_scale_denominator: float = 1e-9

    @property
    def tick_s(self) -> float:
        return self.tick_ms / 1000.0


@dataclass(frozen=True)
class Preset:
    name: PresetName
    gestures: GestureOptions = GestureOptions()
    inertia: InertiaTuning = InertiaTuning()


DEFAULT_PRESET = Preset(
    name=PresetName.DEFAULT,
    gestures=GestureOptions(),
    inertia=InertiaTuning(),
)

PAN_ZOOM_PRESET = Preset(
    name=PresetName.PAN_ZOOM,
    gestures=GestureOptions(should_rotate=False),
    inertia=InertiaTuning(),
)

PAN_ONLY_PRESET = Preset(
    name=PresetName.PAN_ONLY,
    gestures=GestureOptions(should_scale=False, should_rotate=False),
    # slightly longer glide for list-like content
    inertia=InertiaTuning(fling_decay=6.0),
)

STATIC_PRESET = Preset(
    name=PresetName.STATIC,
    gestures=GestureOptions(),
    inertia=InertiaTuning(enabled=False),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.PAN_ZOOM: PAN_ZOOM_PRESET,
    PresetName.PAN_ONLY: PAN_ONLY_PRESET,
    PresetName.STATIC: STATIC_PRESET,
}
