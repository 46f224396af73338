"""Timer package."""

from .engine import TimerEngine, InvalidPresetIndex, system_clock, TICK_INTERVAL_MS
from .presets import Preset, DEFAULT_PRESETS, build_catalog
from .snapshot import (
    Phase,
    EngineState,
    Snapshot,
    MalformedSnapshot,
    serialize,
    restore,
)

__all__ = [
    "TimerEngine",
    "InvalidPresetIndex",
    "system_clock",
    "TICK_INTERVAL_MS",
    "Preset",
    "DEFAULT_PRESETS",
    "build_catalog",
    "Phase",
    "EngineState",
    "Snapshot",
    "MalformedSnapshot",
    "serialize",
    "restore",
]
