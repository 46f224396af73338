"""Engine state, its persisted snapshot, and the restore rules.

A snapshot is written after every state change and read exactly once when
an engine is built.  ``last_observed_instant`` is stored as an absolute
epoch-millisecond timestamp so that ``restore`` can measure how long the
process was gone.

Stored representation
---------------------
::

    {
        "selectedPresetIndex": 0,
        "phase": "focus",
        "remainingSeconds": 1500,
        "running": false,
        "lastObservedInstant": 1760000000000
    }
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence

from .presets import Preset


class Phase(Enum):
    FOCUS = "focus"
    BREAK = "break"

    @property
    def other(self) -> "Phase":
        return Phase.BREAK if self is Phase.FOCUS else Phase.FOCUS


class MalformedSnapshot(ValueError):
    """A stored snapshot could not be decoded."""


def duration_of(phase: Phase, preset: Preset) -> int:
    return preset.focus_seconds if phase is Phase.FOCUS else preset.break_seconds


def elapsed_seconds(since_ms: int, now_ms: int) -> int:
    """Whole seconds between two epoch-ms instants (floored)."""
    return (now_ms - since_ms) // 1000


# ── state ─────────────────────────────────────────────────────────────────


@dataclass
class EngineState:
    selected_preset_index: int
    phase: Phase
    remaining_seconds: int
    running: bool
    last_observed_instant: int  # epoch ms

    @classmethod
    def initial(cls, presets: Sequence[Preset], now: int) -> "EngineState":
        """FocusPaused with the full focus duration of the first preset."""
        return cls(
            selected_preset_index=0,
            phase=Phase.FOCUS,
            remaining_seconds=presets[0].focus_seconds,
            running=False,
            last_observed_instant=now,
        )


@dataclass(frozen=True)
class Snapshot:
    selected_preset_index: int
    phase: Phase
    remaining_seconds: int
    running: bool
    last_observed_instant: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "selectedPresetIndex": self.selected_preset_index,
            "phase": self.phase.value,
            "remainingSeconds": self.remaining_seconds,
            "running": self.running,
            "lastObservedInstant": self.last_observed_instant,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Snapshot":
        """Decode the stored representation.

        Raises ``MalformedSnapshot`` on missing keys, wrong types, an
        unknown phase, or negative numbers.
        """
        if not isinstance(data, dict):
            raise MalformedSnapshot(f"expected an object, got {type(data).__name__}")
        try:
            index = _int_field(data, "selectedPresetIndex")
            remaining = _int_field(data, "remainingSeconds")
            instant = _int_field(data, "lastObservedInstant")
            running = data["running"]
            phase = Phase(data["phase"])
        except KeyError as exc:
            raise MalformedSnapshot(f"missing field {exc.args[0]!r}") from exc
        except ValueError as exc:
            raise MalformedSnapshot(str(exc)) from exc
        if not isinstance(running, bool):
            raise MalformedSnapshot(f"'running' must be a boolean, got {running!r}")
        if index < 0 or remaining < 0:
            raise MalformedSnapshot("negative preset index or remaining seconds")
        return cls(index, phase, remaining, running, instant)


def _int_field(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key!r} must be an integer, got {value!r}")
    return value


# ── serialize / restore ───────────────────────────────────────────────────


def serialize(state: EngineState) -> Snapshot:
    return Snapshot(
        selected_preset_index=state.selected_preset_index,
        phase=state.phase,
        remaining_seconds=state.remaining_seconds,
        running=state.running,
        last_observed_instant=state.last_observed_instant,
    )


def restore(
    snapshot: Snapshot | None,
    now: int,
    presets: Sequence[Preset],
) -> EngineState:
    """Rebuild engine state from *snapshot* as of *now* (epoch ms).

    A running snapshot has the whole suspension gap applied as one
    drift delta.  The countdown is clamped at zero and left running: the
    phase transition, and its completion signal, wait for the next live
    tick.  ``None`` gives the initial state; a snapshot whose preset
    index is outside *presets* raises ``MalformedSnapshot``.
    """
    if snapshot is None:
        return EngineState.initial(presets, now)
    if not 0 <= snapshot.selected_preset_index < len(presets):
        raise MalformedSnapshot(
            f"preset index {snapshot.selected_preset_index} outside catalog "
            f"of {len(presets)}"
        )

    preset = presets[snapshot.selected_preset_index]
    state = EngineState(
        selected_preset_index=snapshot.selected_preset_index,
        phase=snapshot.phase,
        remaining_seconds=min(snapshot.remaining_seconds, duration_of(snapshot.phase, preset)),
        running=snapshot.running,
        last_observed_instant=snapshot.last_observed_instant,
    )

    if state.running:
        delta = elapsed_seconds(state.last_observed_instant, now)
        if delta > 0:
            state.remaining_seconds = max(0, state.remaining_seconds - delta)
            state.last_observed_instant = now
    return state
