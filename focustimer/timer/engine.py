"""Timer state machine for FocusTimer.

States
------
FOCUS_PAUSED    Focus countdown frozen (initial state).
FOCUS_RUNNING   Focus countdown running.
BREAK_PAUSED    Break countdown frozen.
BREAK_RUNNING   Break countdown running.

Transitions
-----------
*_PAUSED → *_RUNNING                       (start)
*_RUNNING → *_PAUSED                       (pause)
Any → same phase, full duration, paused    (reset / change_preset)
FOCUS_RUNNING ↔ BREAK_RUNNING              (countdown reaches 0)

Elapsed time is measured from wall-clock timestamps, never by counting
ticks, so a sleeping laptop or a starved event loop cannot slow the
countdown down.  Time left over past zero is dropped at the phase
boundary; the next phase always starts at its full duration.
"""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Sequence

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .presets import DEFAULT_PRESETS, Preset
from .snapshot import (
    EngineState,
    MalformedSnapshot,
    Phase,
    Snapshot,
    duration_of,
    elapsed_seconds,
    restore,
    serialize,
)

log = logging.getLogger(__name__)

Clock = Callable[[], int]

TICK_INTERVAL_MS = 1000


def system_clock() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class InvalidPresetIndex(ValueError):
    """Preset index outside the configured catalog."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"preset index {index} out of range 0..{size - 1}")
        self.index = index
        self.size = size


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Qt-based focus/break countdown with drift correction and
    snapshot persistence.

    Signals
    -------
    phase_completed(ended: Phase)
        Emitted exactly once per phase boundary, after the engine has
        already moved on to the next phase.
    remaining_changed(remaining_seconds: int)
        Emitted whenever the visible countdown value changes.
    state_changed(state: EngineState)
        Emitted (with a copy) after every command or tick that changed
        state.
    """

    phase_completed = pyqtSignal(object)
    remaining_changed = pyqtSignal(int)
    state_changed = pyqtSignal(object)

    def __init__(
        self,
        presets: Sequence[Preset] = DEFAULT_PRESETS,
        parent: QObject | None = None,
        *,
        store=None,
        clock: Clock = system_clock,
    ) -> None:
        super().__init__(parent)
        if not presets:
            raise ValueError("preset catalog must not be empty")

        self._presets: tuple[Preset, ...] = tuple(presets)
        self._store = store
        self._clock = clock
        self._state: EngineState = self._load_state()

        # ── Qt timer ──────────────────────────────────────────────────
        self._qt_timer = QTimer(self)
        self._qt_timer.setInterval(TICK_INTERVAL_MS)
        self._qt_timer.timeout.connect(self._on_timeout)

        if self._state.running:
            self._qt_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def selected_preset_index(self) -> int:
        return self._state.selected_preset_index

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def presets(self) -> tuple[Preset, ...]:
        return self._presets

    @property
    def preset(self) -> Preset:
        return self._presets[self._state.selected_preset_index]

    @property
    def total_duration(self) -> int:
        """Full length of the current phase under the current preset."""
        return duration_of(self._state.phase, self.preset)

    @property
    def percent_complete(self) -> float:
        """0.0 → 1.0 progress through the current phase."""
        total = self.total_duration
        elapsed = total - self._state.remaining_seconds
        return max(0.0, min(1.0, elapsed / total))

    @property
    def state(self) -> EngineState:
        """A copy of the current state; mutating it has no effect."""
        return replace(self._state)

    def snapshot(self) -> Snapshot:
        return serialize(self._state)

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start counting down from now.  No-op while running."""
        if self._state.running:
            return
        self._state.running = True
        self._state.last_observed_instant = self._clock()
        self._qt_timer.start()
        log.debug("Started %s with %ss left", self._state.phase.value,
                  self._state.remaining_seconds)
        self._changed()

    def pause(self) -> None:
        """Freeze the countdown.  No-op while paused."""
        if not self._state.running:
            return
        self._qt_timer.stop()
        self._state.running = False
        log.debug("Paused %s at %ss", self._state.phase.value,
                  self._state.remaining_seconds)
        self._changed()

    def reset(self) -> None:
        """Stop and refill the current phase.  The phase is kept."""
        self._qt_timer.stop()
        self._state.running = False
        self._state.remaining_seconds = self.total_duration
        log.debug("Reset %s to %ss", self._state.phase.value,
                  self._state.remaining_seconds)
        self._changed(remaining=True)

    def change_preset(self, index: int) -> None:
        """Select preset *index*, stopping any countdown in progress.

        Raises ``InvalidPresetIndex`` (state unchanged) when *index* is
        outside the catalog.
        """
        if not 0 <= index < len(self._presets):
            raise InvalidPresetIndex(index, len(self._presets))
        self._qt_timer.stop()
        self._state.selected_preset_index = index
        self._state.running = False
        self._state.remaining_seconds = self.total_duration
        log.info("Preset changed to %s", self.preset.label)
        self._changed(remaining=True)

    def tick(self, now: int | None = None) -> None:
        """Apply the wall-clock time elapsed since the last observation.

        Less than a full second since the last observation is a no-op
        and leaves ``last_observed_instant`` where it was, so fractional
        progress carries over to the next tick.
        """
        if not self._state.running:
            return
        if now is None:
            now = self._clock()

        delta = elapsed_seconds(self._state.last_observed_instant, now)
        if delta <= 0:
            return

        new_remaining = self._state.remaining_seconds - delta
        self._state.last_observed_instant = now
        if new_remaining > 0:
            self._state.remaining_seconds = new_remaining
            self._changed(remaining=True)
            return
        self._finish_phase(overshoot=-new_remaining)

    def shutdown(self) -> None:
        """Stop future ticks and write a final snapshot."""
        self._qt_timer.stop()
        self._save()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _on_timeout(self) -> None:
        self.tick(self._clock())

    def _finish_phase(self, overshoot: int) -> None:
        ended = self._state.phase
        self._state.phase = ended.other
        self._state.remaining_seconds = self.total_duration
        if overshoot:
            log.info("Dropped %ss of overshoot past the end of %s",
                     overshoot, ended.value)
        log.info("%s complete, %s begins (%ss)", ended.value.capitalize(),
                 self._state.phase.value, self._state.remaining_seconds)
        # The new phase is on disk before any completion slot runs.
        self._save()
        self.phase_completed.emit(ended)
        self._changed(remaining=True, save=False)

    def _changed(self, remaining: bool = False, save: bool = True) -> None:
        if remaining:
            self.remaining_changed.emit(self._state.remaining_seconds)
        self.state_changed.emit(replace(self._state))
        if save:
            self._save()

    def _save(self) -> None:
        if self._store is not None:
            self._store.save(serialize(self._state))

    def _load_state(self) -> EngineState:
        now = self._clock()
        if self._store is None:
            return EngineState.initial(self._presets, now)
        snapshot = self._store.load()
        try:
            state = restore(snapshot, now, self._presets)
        except MalformedSnapshot as exc:
            log.warning("Ignoring stored timer state: %s", exc)
            return EngineState.initial(self._presets, now)
        if snapshot is not None:
            log.info("Restored %s %s with %ss left", state.phase.value,
                     "running" if state.running else "paused",
                     state.remaining_seconds)
        return state
