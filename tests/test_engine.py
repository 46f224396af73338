"""Tests for the FocusTimer engine.

Covers: initial state, start/pause idempotence, drift-corrected ticks,
phase transitions and overshoot, reset and preset changes, the Qt tick
timer, signals, and restore-on-construction.
"""

import pytest

from focustimer.timer.engine import TimerEngine, InvalidPresetIndex
from focustimer.timer.presets import DEFAULT_PRESETS
from focustimer.timer.snapshot import EngineState, Phase, Snapshot

from helpers import FakeClock, MemoryStore, SignalCollector, TEST_PRESETS, T0


# ═══════════════════════════════════════════════════════════════════════════
#  INITIAL STATE
# ═══════════════════════════════════════════════════════════════════════════


class TestInitialState:

    def test_starts_focus_paused_with_first_preset(self, engine):
        assert engine.phase == Phase.FOCUS
        assert engine.remaining_seconds == 100
        assert engine.selected_preset_index == 0
        assert engine.running is False

    def test_loads_store_exactly_once(self, engine, store):
        assert store.loads == 1

    def test_default_catalog(self, qapp, clock):
        eng = TimerEngine(clock=clock)
        assert eng.presets == DEFAULT_PRESETS
        assert eng.remaining_seconds == 25 * 60

    def test_empty_catalog_rejected(self, qapp, clock):
        with pytest.raises(ValueError):
            TimerEngine((), clock=clock)

    def test_works_without_store(self, qapp, clock):
        eng = TimerEngine(TEST_PRESETS, clock=clock)
        eng.start()
        clock.advance(5)
        eng.tick()
        assert eng.remaining_seconds == 95


# ═══════════════════════════════════════════════════════════════════════════
#  START / PAUSE
# ═══════════════════════════════════════════════════════════════════════════


class TestStartPause:

    def test_start_sets_running_and_observes_now(self, engine, clock):
        clock.advance(42)
        engine.start()
        assert engine.running is True
        assert engine.state.last_observed_instant == clock.now

    def test_start_twice_equals_once(self, engine, clock, store):
        engine.start()
        after_once = engine.state
        saves = len(store.saved)

        clock.advance(0.5)
        engine.start()

        assert engine.state == after_once
        assert len(store.saved) == saves

    def test_pause_freezes_remaining(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine.tick()
        engine.pause()
        assert engine.running is False

        clock.advance(100)
        engine.tick()
        assert engine.remaining_seconds == 90

    def test_pause_twice_equals_once(self, engine, clock, store):
        engine.start()
        clock.advance(3)
        engine.tick()
        engine.pause()
        after_once = engine.state
        saves = len(store.saved)

        engine.pause()

        assert engine.state == after_once
        assert len(store.saved) == saves

    def test_pause_when_never_started_is_noop(self, engine, store):
        engine.pause()
        assert engine.running is False
        assert store.saved == []

    def test_restart_after_pause_measures_from_restart(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine.tick()
        engine.pause()

        clock.advance(500)  # paused time doesn't count
        engine.start()
        clock.advance(5)
        engine.tick()
        assert engine.remaining_seconds == 85


# ═══════════════════════════════════════════════════════════════════════════
#  TICK / DRIFT CORRECTION
# ═══════════════════════════════════════════════════════════════════════════


class TestTick:

    def test_tick_while_paused_is_noop(self, engine, clock):
        clock.advance(30)
        engine.tick()
        assert engine.remaining_seconds == 100

    def test_decrements_by_wall_clock_delta(self, engine, clock):
        engine.start()
        clock.advance(37)
        engine.tick()
        assert engine.remaining_seconds == 63
        assert engine.state.last_observed_instant == clock.now

    def test_explicit_now_overrides_clock(self, engine):
        engine.start()
        engine.tick(T0 + 12_000)
        assert engine.remaining_seconds == 88

    def test_sub_second_tick_keeps_last_observed(self, engine, clock):
        engine.start()
        clock.advance(0.9)
        engine.tick()
        assert engine.remaining_seconds == 100
        assert engine.state.last_observed_instant == T0

        clock.advance(0.2)
        engine.tick()
        assert engine.remaining_seconds == 99
        assert engine.state.last_observed_instant == T0 + 1100

    def test_backwards_clock_is_noop(self, engine, clock):
        engine.start()
        clock.advance(-5)
        engine.tick()
        assert engine.remaining_seconds == 100
        assert engine.state.last_observed_instant == T0

    def test_one_big_tick_equals_many_small(self, engine, clock, qapp):
        other_clock = FakeClock(T0)
        other = TimerEngine(TEST_PRESETS, clock=other_clock)

        engine.start()
        other.start()
        for _ in range(40):
            clock.advance(1)
            engine.tick()
        other_clock.advance(40)
        other.tick()

        assert engine.remaining_seconds == other.remaining_seconds == 60

    def test_monotonic_non_increasing_and_never_negative(self, engine, clock):
        engine.start()
        previous = (engine.phase, engine.remaining_seconds)
        for step in (1, 3, 7, 2, 30, 11, 45, 4, 9, 19, 8, 1, 250, 6):
            clock.advance(step)
            engine.tick()
            assert engine.remaining_seconds >= 0
            if engine.phase == previous[0]:
                assert engine.remaining_seconds <= previous[1]
            previous = (engine.phase, engine.remaining_seconds)

    def test_no_save_when_tick_changes_nothing(self, engine, clock, store):
        engine.start()
        saves = len(store.saved)
        clock.advance(0.4)
        engine.tick()
        assert len(store.saved) == saves

    def test_save_after_effective_tick(self, engine, clock, store):
        engine.start()
        clock.advance(8)
        engine.tick()
        assert store.last.remaining_seconds == 92
        assert store.last.last_observed_instant == clock.now


# ═══════════════════════════════════════════════════════════════════════════
#  PHASE TRANSITIONS
# ═══════════════════════════════════════════════════════════════════════════


class TestPhaseTransition:

    def test_long_suspension_fires_one_transition(self, engine, clock, completions):
        engine.start()
        clock.advance(370)
        engine.tick()

        assert completions.items == [Phase.FOCUS]
        assert engine.phase == Phase.BREAK
        assert engine.remaining_seconds == 20  # overshoot discarded
        assert engine.running is True
        assert engine.state.last_observed_instant == clock.now

    def test_reaching_exactly_zero_transitions(self, engine, clock, completions):
        engine.start()
        clock.advance(100)
        engine.tick()
        assert completions.items == [Phase.FOCUS]
        assert engine.phase == Phase.BREAK

    def test_one_second_before_zero_does_not_transition(self, engine, clock, completions):
        engine.start()
        clock.advance(99)
        engine.tick()
        assert completions.items == []
        assert engine.remaining_seconds == 1

    def test_fires_exactly_once(self, engine, clock, completions):
        engine.start()
        clock.advance(100)
        engine.tick()
        engine.tick()  # same instant
        clock.advance(1)
        engine.tick()

        assert len(completions) == 1
        assert engine.remaining_seconds == 19

    def test_break_returns_to_focus(self, engine, clock, completions):
        engine.start()
        clock.advance(100)
        engine.tick()
        clock.advance(20)
        engine.tick()

        assert completions.items == [Phase.FOCUS, Phase.BREAK]
        assert engine.phase == Phase.FOCUS
        assert engine.remaining_seconds == 100
        assert engine.running is True

    def test_state_already_advanced_when_signal_fires(self, engine, clock):
        seen = []
        engine.phase_completed.connect(
            lambda ended: seen.append((ended, engine.phase, engine.remaining_seconds))
        )
        engine.start()
        clock.advance(150)
        engine.tick()
        assert seen == [(Phase.FOCUS, Phase.BREAK, 20)]

    def test_transition_is_persisted(self, engine, clock, store):
        engine.start()
        clock.advance(100)
        engine.tick()
        assert store.last.phase == Phase.BREAK
        assert store.last.remaining_seconds == 20
        assert store.last.running is True

    def test_transition_saved_before_completion_slots_run(self, engine, clock, store):
        seen = []
        engine.phase_completed.connect(
            lambda ended: seen.append((store.last.phase, store.last.remaining_seconds))
        )
        engine.start()
        clock.advance(100)
        engine.tick()
        assert seen == [(Phase.BREAK, 20)]

    def test_one_save_per_transition(self, engine, clock, store):
        engine.start()
        saves = len(store.saved)
        clock.advance(100)
        engine.tick()
        assert len(store.saved) == saves + 1


# ═══════════════════════════════════════════════════════════════════════════
#  RESET / CHANGE PRESET
# ═══════════════════════════════════════════════════════════════════════════


def _into_break(engine, clock):
    engine.start()
    clock.advance(100)
    engine.tick()
    assert engine.phase == Phase.BREAK


class TestReset:

    def test_reset_refills_focus(self, engine, clock):
        engine.start()
        clock.advance(30)
        engine.tick()
        engine.reset()
        assert engine.remaining_seconds == 100
        assert engine.running is False
        assert engine.phase == Phase.FOCUS

    def test_reset_preserves_break_phase(self, engine, clock):
        _into_break(engine, clock)
        clock.advance(5)
        engine.tick()
        assert engine.remaining_seconds == 15

        engine.reset()
        assert engine.phase == Phase.BREAK
        assert engine.remaining_seconds == 20
        assert engine.running is False

    def test_reset_when_paused_still_saves(self, engine, store):
        engine.reset()
        assert store.last.remaining_seconds == 100
        assert store.last.running is False


class TestChangePreset:

    def test_stops_the_clock(self, engine, clock):
        engine.start()
        clock.advance(10)
        engine.tick()

        engine.change_preset(1)

        assert engine.running is False
        assert engine.selected_preset_index == 1
        assert engine.remaining_seconds == 300
        assert engine.phase == Phase.FOCUS

    def test_keeps_break_phase(self, engine, clock):
        _into_break(engine, clock)
        engine.change_preset(2)
        assert engine.phase == Phase.BREAK
        assert engine.remaining_seconds == 10 * 60
        assert engine.preset == TEST_PRESETS[2]

    @pytest.mark.parametrize("index", [-1, 3, 99])
    def test_out_of_range_rejected(self, engine, store, index):
        before = engine.state
        with pytest.raises(InvalidPresetIndex) as exc_info:
            engine.change_preset(index)
        assert exc_info.value.index == index
        assert engine.state == before
        assert store.saved == []

    def test_invalid_index_is_a_value_error(self, engine):
        with pytest.raises(ValueError):
            engine.change_preset(len(TEST_PRESETS))


# ═══════════════════════════════════════════════════════════════════════════
#  QT TICK TIMER
# ═══════════════════════════════════════════════════════════════════════════


class TestTickTimer:

    def test_start_activates_timer(self, engine):
        engine.start()
        assert engine._qt_timer.isActive()
        assert engine._qt_timer.interval() == 1000

    @pytest.mark.parametrize("command", ["pause", "reset", "shutdown"])
    def test_commands_cancel_timer(self, engine, command):
        engine.start()
        getattr(engine, command)()
        assert not engine._qt_timer.isActive()

    def test_change_preset_cancels_timer(self, engine):
        engine.start()
        engine.change_preset(1)
        assert not engine._qt_timer.isActive()

    def test_cancel_without_active_timer_is_safe(self, engine):
        engine.shutdown()
        engine.shutdown()
        engine.reset()
        assert not engine._qt_timer.isActive()

    def test_timeout_ticks_with_clock(self, engine, clock):
        engine.start()
        clock.advance(4)
        engine._on_timeout()
        assert engine.remaining_seconds == 96

    def test_shutdown_writes_final_snapshot(self, engine, store):
        engine.shutdown()
        assert store.last == engine.snapshot()


# ═══════════════════════════════════════════════════════════════════════════
#  SIGNALS / ACCESSORS
# ═══════════════════════════════════════════════════════════════════════════


class TestSignals:

    def test_remaining_changed_on_tick(self, engine, clock):
        c = SignalCollector()
        engine.remaining_changed.connect(c)
        engine.start()
        clock.advance(6)
        engine.tick()
        assert c.items == [94]

    def test_state_changed_carries_copy(self, engine, clock):
        c = SignalCollector()
        engine.state_changed.connect(c)
        engine.start()
        assert isinstance(c.last, EngineState)
        assert c.last.running is True

        c.last.remaining_seconds = 1
        assert engine.remaining_seconds == 100

    def test_state_property_is_a_copy(self, engine):
        s = engine.state
        s.running = True
        assert engine.running is False

    def test_percent_complete(self, engine, clock):
        assert engine.percent_complete == pytest.approx(0.0)
        engine.start()
        clock.advance(50)
        engine.tick()
        assert engine.percent_complete == pytest.approx(0.5)
        assert engine.total_duration == 100


# ═══════════════════════════════════════════════════════════════════════════
#  RESTORE ON CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════


class TestRestoreOnConstruction:

    def test_long_gap_clamps_without_transition(self, qapp, clock):
        store = MemoryStore(Snapshot(
            selected_preset_index=0,
            phase=Phase.FOCUS,
            remaining_seconds=10,
            running=True,
            last_observed_instant=T0 - 1000 * 1000,
        ))
        eng = TimerEngine(TEST_PRESETS, store=store, clock=clock)
        c = SignalCollector()
        eng.phase_completed.connect(c)

        assert eng.remaining_seconds == 0
        assert eng.running is True
        assert eng.phase == Phase.FOCUS
        assert eng._qt_timer.isActive()

        # Same instant as the restore: nothing happens yet
        eng.tick()
        assert len(c) == 0

        clock.advance(1)
        eng.tick()
        assert c.items == [Phase.FOCUS]
        assert eng.phase == Phase.BREAK
        assert eng.remaining_seconds == 20
        eng.shutdown()

    def test_running_gap_is_subtracted(self, qapp, clock):
        store = MemoryStore(Snapshot(1, Phase.BREAK, 50, True, T0 - 12_500))
        eng = TimerEngine(TEST_PRESETS, store=store, clock=clock)
        assert eng.remaining_seconds == 38
        assert eng.state.last_observed_instant == T0
        eng.shutdown()

    def test_paused_snapshot_ignores_gap(self, qapp, clock):
        store = MemoryStore(Snapshot(1, Phase.BREAK, 50, False, T0 - 3_600_000))
        eng = TimerEngine(TEST_PRESETS, store=store, clock=clock)
        assert eng.phase == Phase.BREAK
        assert eng.remaining_seconds == 50
        assert eng.running is False
        assert not eng._qt_timer.isActive()

    def test_preset_outside_catalog_falls_back(self, qapp, clock):
        store = MemoryStore(Snapshot(7, Phase.BREAK, 50, True, T0))
        eng = TimerEngine(TEST_PRESETS, store=store, clock=clock)
        assert eng.state == EngineState.initial(TEST_PRESETS, T0)
