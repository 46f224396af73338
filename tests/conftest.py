"""Shared pytest fixtures for FocusTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from focustimer.storage.db import configure_engine, init_db
from focustimer.timer.engine import TimerEngine

from helpers import FakeClock, MemoryStore, SignalCollector, TEST_PRESETS, T0


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(qapp, clock, store):
    """Fresh engine over TEST_PRESETS with an empty in-memory store."""
    eng = TimerEngine(TEST_PRESETS, store=store, clock=clock)
    yield eng
    eng.shutdown()


@pytest.fixture
def completions(engine):
    """Collects every ``phase_completed`` emission of ``engine``."""
    c = SignalCollector()
    engine.phase_completed.connect(c)
    return c
