"""Main window: preset selector, countdown, progress bar, controls.

Layout (top → bottom):
    - Preset combo box ("25/5", "50/10", ...)
    - Phase label ("FOCUS" / "BREAK")
    - MM:SS countdown
    - Progress bar through the current phase
    - Start / Pause / Reset buttons
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox, QHBoxLayout, QLabel, QMainWindow, QProgressBar,
    QPushButton, QVBoxLayout, QWidget,
)

from ..timer.engine import TimerEngine
from ..timer.snapshot import EngineState, Phase

PHASE_LABELS: dict[Phase, str] = {
    Phase.FOCUS: "FOCUS",
    Phase.BREAK: "BREAK",
}


def format_time(seconds: int) -> str:
    """``MM:SS``, clamped at zero."""
    m, s = divmod(max(0, seconds), 60)
    return f"{m:02d}:{s:02d}"


class TimerWindow(QMainWindow):
    """Drives the engine's command surface and mirrors its state."""

    def __init__(self, engine: TimerEngine, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._engine = engine
        self.setWindowTitle("Focus Timer")
        self._build_ui()
        self._connect_signals()
        self._on_state_changed(engine.state)

    # ── build ─────────────────────────────────────────────────────────────

    def _build_ui(self) -> None:
        central = QWidget(self)
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(24, 20, 24, 20)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._preset_box = QComboBox(central)
        for preset in self._engine.presets:
            self._preset_box.addItem(preset.label)
        layout.addWidget(self._preset_box)

        self._phase_label = QLabel(central)
        self._phase_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._phase_label)

        self._time_label = QLabel(central)
        self._time_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._time_label.setStyleSheet("font-size: 48px; font-weight: 600;")
        layout.addWidget(self._time_label)

        self._progress = QProgressBar(central)
        self._progress.setRange(0, 1000)
        self._progress.setTextVisible(False)
        layout.addWidget(self._progress)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(12)
        self._start_btn = QPushButton("Start", central)
        self._pause_btn = QPushButton("Pause", central)
        self._reset_btn = QPushButton("Reset", central)
        for btn in (self._start_btn, self._pause_btn, self._reset_btn):
            btn_row.addWidget(btn)
        layout.addLayout(btn_row)

    # ── signals ───────────────────────────────────────────────────────────

    def _connect_signals(self) -> None:
        self._start_btn.clicked.connect(self._engine.start)
        self._pause_btn.clicked.connect(self._engine.pause)
        self._reset_btn.clicked.connect(self._engine.reset)
        self._preset_box.activated.connect(self._on_preset_activated)
        self._engine.state_changed.connect(self._on_state_changed)

    # ── slots ─────────────────────────────────────────────────────────────

    def _on_preset_activated(self, index: int) -> None:
        # Re-picking the current preset leaves a running session alone
        if index != self._engine.selected_preset_index:
            self._engine.change_preset(index)

    def _on_state_changed(self, state: EngineState) -> None:
        if self._preset_box.currentIndex() != state.selected_preset_index:
            self._preset_box.setCurrentIndex(state.selected_preset_index)
        self._phase_label.setText(PHASE_LABELS[state.phase])
        self._time_label.setText(format_time(state.remaining_seconds))
        self._progress.setValue(round(self._engine.percent_complete * 1000))
        self._start_btn.setEnabled(not state.running)
        self._pause_btn.setEnabled(state.running)

    # ── read-back helpers (used by tests) ─────────────────────────────────

    @property
    def time_text(self) -> str:
        return self._time_label.text()

    @property
    def phase_text(self) -> str:
        return self._phase_label.text()
