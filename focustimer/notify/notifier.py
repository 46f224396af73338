"""Delivery of phase-completion alerts.

The engine only emits ``phase_completed(phase)``.  ``PhaseNotifier``
turns that into a message, a chime, and a call on one delivery channel:

- ``TrayNotifier``   — native notification through the system tray icon
- ``DialogNotifier`` — non-modal in-app message box, used when the
  platform has no tray or the tray cannot show messages

``select_notifier`` makes that choice once, at startup.
"""

from __future__ import annotations

import logging

from PyQt6.QtWidgets import QMessageBox, QSystemTrayIcon, QWidget

from ..timer.snapshot import Phase

log = logging.getLogger(__name__)

APP_TITLE = "Focus Timer"

COMPLETION_MESSAGES: dict[Phase, str] = {
    Phase.FOCUS: "Focus session complete! Time for a break.",
    Phase.BREAK: "Break is over! Back to focus.",
}


class TrayNotifier:
    """Shows messages as native notifications via a ``QSystemTrayIcon``."""

    name = "tray"

    def __init__(self, tray_icon: QSystemTrayIcon) -> None:
        self._tray_icon = tray_icon

    @staticmethod
    def is_available() -> bool:
        return (
            QSystemTrayIcon.isSystemTrayAvailable()
            and QSystemTrayIcon.supportsMessages()
        )

    def notify(self, title: str, body: str) -> None:
        self._tray_icon.showMessage(
            title, body, QSystemTrayIcon.MessageIcon.Information,
        )


class DialogNotifier:
    """Fallback: an in-app message box that doesn't block the event loop."""

    name = "dialog"

    def __init__(self, parent: QWidget | None = None) -> None:
        self._parent = parent
        self._box: QMessageBox | None = None

    def notify(self, title: str, body: str) -> None:
        if self._box is not None:
            self._box.close()
        box = QMessageBox(self._parent)
        box.setWindowTitle(title)
        box.setText(body)
        box.setIcon(QMessageBox.Icon.Information)
        box.setStandardButtons(QMessageBox.StandardButton.Ok)
        box.open()
        self._box = box

    @property
    def current_box(self) -> QMessageBox | None:
        return self._box


def select_notifier(
    parent: QWidget | None = None,
    tray_icon: QSystemTrayIcon | None = None,
):
    """Tray notifications when the platform supports them, else a dialog."""
    if tray_icon is not None and TrayNotifier.is_available():
        return TrayNotifier(tray_icon)
    log.info("System tray messages unavailable; using dialog alerts")
    return DialogNotifier(parent)


class PhaseNotifier:
    """Consumer of the engine's completion signal.

    Connect ``on_phase_completed`` to ``TimerEngine.phase_completed``.
    Delivery problems are logged and never reach the engine.
    """

    def __init__(self, channel, *, sounds=None, enabled: bool = True) -> None:
        self._channel = channel
        self._sounds = sounds
        self.enabled = enabled

    @property
    def channel(self):
        return self._channel

    def on_phase_completed(self, ended: Phase) -> None:
        body = COMPLETION_MESSAGES[ended]
        log.debug("Delivering completion alert via %s: %s",
                  getattr(self._channel, "name", "?"), body)
        # An exception escaping a PyQt6 slot aborts the process.
        if self._sounds is not None:
            try:
                self._sounds.play_for(ended)
            except Exception:
                log.exception("Completion sound could not be played")
        if not self.enabled:
            return
        try:
            self._channel.notify(APP_TITLE, body)
        except Exception:
            log.exception("Completion alert could not be delivered")
