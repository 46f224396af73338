"""Allow running FocusTimer as a module: python -m focustimer."""

import logging
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QIcon, QPainter, QPixmap
from PyQt6.QtWidgets import QApplication, QSystemTrayIcon, QWidget

from .audio.sounds import SoundPlayer
from .log import configure_logging
from .notify.notifier import PhaseNotifier, select_notifier
from .settings import Settings, load_settings, save_settings
from .storage.db import init_db
from .storage.snapshot_store import SqliteSnapshotStore, create_store
from .timer.engine import TimerEngine
from .ui.timer_window import TimerWindow

log = logging.getLogger("focustimer")


def _make_icon() -> QIcon:
    # Placeholder — red circle
    pixmap = QPixmap(64, 64)
    pixmap.fill(QColor(0, 0, 0, 0))
    p = QPainter(pixmap)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)
    p.setBrush(QColor("#E64553"))
    p.setPen(QColor("#E64553").darker(120))
    p.drawEllipse(4, 4, 56, 56)
    p.end()
    return QIcon(pixmap)


def save_window_position(settings: Settings, window: QWidget) -> None:
    """Remember where the window was for the next launch."""
    pos = window.pos()
    settings.window_x, settings.window_y = pos.x(), pos.y()
    try:
        save_settings(settings)
    except OSError:
        log.exception("Could not save settings")


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level, console=settings.log_to_console)
    log.info("=== FocusTimer starting ===")

    store = create_store(settings.storage_backend)
    if isinstance(store, SqliteSnapshotStore):
        init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("FocusTimer")
    app.setOrganizationName("FocusTimer")
    app.setWindowIcon(_make_icon())

    engine = TimerEngine(settings.catalog(), store=store)
    window = TimerWindow(engine)
    if settings.window_x is not None and settings.window_y is not None:
        window.move(settings.window_x, settings.window_y)
    if settings.always_on_top:
        window.setWindowFlag(Qt.WindowType.WindowStaysOnTopHint, True)

    tray_icon = QSystemTrayIcon(_make_icon(), window)
    tray_icon.setToolTip("Focus Timer")
    tray_icon.show()

    sounds = SoundPlayer(window, volume=settings.sound_volume,
                         enabled=settings.sound_enabled)
    notifier = PhaseNotifier(
        select_notifier(window, tray_icon),
        sounds=sounds,
        enabled=settings.notifications_enabled,
    )
    engine.phase_completed.connect(notifier.on_phase_completed)
    app.aboutToQuit.connect(engine.shutdown)
    app.aboutToQuit.connect(lambda: save_window_position(settings, window))

    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
