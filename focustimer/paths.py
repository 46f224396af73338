"""Filesystem locations shared by settings, storage, logs and sounds."""

from pathlib import Path

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "FocusTimer"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"
DB_PATH = APP_SUPPORT_DIR / "focustimer.db"
STATE_PATH = APP_SUPPORT_DIR / "timer_state.json"
LOG_DIR = APP_SUPPORT_DIR / "logs"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"
