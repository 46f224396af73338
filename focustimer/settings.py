"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/FocusTimer/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field, fields

from .paths import APP_SUPPORT_DIR, SETTINGS_PATH
from .timer.presets import DEFAULT_PRESETS, Preset, build_catalog

log = logging.getLogger(__name__)


def _default_preset_pairs() -> list[list[int]]:
    return [[p.focus_seconds, p.break_seconds] for p in DEFAULT_PRESETS]


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    presets: list[list[int]] = field(default_factory=_default_preset_pairs)

    # ── storage ───────────────────────────────────────────────────────
    storage_backend: str = "sqlite"        # sqlite | json

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── notifications ─────────────────────────────────────────────────
    notifications_enabled: bool = True

    # ── logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_to_console: bool = False

    # ── window ────────────────────────────────────────────────────────
    window_x: int | None = None
    window_y: int | None = None
    always_on_top: bool = False

    def catalog(self) -> tuple[Preset, ...]:
        """The configured presets, or the defaults if the list is invalid."""
        try:
            return build_catalog(self.presets)
        except ValueError as exc:
            log.warning("Invalid preset list in settings (%s); using defaults", exc)
            return DEFAULT_PRESETS


def load_settings() -> Settings:
    """Load settings from disk, falling back to defaults."""
    try:
        if SETTINGS_PATH.exists():
            data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        log.warning("Could not read %s (%s); using defaults", SETTINGS_PATH, exc)
    return Settings()


def save_settings(settings: Settings) -> None:
    """Write settings to disk as JSON."""
    APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
