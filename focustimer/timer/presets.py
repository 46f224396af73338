"""Duration presets for the focus/break cycle."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Preset:
    """One selectable pair of phase durations, in seconds."""

    focus_seconds: int
    break_seconds: int

    def __post_init__(self) -> None:
        for name in ("focus_seconds", "break_seconds"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    @property
    def label(self) -> str:
        """Short display label in minutes, e.g. ``"25/5"``."""
        return f"{_minutes(self.focus_seconds)}/{_minutes(self.break_seconds)}"


def _minutes(seconds: int) -> str:
    m, s = divmod(seconds, 60)
    return str(m) if s == 0 else f"{m}:{s:02d}"


DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(25 * 60, 5 * 60),
    Preset(50 * 60, 10 * 60),
    Preset(90 * 60, 15 * 60),
)


def build_catalog(pairs) -> tuple[Preset, ...]:
    """Turn ``[[focus, break], ...]`` into a preset catalog.

    Raises ``ValueError`` when the list is empty or any pair is invalid.
    """
    try:
        catalog = tuple(Preset(*pair) for pair in pairs)
    except TypeError as exc:
        raise ValueError(f"malformed preset list: {pairs!r}") from exc
    if not catalog:
        raise ValueError("preset catalog must not be empty")
    return catalog
