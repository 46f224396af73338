"""UI package."""

from .timer_window import TimerWindow, format_time

__all__ = ["TimerWindow", "format_time"]
