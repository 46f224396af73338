"""Notification package."""

from .notifier import (
    PhaseNotifier,
    TrayNotifier,
    DialogNotifier,
    select_notifier,
    COMPLETION_MESSAGES,
)

__all__ = [
    "PhaseNotifier",
    "TrayNotifier",
    "DialogNotifier",
    "select_notifier",
    "COMPLETION_MESSAGES",
]
