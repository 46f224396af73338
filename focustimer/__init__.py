"""FocusTimer — a drift-corrected focus/break countdown."""

__version__ = "0.1.0"
