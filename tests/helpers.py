"""Shared test helpers for FocusTimer."""

from focustimer.timer.presets import Preset


# Short durations keep the arithmetic in tests readable.
TEST_PRESETS = (
    Preset(100, 20),
    Preset(300, 60),
    Preset(50 * 60, 10 * 60),
)

T0 = 1_700_000_000_000  # epoch ms


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Injectable epoch-ms clock that only moves when told to."""

    def __init__(self, now_ms: int):
        self.now = now_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> int:
        self.now += int(seconds * 1000)
        return self.now


class MemoryStore:
    """Persistence adapter double that keeps every saved snapshot."""

    def __init__(self, initial=None):
        self.saved: list = []
        self._current = initial
        self.loads = 0

    def save(self, snapshot) -> None:
        self.saved.append(snapshot)
        self._current = snapshot

    def load(self):
        self.loads += 1
        return self._current

    @property
    def last(self):
        return self.saved[-1] if self.saved else None
