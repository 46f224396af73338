"""Completion chimes, synthesised with numpy and played via QSoundEffect.

One sound per phase boundary:

- ``focus_complete`` — rising arpeggio (C5→E5→G5→C6), time for a break
- ``break_complete`` — two-tone bell (A4 with an E5 overtone), back to work

The WAV files are generated once into the sounds cache directory.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..paths import SOUNDS_DIR
from ..timer.snapshot import Phase

log = logging.getLogger(__name__)

SAMPLE_RATE = 44100

SOUND_FOR_PHASE: dict[Phase, str] = {
    Phase.FOCUS: "focus_complete",
    Phase.BREAK: "break_complete",
}


# ═══════════════════════════════════════════════════════════════════════════
#  SYNTHESIS
# ═══════════════════════════════════════════════════════════════════════════


def _tone(freq: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(SAMPLE_RATE * seconds)) / SAMPLE_RATE
    return amplitude * np.sin(2 * np.pi * freq * t)


def _fade(samples: np.ndarray, attack_s: float, release_s: float) -> np.ndarray:
    """Linear attack and exponential-ish release so notes don't click."""
    n = len(samples)
    env = np.ones(n)
    a = min(int(SAMPLE_RATE * attack_s), n)
    r = min(int(SAMPLE_RATE * release_s), n - a)
    if a:
        env[:a] = np.linspace(0.0, 1.0, a)
    if r:
        env[n - r:] = np.linspace(1.0, 0.0, r) ** 2
    return samples * env


def _silence(seconds: float) -> np.ndarray:
    return np.zeros(int(SAMPLE_RATE * seconds))


def wav_bytes(samples: np.ndarray) -> bytes:
    """16-bit mono PCM WAV from float samples in -1..1."""
    pcm = (np.clip(samples, -1.0, 1.0) * 32767).astype(np.int16)
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(pcm.tobytes())
    return buf.getvalue()


def generate_focus_complete() -> bytes:
    notes = (523.25, 659.25, 783.99, 1046.50)  # C5 E5 G5 C6
    parts: list[np.ndarray] = []
    for i, freq in enumerate(notes):
        last = i == len(notes) - 1
        parts.append(_fade(_tone(freq, 0.4 if last else 0.11), 0.004, 0.3 if last else 0.05))
        parts.append(_silence(0.02))
    return wav_bytes(np.concatenate(parts))


def generate_break_complete() -> bytes:
    body = _tone(440.0, 0.9, 0.35) + _tone(659.25, 0.9, 0.1)
    return wav_bytes(np.concatenate([_fade(body, 0.05, 0.6), _silence(0.05)]))


_GENERATORS = {
    "focus_complete": generate_focus_complete,
    "break_complete": generate_break_complete,
}


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class SoundPlayer(QObject):
    """Caches the chimes on disk and plays the one for an ended phase."""

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
        volume: int = 70,
        enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._enabled = enabled
        self._volume = max(0, min(volume, 100)) / 100.0
        self._effects: dict[str, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def volume(self) -> int:
        return round(self._volume * 100)

    def set_volume(self, level: int) -> None:
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def play_for(self, ended: Phase) -> None:
        """Play the chime for the phase that just ended."""
        if not self._enabled:
            return
        effect = self._effects.get(SOUND_FOR_PHASE[ended])
        if effect is not None:
            effect.play()

    def _ensure_wav_files(self) -> None:
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for name, generate in _GENERATORS.items():
                path = self._sounds_dir / f"{name}.wav"
                if not path.exists():
                    path.write_bytes(generate())
        except OSError:
            log.exception("Could not write sound cache in %s", self._sounds_dir)

    def _load_effects(self) -> None:
        for name in _GENERATORS:
            path = self._sounds_dir / f"{name}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[name] = effect
