"""Audio package."""

from .sounds import SoundPlayer, SOUND_FOR_PHASE

__all__ = ["SoundPlayer", "SOUND_FOR_PHASE"]
