"""Audio package."""

from .sounds import AlertSoundPlayer, REPEAT_GAP_MS

__all__ = ["AlertSoundPlayer", "REPEAT_GAP_MS"]
