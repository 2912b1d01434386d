"""Alert tones synthesized with numpy and played through QSoundEffect.

One tone per alert level, generated as sine-wave WAV files with an ADSR
envelope and cached to disk.  Urgency rises with the level: higher
pitch, brighter overtone, shorter and sharper envelope.

An alert at schedule index ``i`` plays its tone ``i + 1`` times, 300 ms
apart, so the listener can count how far into the timer they are.
"""

from __future__ import annotations

import io
import logging
import wave
from pathlib import Path

import numpy as np

from PyQt6.QtCore import QObject, QTimer, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..timer.models import AlertLevel

logger = logging.getLogger(__name__)


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "IntervalAlert"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100
REPEAT_GAP_MS = 300


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _make_envelope(
    length: int,
    attack: int = 200,
    decay: int = 400,
    sustain_level: float = 0.7,
    release: int = 800,
) -> np.ndarray:
    """ADSR envelope (all durations in samples)."""
    env = np.ones(length, dtype=np.float64)
    a = min(attack, length)
    if a > 0:
        env[:a] = np.linspace(0.0, 1.0, a)
    d_end = min(a + decay, length)
    if decay > 0 and d_end > a:
        env[a:d_end] = np.linspace(1.0, sustain_level, d_end - a)
    s_end = max(length - release, d_end)
    if s_end > d_end:
        env[d_end:s_end] = sustain_level
    if release > 0 and s_end < length:
        env[s_end:] = np.linspace(sustain_level, 0.0, length - s_end)
    return env


def _sine(freq: float, duration_s: float) -> np.ndarray:
    """Pure sine wave at *freq* Hz for *duration_s* seconds."""
    t = np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)
    return np.sin(2 * np.pi * freq * t)


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  TONE GENERATION
# ═══════════════════════════════════════════════════════════════════════════

# (base Hz, overtone gain, duration s, attack s, release s)
_TONE_SHAPES: dict[AlertLevel, tuple[float, float, float, float, float]] = {
    AlertLevel.GENTLE:   (523.25, 0.05, 0.22, 0.030, 0.14),   # C5, soft
    AlertLevel.MODERATE: (659.25, 0.10, 0.18, 0.015, 0.10),   # E5
    AlertLevel.URGENT:   (783.99, 0.18, 0.14, 0.006, 0.07),   # G5, bright
    AlertLevel.FINAL:    (1046.50, 0.25, 0.35, 0.004, 0.20),  # C6, held
}


def generate_alert_tone(level: AlertLevel) -> bytes:
    """WAV bytes for the tone played at *level*."""
    freq, overtone_gain, duration, attack_s, release_s = _TONE_SHAPES[level]
    tone = _sine(freq, duration) * 0.5 + _sine(freq * 2, duration) * overtone_gain
    env = _make_envelope(
        len(tone),
        attack=int(SAMPLE_RATE * attack_s),
        decay=int(SAMPLE_RATE * 0.04),
        sustain_level=0.55,
        release=int(SAMPLE_RATE * release_s),
    )
    # Pad with silence so QSoundEffect doesn't clip
    padded = np.concatenate([tone * env, np.zeros(int(SAMPLE_RATE * 0.03))])
    return _to_wav_bytes(padded)


def sound_name(level: AlertLevel) -> str:
    return f"alert_{level.name.lower()}"


# ═══════════════════════════════════════════════════════════════════════════
#  PLAYER
# ═══════════════════════════════════════════════════════════════════════════


class AlertSoundPlayer(QObject):
    """Plays the level tone for every fired alert.

    Usage::

        player = AlertSoundPlayer(parent=self)
        player.set_volume(70)
        engine.alert_fired.connect(player.on_alert_fired)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[AlertLevel, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def sounds_dir(self) -> Path:
        return self._sounds_dir

    def on_alert_fired(self, level: AlertLevel, index: int) -> None:
        """Slot for ``TimerEngine.alert_fired``."""
        self.play(level, count=index + 1)

    def play(self, level: AlertLevel, count: int = 1) -> None:
        """Play *level*'s tone *count* times.  No-op if disabled."""
        if not self._enabled:
            return
        self._play_once(level)
        for i in range(1, max(1, count)):
            self._schedule_repeat(i * REPEAT_GAP_MS, level)

    # ── internal ──────────────────────────────────────────────────────

    def _schedule_repeat(self, delay_ms: int, level: AlertLevel) -> None:
        QTimer.singleShot(delay_ms, lambda: self._play_once(level))

    def _play_once(self, level: AlertLevel) -> None:
        if not self._enabled:
            return
        effect = self._effects.get(level)
        if effect is None:
            return
        try:
            effect.play()
        except Exception:
            logger.warning("Could not play %s", sound_name(level), exc_info=True)

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        try:
            self._sounds_dir.mkdir(parents=True, exist_ok=True)
            for level in AlertLevel:
                path = self._sounds_dir / f"{sound_name(level)}.wav"
                if not path.exists():
                    path.write_bytes(generate_alert_tone(level))
        except OSError as exc:
            logger.warning("Alert tones unavailable (%s); continuing silently", exc)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for level in AlertLevel:
            path = self._sounds_dir / f"{sound_name(level)}.wav"
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[level] = effect
