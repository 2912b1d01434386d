"""Application settings with JSON persistence.

Settings are stored at:
    ~/Library/Application Support/IntervalAlert/settings.json

Usage::

    settings = load_settings()
    settings.sound_volume = 50
    save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from pathlib import Path

from .timer.models import IntervalMode, TimerConfiguration, mode_from_kind

logger = logging.getLogger(__name__)

# Shared with database/db.py
APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "IntervalAlert"
SETTINGS_PATH = APP_SUPPORT_DIR / "settings.json"


@dataclass
class Settings:
    """All user-configurable preferences."""

    # ── timer ─────────────────────────────────────────────────────────
    default_duration: int = 5 * 60         # seconds
    default_mode: str = "percentage"       # percentage | fixed
    default_mode_value: float = 25         # pct or seconds
    tick_hz: int = 15
    dismiss_grace_ms: int = 500

    # ── audio ─────────────────────────────────────────────────────────
    sound_enabled: bool = True
    sound_volume: int = 70                 # 0-100

    # ── notifications / live status ───────────────────────────────────
    notifications_enabled: bool = True
    live_status_refresh_seconds: float = 5.0

    def default_interval_mode(self) -> IntervalMode:
        return mode_from_kind(self.default_mode, self.default_mode_value)

    def default_configuration(self) -> TimerConfiguration:
        return TimerConfiguration(
            total_duration=float(self.default_duration),
            interval_mode=self.default_interval_mode(),
        )


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from disk, falling back to defaults."""
    path = path or SETTINGS_PATH
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            # Only use keys that exist in the dataclass
            valid_keys = {f.name for f in fields(Settings)}
            filtered = {k: v for k, v in data.items() if k in valid_keys}
            return Settings(**filtered)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Ignoring unreadable settings at %s: %s", path, exc)
    return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> None:
    """Write settings to disk as JSON."""
    path = path or SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(settings), indent=2) + "\n",
        encoding="utf-8",
    )
