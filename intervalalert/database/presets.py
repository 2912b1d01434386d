"""Named preset storage.

Pure storage: presets carry a configuration, nothing here touches time.
Built-in presets are seeded by ``init_db()`` and cannot be deleted.
"""

from __future__ import annotations

import logging
import uuid

from .db import get_session
from .models import Preset
from ..timer.models import (
    MIN_TOTAL_DURATION,
    TimerConfiguration,
    TimerPreset,
    mode_from_kind,
)

logger = logging.getLogger(__name__)


def _to_preset(row: Preset) -> TimerPreset:
    return TimerPreset(
        id=row.id,
        name=row.name,
        configuration=TimerConfiguration(
            total_duration=row.total_duration,
            interval_mode=mode_from_kind(row.mode_kind, row.mode_value),
        ),
        is_built_in=bool(row.is_built_in),
    )


def list_presets() -> list[TimerPreset]:
    """Built-ins first (in seed order), then custom presets oldest first."""
    with get_session() as db:
        rows = (
            db.query(Preset)
            .order_by(Preset.is_built_in.desc(), Preset.created_at, Preset.id)
            .all()
        )
        return [_to_preset(r) for r in rows]


def get_preset(name: str) -> TimerPreset | None:
    """Look a preset up by name (case-insensitive)."""
    wanted = name.strip().lower()
    for preset in list_presets():
        if preset.name.lower() == wanted:
            return preset
    return None


def save_preset(name: str, config: TimerConfiguration) -> TimerPreset:
    """Store *config* as a custom preset called *name*."""
    name = name.strip()
    if not name:
        raise ValueError("preset name must not be empty")
    if config.total_duration < MIN_TOTAL_DURATION:
        raise ValueError(
            f"total duration must be at least {MIN_TOTAL_DURATION} seconds"
        )

    mode = config.interval_mode
    row = Preset(
        id=str(uuid.uuid4()),
        name=name,
        total_duration=float(config.total_duration),
        mode_kind=mode.kind,
        mode_value=mode.value,
        is_built_in=False,
    )
    with get_session() as db:
        db.add(row)
        db.flush()
        preset = _to_preset(row)
    logger.info("Saved preset %r", name)
    return preset


def delete_preset(preset_id: str) -> bool:
    """Delete a custom preset.  Returns False if it does not exist."""
    with get_session() as db:
        row = db.get(Preset, preset_id)
        if row is None:
            return False
        if row.is_built_in:
            raise ValueError(f"built-in preset {row.name!r} cannot be deleted")
        db.delete(row)
    logger.info("Deleted preset %s", preset_id)
    return True
