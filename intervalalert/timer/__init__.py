"""Timer package."""

from .engine import (
    TimerEngine,
    TimerState,
    TimerSnapshot,
    AlertEvent,
    SessionRecord,
    SessionRecordError,
    TICK_HZ,
    DISMISS_GRACE_MS,
)
from .models import (
    AlertLevel,
    FixedInterval,
    Percentage,
    TimerConfiguration,
    TimerPreset,
    BUILT_IN_PRESETS,
    MIN_TOTAL_DURATION,
)
from .schedule import derive_offsets, normalized_offsets, level_for_offset

__all__ = [
    "TimerEngine",
    "TimerState",
    "TimerSnapshot",
    "AlertEvent",
    "SessionRecord",
    "SessionRecordError",
    "TICK_HZ",
    "DISMISS_GRACE_MS",
    "AlertLevel",
    "FixedInterval",
    "Percentage",
    "TimerConfiguration",
    "TimerPreset",
    "BUILT_IN_PRESETS",
    "MIN_TOTAL_DURATION",
    "derive_offsets",
    "normalized_offsets",
    "level_for_offset",
]
