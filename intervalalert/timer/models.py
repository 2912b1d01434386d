"""Value types shared by the schedule deriver, the engine and storage.

Interval modes
--------------
``Percentage(pct)``     one alert every *pct* percent of the total.
``FixedInterval(secs)`` one alert every *secs* seconds.

Both always end with a completion alert at ``total_duration``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Union


# ── interval modes ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Percentage:
    """Alert every ``pct`` percent of the total duration (1..100)."""

    pct: int

    kind = "percentage"

    @property
    def value(self) -> float:
        return float(self.pct)

    @property
    def display_label(self) -> str:
        return f"Every {self.pct}%"


@dataclass(frozen=True)
class FixedInterval:
    """Alert every ``seconds`` seconds of elapsed time."""

    seconds: float

    kind = "fixed"

    @property
    def value(self) -> float:
        return float(self.seconds)

    @property
    def display_label(self) -> str:
        mins, secs = divmod(int(self.seconds), 60)
        if mins > 0 and secs > 0:
            return f"Every {mins}m {secs}s"
        if mins > 0:
            return f"Every {mins}m"
        return f"Every {secs}s"


IntervalMode = Union[Percentage, FixedInterval]

MODE_KINDS = (Percentage.kind, FixedInterval.kind)


def mode_from_kind(kind: str, value: float) -> IntervalMode:
    """Rebuild an interval mode from its stored ``(kind, value)`` pair."""
    if kind == Percentage.kind:
        return Percentage(int(value))
    if kind == FixedInterval.kind:
        return FixedInterval(float(value))
    raise ValueError(f"unknown interval mode kind: {kind!r}")


# ── configuration ─────────────────────────────────────────────────────────

MIN_TOTAL_DURATION = 5  # seconds; enforced by hosts and the preset store


@dataclass(frozen=True)
class TimerConfiguration:
    """Total duration plus alert cadence.

    ``total_duration`` is expected to be positive.  The engine does not
    reject other values; the schedule deriver degrades them to a single
    completion alert instead.
    """

    total_duration: float
    interval_mode: IntervalMode

    @property
    def is_valid(self) -> bool:
        return self.total_duration > 0

    @property
    def alert_offsets(self) -> list[float]:
        from .schedule import derive_offsets

        return derive_offsets(self)

    @property
    def alert_count(self) -> int:
        return len(self.alert_offsets)


# ── alert levels ──────────────────────────────────────────────────────────


class AlertLevel(Enum):
    """Escalating alert severity, ordered by declaration."""

    GENTLE = 0
    MODERATE = 1
    URGENT = 2
    FINAL = 3

    def __lt__(self, other: AlertLevel) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.value < other.value

    def __le__(self, other: AlertLevel) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.value <= other.value

    def __gt__(self, other: AlertLevel) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.value > other.value

    def __ge__(self, other: AlertLevel) -> bool:
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.value >= other.value

    @classmethod
    def for_progress(cls, progress: float) -> AlertLevel:
        """Map normalized progress (0..1) onto a level."""
        if progress < 0.4:
            return cls.GENTLE
        if progress < 0.7:
            return cls.MODERATE
        if progress < 1.0:
            return cls.URGENT
        return cls.FINAL

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]

    @property
    def pulse_duration(self) -> float:
        """Seconds per glow pulse; passed through to presentation."""
        return _LEVEL_PULSE[self]

    @property
    def glow_color(self) -> str:
        return _LEVEL_COLORS[self]


_LEVEL_LABELS: dict[AlertLevel, str] = {
    AlertLevel.GENTLE: "Gentle",
    AlertLevel.MODERATE: "Moderate",
    AlertLevel.URGENT: "Urgent",
    AlertLevel.FINAL: "Final",
}

_LEVEL_PULSE: dict[AlertLevel, float] = {
    AlertLevel.GENTLE: 3.0,
    AlertLevel.MODERATE: 2.0,
    AlertLevel.URGENT: 1.0,
    AlertLevel.FINAL: 0.5,
}

_LEVEL_COLORS: dict[AlertLevel, str] = {
    AlertLevel.GENTLE: "#3B82F6",    # blue
    AlertLevel.MODERATE: "#EAB308",  # yellow
    AlertLevel.URGENT: "#F97316",    # orange
    AlertLevel.FINAL: "#EF4444",     # red
}


# ── presets ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TimerPreset:
    """A named configuration, either shipped built-in or user-saved."""

    name: str
    configuration: TimerConfiguration
    is_built_in: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


BUILT_IN_PRESETS: tuple[TimerPreset, ...] = (
    TimerPreset(
        id="00000000-0000-0000-0000-000000000001",
        name="Quick Shower",
        configuration=TimerConfiguration(300, Percentage(25)),
        is_built_in=True,
    ),
    TimerPreset(
        id="00000000-0000-0000-0000-000000000002",
        name="Workout Set",
        configuration=TimerConfiguration(180, FixedInterval(60)),
        is_built_in=True,
    ),
    TimerPreset(
        id="00000000-0000-0000-0000-000000000003",
        name="Focus Block",
        configuration=TimerConfiguration(1500, Percentage(25)),
        is_built_in=True,
    ),
)
