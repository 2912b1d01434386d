"""Alert-offset derivation.

Pure functions: a :class:`TimerConfiguration` in, an ordered list of
offsets (seconds from start) out.  The last offset is always exactly
``total_duration``: the completion alert.
"""

from __future__ import annotations

from .models import AlertLevel, FixedInterval, Percentage, TimerConfiguration


def derive_offsets(config: TimerConfiguration) -> list[float]:
    """Ordered alert offsets for *config*.

    Invalid parameters (``pct`` outside ``(0, 100]``, a non-positive
    interval or total) fall back to ``[total_duration]``.
    """
    total = float(config.total_duration)
    if total <= 0:
        return [total]

    mode = config.interval_mode
    offsets: list[float] = []

    if isinstance(mode, Percentage):
        pct = mode.pct
        if pct <= 0 or pct > 100:
            return [total]
        # k * pct < 100 is exact integer arithmetic, so no multiple that
        # lands on the total can sneak in through float rounding.
        k = 1
        while k * pct < 100:
            offsets.append(total * k * pct / 100.0)
            k += 1
    elif isinstance(mode, FixedInterval):
        interval = float(mode.seconds)
        if interval <= 0:
            return [total]
        k = 1
        while k * interval < total:
            offsets.append(k * interval)
            k += 1
    else:
        return [total]

    offsets.append(total)
    return offsets


def normalized_offsets(config: TimerConfiguration) -> list[float]:
    """Each offset as a fraction of the total, for placing ring markers."""
    total = float(config.total_duration)
    if total <= 0:
        return [1.0]
    return [offset / total for offset in derive_offsets(config)]


def level_for_offset(offset: float, total: float) -> AlertLevel:
    """Severity of the alert scheduled at *offset*."""
    if total <= 0:
        return AlertLevel.FINAL
    return AlertLevel.for_progress(offset / total)


def alert_levels(config: TimerConfiguration) -> list[AlertLevel]:
    """Severity of every scheduled alert, in offset order."""
    total = float(config.total_duration)
    return [level_for_offset(o, total) for o in derive_offsets(config)]
