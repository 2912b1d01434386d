"""Local alert scheduling for when nobody is ticking the engine.

When the host goes to the background the engine's cadence may not run,
so one single-shot timer per remaining offset delivers the alert
through a sink instead (the tray balloon in the desktop app).  On
returning to the foreground the host cancels whatever is still pending
and lets ``recalculate()`` catch up.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from PyQt6.QtCore import QObject, QTimer

from .formatting import format_duration
from .timer.models import AlertLevel, TimerConfiguration
from .timer.schedule import derive_offsets, level_for_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledAlert:
    index: int
    level: AlertLevel
    is_final: bool
    title: str
    body: str
    fire_at: datetime


def build_alert(
    config: TimerConfiguration,
    index: int,
    offset: float,
    fire_at: datetime,
) -> ScheduledAlert:
    """Title/body for the alert at *offset*."""
    total = float(config.total_duration)
    level = level_for_offset(offset, total)
    is_final = offset >= total
    if is_final:
        title = "Timer Complete!"
        body = f"Your {format_duration(total)} timer has ended."
    else:
        pct = int(offset / total * 100) if total > 0 else 100
        title = "Interval Alert"
        body = f"{level.label} — {pct}% elapsed"
    return ScheduledAlert(index, level, is_final, title, body, fire_at)


class NotificationScheduler(QObject):
    """Schedules future alerts and delivers them to *sink*.

    Usage::

        scheduler = NotificationScheduler(tray.show_notification)
        scheduler.schedule_alerts(config, datetime.now(), engine.elapsed)
        ...
        scheduler.cancel_all()
    """

    def __init__(
        self,
        sink: Callable[[ScheduledAlert], None],
        parent: QObject | None = None,
        *,
        enabled: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(parent)
        self._sink = sink
        self._enabled = enabled
        self._clock = clock or datetime.now
        self._pending: dict[int, tuple[QTimer, ScheduledAlert]] = {}

    # ── public API ────────────────────────────────────────────────────

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled
        if not enabled:
            self.cancel_all()

    @property
    def pending(self) -> list[ScheduledAlert]:
        return [alert for _, alert in sorted(self._pending.values(), key=lambda p: p[1].index)]

    def schedule_alerts(
        self,
        config: TimerConfiguration,
        reference_start: datetime | None = None,
        elapsed: float = 0.0,
    ) -> list[ScheduledAlert]:
        """One pending alert per offset still ahead of *elapsed*."""
        self.cancel_all()
        if not self._enabled:
            logger.info("Notifications disabled; nothing scheduled")
            return []

        reference = reference_start or self._clock()
        for index, offset in enumerate(derive_offsets(config)):
            fire_in = offset - elapsed
            if fire_in <= 0:
                continue
            alert = build_alert(
                config, index, offset, reference + timedelta(seconds=fire_in),
            )
            timer = QTimer(self)
            timer.setSingleShot(True)
            timer.setInterval(int(fire_in * 1000))
            timer.timeout.connect(lambda i=index: self._deliver(i))
            timer.start()
            self._pending[index] = (timer, alert)

        logger.debug("Scheduled %d notifications", len(self._pending))
        return self.pending

    def cancel_all(self) -> None:
        for timer, _ in self._pending.values():
            timer.stop()
            timer.deleteLater()
        self._pending.clear()

    # ── internal ──────────────────────────────────────────────────────

    def _deliver(self, index: int) -> None:
        entry = self._pending.pop(index, None)
        if entry is None:
            return
        timer, alert = entry
        timer.deleteLater()
        try:
            self._sink(alert)
        except Exception:
            logger.warning("Notification delivery failed for alert %d", index, exc_info=True)
