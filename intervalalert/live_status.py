"""At-a-glance status surface fed from engine snapshots.

Publishes when the alert level changes, at least every few seconds while
running, and immediately on pause / resume / foreground.  Sinks must
accept redundant pushes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from PyQt6.QtCore import QObject

from .formatting import format_time
from .timer.engine import TimerSnapshot
from .timer.models import AlertLevel

logger = logging.getLogger(__name__)

REFRESH_SECONDS = 5.0


@dataclass(frozen=True)
class LiveStatus:
    alert_level: AlertLevel
    is_paused: bool
    is_complete: bool
    completion_timestamp: datetime
    progress: float
    remaining_label: str


def status_from_snapshot(snapshot: TimerSnapshot) -> LiveStatus:
    return LiveStatus(
        alert_level=snapshot.alert_level,
        is_paused=snapshot.is_paused,
        is_complete=snapshot.is_complete,
        completion_timestamp=snapshot.completion_timestamp,
        progress=snapshot.progress,
        remaining_label=format_time(snapshot.remaining_time),
    )


class LiveStatusPublisher(QObject):
    """Throttled bridge from ``TimerEngine.snapshot_changed`` to a sink."""

    def __init__(
        self,
        sink: Callable[[LiveStatus], None],
        parent: QObject | None = None,
        *,
        refresh_seconds: float = REFRESH_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(parent)
        self._sink = sink
        self._refresh_seconds = refresh_seconds
        self._clock = clock or datetime.now
        self._last_level: AlertLevel | None = None
        self._last_publish: datetime | None = None
        self._last_status: LiveStatus | None = None

    @property
    def last_status(self) -> LiveStatus | None:
        return self._last_status

    def on_snapshot(self, snapshot: TimerSnapshot) -> None:
        """Publish if the level changed or the refresh interval elapsed."""
        if not snapshot.is_running:
            return
        now = self._clock()
        due = (
            self._last_publish is None
            or (now - self._last_publish).total_seconds() >= self._refresh_seconds
        )
        if snapshot.alert_level != self._last_level or due:
            self.push(snapshot)

    def push(self, snapshot: TimerSnapshot) -> None:
        """Publish unconditionally."""
        self._last_level = snapshot.alert_level
        self._last_publish = self._clock()
        self._publish(status_from_snapshot(snapshot))

    def end(self, show_complete: bool) -> None:
        """Publish the terminal status and reset throttling."""
        self._last_level = None
        self._last_publish = None
        self._publish(LiveStatus(
            alert_level=AlertLevel.FINAL,
            is_paused=False,
            is_complete=show_complete,
            completion_timestamp=self._clock(),
            progress=1.0,
            remaining_label="0:00",
        ))

    def _publish(self, status: LiveStatus) -> None:
        self._last_status = status
        try:
            self._sink(status)
        except Exception:
            logger.warning("Live status publish failed", exc_info=True)
