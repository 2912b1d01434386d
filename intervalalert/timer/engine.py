"""Interval-alert timer state machine for IntervalAlert.

States
------
IDLE        No session (never started, or cancelled).
RUNNING     Counting down; the tick cadence is active.
PAUSED      Frozen; pause time does not count towards elapsed.
COMPLETED   Remaining time reached zero; waiting to be dismissed.

Transitions
-----------
IDLE → RUNNING                  (start)
RUNNING → PAUSED                (pause)
PAUSED → RUNNING                (resume)
RUNNING → COMPLETED             (tick finds remaining <= 0)
COMPLETED → IDLE                (dismiss, after a short grace period)
RUNNING | PAUSED → IDLE         (cancel, or dismiss as a soft cancel)

Timing
------
Elapsed time is always recomputed from wall-clock timestamps, never
from counted ticks, so the host may stop calling ``tick()`` for any
length of time (suspension, backgrounding) and a single ``tick()`` or
``recalculate()`` afterwards fires every crossed alert, in order, once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from .models import AlertLevel, TimerConfiguration
from .schedule import derive_offsets, level_for_offset

logger = logging.getLogger(__name__)


# ── enums / value types ───────────────────────────────────────────────────


class TimerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


@dataclass(frozen=True)
class AlertEvent:
    """One fired alert.  ``index`` points into the offset schedule."""

    level: AlertLevel
    index: int
    is_final: bool = False


@dataclass(frozen=True)
class TimerSnapshot:
    """Everything a collaborator needs to render or publish the timer."""

    remaining_time: float
    progress: float
    alert_level: AlertLevel
    is_running: bool
    is_paused: bool
    is_complete: bool
    is_dismissing: bool
    completion_timestamp: datetime
    elapsed: float = 0.0
    fired_count: int = 0

    @property
    def state(self) -> TimerState:
        if self.is_running:
            return TimerState.PAUSED if self.is_paused else TimerState.RUNNING
        if self.is_complete:
            return TimerState.COMPLETED
        return TimerState.IDLE


@dataclass
class SessionRecord:
    """Enough of a session to rebuild it after the process was killed."""

    configuration: TimerConfiguration
    start_timestamp: datetime
    pause_timestamp: datetime | None = None
    accumulated_pause: float = 0.0
    fired_indices: set[int] = field(default_factory=set)


class SessionRecordError(ValueError):
    """A persisted session cannot be restored."""


# ── constants ─────────────────────────────────────────────────────────────

TICK_HZ = 15
DISMISS_GRACE_MS = 500


# ── engine ────────────────────────────────────────────────────────────────


class TimerEngine(QObject):
    """Single-session countdown with wall-clock accounting and
    exactly-once interval alerts.

    Signals
    -------
    alert_fired(level: AlertLevel, index: int)
        Emitted during ``tick()`` for every newly crossed offset, in
        increasing index order, at most once per index per session.
    state_changed(new_state: TimerState)
        Emitted on every transition (including redundant cancels).
    snapshot_changed(snapshot: TimerSnapshot)
        Emitted after every recompute and every transition.  Receivers
        must tolerate redundant updates.
    """

    alert_fired = pyqtSignal(object, int)
    state_changed = pyqtSignal(object)
    snapshot_changed = pyqtSignal(object)

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        tick_hz: int = TICK_HZ,
        dismiss_grace_ms: int = DISMISS_GRACE_MS,
    ) -> None:
        super().__init__(parent)
        self._clock: Callable[[], datetime] = clock or datetime.now

        # ── session bookkeeping ───────────────────────────────────────
        self._config: TimerConfiguration | None = None
        self._offsets: list[float] = []
        self._start_time: datetime | None = None
        self._pause_time: datetime | None = None
        self._accumulated_pause: float = 0.0
        self._fired: set[int] = set()

        # ── flags ─────────────────────────────────────────────────────
        self._running: bool = False
        self._paused: bool = False
        self._dismissing: bool = False

        # ── derived on every recompute ────────────────────────────────
        self._remaining: float = 0.0
        self._progress: float = 0.0
        self._level: AlertLevel = AlertLevel.GENTLE
        self._latest_fired_level: AlertLevel | None = None

        # ── Qt timers ─────────────────────────────────────────────────
        self._cadence = QTimer(self)
        self._cadence.setInterval(max(1, 1000 // max(1, tick_hz)))
        self._cadence.timeout.connect(self.tick)

        self._dismiss_timer = QTimer(self)
        self._dismiss_timer.setSingleShot(True)
        self._dismiss_timer.setInterval(dismiss_grace_ms)
        self._dismiss_timer.timeout.connect(self._finish_dismiss)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC PROPERTIES
    # ══════════════════════════════════════════════════════════════════

    @property
    def configuration(self) -> TimerConfiguration | None:
        return self._config

    @property
    def state(self) -> TimerState:
        if self._config is None:
            return TimerState.IDLE
        if self._running:
            return TimerState.PAUSED if self._paused else TimerState.RUNNING
        return TimerState.COMPLETED

    @property
    def elapsed(self) -> float:
        """Seconds of un-paused wall-clock time since ``start``."""
        return self._elapsed_at(self._clock())

    @property
    def remaining_time(self) -> float:
        return self._remaining

    @property
    def progress(self) -> float:
        """0.0 → 1.0 through the session, clamped."""
        return self._progress

    @property
    def current_alert_level(self) -> AlertLevel:
        return self._level

    @property
    def latest_fired_level(self) -> AlertLevel | None:
        return self._latest_fired_level

    @property
    def fired_alert_indices(self) -> frozenset[int]:
        return frozenset(self._fired)

    @property
    def alert_offsets(self) -> list[float]:
        return list(self._offsets)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def is_complete(self) -> bool:
        return self._progress >= 1.0

    @property
    def is_dismissing(self) -> bool:
        return self._dismissing

    @property
    def is_ticking(self) -> bool:
        """True while the periodic cadence is active."""
        return self._cadence.isActive()

    @property
    def completion_timestamp(self) -> datetime:
        """When the countdown hits zero if it keeps running from now."""
        return self._clock() + timedelta(seconds=self._remaining)

    def snapshot(self) -> TimerSnapshot:
        now = self._clock()
        return TimerSnapshot(
            remaining_time=self._remaining,
            progress=self._progress,
            alert_level=self._level,
            is_running=self._running,
            is_paused=self._paused,
            is_complete=self.is_complete,
            is_dismissing=self._dismissing,
            completion_timestamp=now + timedelta(seconds=self._remaining),
            elapsed=self._elapsed_at(now),
            fired_count=len(self._fired),
        )

    # ══════════════════════════════════════════════════════════════════
    #  CONTROLS
    # ══════════════════════════════════════════════════════════════════

    def start(self, config: TimerConfiguration) -> None:
        """Begin a fresh session, discarding any previous one."""
        self._stop_timers()
        self._config = config
        self._offsets = derive_offsets(config)
        self._start_time = self._clock()
        self._pause_time = None
        self._accumulated_pause = 0.0
        self._fired = set()
        self._latest_fired_level = None
        self._dismissing = False
        self._running = True
        self._paused = False
        logger.debug(
            "Started %.1fs timer (%s), %d alerts",
            config.total_duration,
            config.interval_mode.display_label,
            len(self._offsets),
        )

        self._recompute(self._clock())
        self.state_changed.emit(TimerState.RUNNING)
        self.tick()
        if self._running:
            self._cadence.start()

    def pause(self) -> None:
        """Freeze the countdown.  Only valid while running."""
        if not self._running or self._paused:
            return
        self._cadence.stop()
        self._pause_time = self._clock()
        self._paused = True
        logger.debug("Paused at %.2fs elapsed", self._elapsed_at(self._pause_time))
        self._set_state(TimerState.PAUSED)

    def resume(self) -> None:
        """Continue after ``pause()``; the paused span is not counted."""
        if not self._running or not self._paused or self._pause_time is None:
            return
        now = self._clock()
        self._accumulated_pause += (now - self._pause_time).total_seconds()
        self._pause_time = None
        self._paused = False
        logger.debug("Resumed, %.2fs paused in total", self._accumulated_pause)

        self._recompute(now)
        self.state_changed.emit(TimerState.RUNNING)
        self.tick()
        if self._running:
            self._cadence.start()

    def recalculate(self) -> list[AlertEvent]:
        """Fast-forward after a long gap (e.g. returning from suspend)."""
        if not self._running or self._paused:
            return []
        return self.tick()

    def cancel(self) -> None:
        """Return to IDLE from any state.  Always safe, idempotent."""
        self._stop_timers()
        self._config = None
        self._offsets = []
        self._start_time = None
        self._pause_time = None
        self._accumulated_pause = 0.0
        self._fired = set()
        self._running = False
        self._paused = False
        self._dismissing = False
        self._remaining = 0.0
        self._progress = 0.0
        self._level = AlertLevel.GENTLE
        self._latest_fired_level = None
        self._set_state(TimerState.IDLE)

    def dismiss(self) -> None:
        """Signal an exit transition, then cancel after a grace period.

        Meaningful once completed; from RUNNING or PAUSED it acts as a
        soft cancel.  Re-entrant calls are ignored.
        """
        if self._dismissing or self._config is None:
            return
        self._dismissing = True
        self._cadence.stop()
        self.snapshot_changed.emit(self.snapshot())
        self._dismiss_timer.start()

    # ══════════════════════════════════════════════════════════════════
    #  TICK
    # ══════════════════════════════════════════════════════════════════

    def tick(self) -> list[AlertEvent]:
        """Recompute from the clock and fire newly crossed alerts.

        No-op unless running and not paused.  Returns the alerts fired
        by this call, in offset order.
        """
        if self._config is None or not self._running or self._paused:
            return []

        elapsed = self._recompute(self._clock())
        total = float(self._config.total_duration)
        last_index = len(self._offsets) - 1

        fired: list[AlertEvent] = []
        for index, offset in enumerate(self._offsets):
            if offset <= elapsed and index not in self._fired:
                self._fired.add(index)
                event = AlertEvent(
                    level=level_for_offset(offset, total),
                    index=index,
                    is_final=index == last_index,
                )
                self._latest_fired_level = event.level
                fired.append(event)

        completed = self._remaining <= 0
        if completed:
            self._running = False
            self._paused = False
            self._cadence.stop()
            self._progress = 1.0
            self._remaining = 0.0
            self._level = AlertLevel.FINAL

        for event in fired:
            logger.info(
                "Alert %d/%d fired (%s)",
                event.index + 1, len(self._offsets), event.level.label,
            )
            self.alert_fired.emit(event.level, event.index)

        if completed:
            logger.debug("Timer complete")
            self._set_state(TimerState.COMPLETED)
        else:
            self.snapshot_changed.emit(self.snapshot())
        return fired

    # ══════════════════════════════════════════════════════════════════
    #  SESSION EXPORT / RESTORE
    # ══════════════════════════════════════════════════════════════════

    def export_session(self) -> SessionRecord | None:
        """Bookkeeping for the in-flight session, or None when not running."""
        if self._config is None or not self._running or self._start_time is None:
            return None
        return SessionRecord(
            configuration=self._config,
            start_timestamp=self._start_time,
            pause_timestamp=self._pause_time,
            accumulated_pause=self._accumulated_pause,
            fired_indices=set(self._fired),
        )

    def restore_session(self, record: SessionRecord) -> None:
        """Rebuild a session from *record*.

        Raises :class:`SessionRecordError` and leaves the engine IDLE if
        the record is inconsistent.  The host calls ``recalculate()``
        afterwards to catch up on alerts missed while the process was
        gone.
        """
        offsets = derive_offsets(record.configuration)
        problem = _validate_record(record, len(offsets))
        if problem:
            self.cancel()
            raise SessionRecordError(problem)

        self._stop_timers()
        self._config = record.configuration
        self._offsets = offsets
        self._start_time = record.start_timestamp
        self._pause_time = record.pause_timestamp
        self._accumulated_pause = float(record.accumulated_pause)
        self._fired = set(record.fired_indices)
        self._latest_fired_level = None
        self._dismissing = False
        self._running = True
        self._paused = record.pause_timestamp is not None
        self._recompute(self._clock())
        logger.debug(
            "Restored session started %s (%d alerts already fired)",
            self._start_time.isoformat(), len(self._fired),
        )

        if self._paused:
            self._set_state(TimerState.PAUSED)
        else:
            self.state_changed.emit(TimerState.RUNNING)
            self._cadence.start()

    # ══════════════════════════════════════════════════════════════════
    #  INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _elapsed_at(self, now: datetime) -> float:
        if self._start_time is None:
            return 0.0
        paused_for = 0.0
        if self._paused and self._pause_time is not None:
            paused_for = (now - self._pause_time).total_seconds()
        return (
            (now - self._start_time).total_seconds()
            - self._accumulated_pause
            - paused_for
        )

    def _recompute(self, now: datetime) -> float:
        """Refresh remaining / progress / level; return elapsed."""
        elapsed = self._elapsed_at(now)
        total = float(self._config.total_duration) if self._config else 0.0
        self._remaining = max(total - elapsed, 0.0)
        if total <= 0:
            self._progress = 1.0
        else:
            self._progress = max(0.0, min(elapsed / total, 1.0))
        self._level = AlertLevel.for_progress(self._progress)
        return elapsed

    def _finish_dismiss(self) -> None:
        if self._dismissing:
            self.cancel()

    def _stop_timers(self) -> None:
        self._cadence.stop()
        self._dismiss_timer.stop()

    def _set_state(self, new_state: TimerState) -> None:
        self.state_changed.emit(new_state)
        self.snapshot_changed.emit(self.snapshot())


def _validate_record(record: SessionRecord, alert_count: int) -> str | None:
    """Return a description of what is wrong with *record*, if anything."""
    if record.configuration.total_duration <= 0:
        return "non-positive total duration"
    if record.accumulated_pause < 0:
        return "negative accumulated pause"
    if record.pause_timestamp is not None and record.pause_timestamp < record.start_timestamp:
        return "pause precedes start"
    bad = [i for i in record.fired_indices if i < 0 or i >= alert_count]
    if bad:
        return f"fired indices out of range: {sorted(bad)}"
    return None
