"""Host wiring for IntervalAlert.

The host owns the one :class:`TimerEngine` and hands it explicitly to
every collaborator that needs to drive it.  Collaborators subscribe to
the engine's signals independently; none of them can stall or corrupt
the engine, since each one swallows and logs its own failures.
"""

from __future__ import annotations

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from PyQt6.QtCore import QObject

from .audio.sounds import AlertSoundPlayer
from .database.persistence import persist_engine, restore_engine
from .live_status import LiveStatusPublisher
from .notifications import NotificationScheduler
from .settings import Settings, load_settings
from .timer.engine import TimerEngine, TimerSnapshot, TimerState
from .timer.models import TimerConfiguration

logger = logging.getLogger(__name__)


class RemoteActions:
    """Engine controls for triggers outside the main flow (tray menu,
    global shortcuts).  Holds an explicit engine handle."""

    def __init__(self, engine: TimerEngine) -> None:
        self._engine = engine

    def toggle_pause(self) -> None:
        if self._engine.is_paused:
            self._engine.resume()
        else:
            self._engine.pause()

    def cancel(self) -> None:
        self._engine.cancel()

    def dismiss(self) -> None:
        self._engine.dismiss()


class TimerHost(QObject):
    """Owns the engine and its collaborators; reacts to lifecycle events.

    Lifecycle hooks
    ---------------
    launch()            Restore a persisted session if nothing is running.
    enter_background()  Persist, schedule notifications, refresh status.
    enter_foreground()  Restore if needed, cancel notifications, catch up.
    """

    def __init__(
        self,
        engine: TimerEngine,
        parent: QObject | None = None,
        *,
        notifications: NotificationScheduler | None = None,
        live_status: LiveStatusPublisher | None = None,
        sounds: AlertSoundPlayer | None = None,
        persistence_enabled: bool = True,
    ) -> None:
        super().__init__(parent)
        self._engine = engine
        self._notifications = notifications
        self._live_status = live_status
        self._sounds = sounds
        self._persistence_enabled = persistence_enabled
        self._backgrounded = False
        self._actions = RemoteActions(engine)

        if sounds is not None:
            engine.alert_fired.connect(sounds.on_alert_fired)
        if live_status is not None:
            engine.snapshot_changed.connect(live_status.on_snapshot)
        engine.state_changed.connect(self._on_state_changed)

    # ── public API ────────────────────────────────────────────────────

    @property
    def engine(self) -> TimerEngine:
        return self._engine

    @property
    def actions(self) -> RemoteActions:
        return self._actions

    def start(self, config: TimerConfiguration) -> None:
        if self._notifications is not None:
            self._notifications.cancel_all()
        self._engine.start(config)

    def launch(self) -> bool:
        """Pick up a session left behind by a previous process."""
        if self._engine.state is not TimerState.IDLE or not self._persistence_enabled:
            return False
        return restore_engine(self._engine)

    def enter_background(self) -> None:
        engine = self._engine
        self._backgrounded = True
        if self._persistence_enabled:
            try:
                persist_engine(engine)
            except SQLAlchemyError as exc:
                logger.warning("Could not persist timer session: %s", exc)

        self._schedule_notifications()

        if engine.is_running:
            self._push_status(engine.snapshot())

    def enter_foreground(self) -> None:
        engine = self._engine
        self._backgrounded = False
        if engine.state is TimerState.IDLE:
            self.launch()

        if engine.is_running:
            if self._notifications is not None:
                self._notifications.cancel_all()
            engine.recalculate()

        if engine.is_running or engine.is_complete:
            self._push_status(engine.snapshot())

    # ── internal ──────────────────────────────────────────────────────

    def _on_state_changed(self, state: TimerState) -> None:
        if state is TimerState.RUNNING:
            if self._backgrounded:
                self._schedule_notifications()
            self._push_status(self._engine.snapshot())
            return
        if state is TimerState.PAUSED:
            if self._notifications is not None:
                self._notifications.cancel_all()
            self._push_status(self._engine.snapshot())
            return

        if self._notifications is not None:
            self._notifications.cancel_all()
        if self._live_status is not None:
            self._live_status.end(show_complete=state is TimerState.COMPLETED)

    def _schedule_notifications(self) -> None:
        engine = self._engine
        config = engine.configuration
        if (
            self._notifications is not None
            and config is not None
            and engine.is_running
            and not engine.is_paused
        ):
            self._notifications.schedule_alerts(config, elapsed=engine.elapsed)

    def _push_status(self, snapshot: TimerSnapshot) -> None:
        if self._live_status is not None:
            self._live_status.push(snapshot)


# ── application entry ─────────────────────────────────────────────────────


def run_app(
    config: TimerConfiguration | None = None,
    settings: Settings | None = None,
) -> int:
    """Start the tray app.  Without *config*, resume a persisted session
    or fall back to the configured default."""
    from PyQt6.QtWidgets import QApplication

    from .database.db import init_db
    from .ui.tray import TrayController

    settings = settings or load_settings()
    init_db()

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("IntervalAlert")
    app.setOrganizationName("IntervalAlert")
    app.setQuitOnLastWindowClosed(False)

    engine = TimerEngine(
        app,
        tick_hz=settings.tick_hz,
        dismiss_grace_ms=settings.dismiss_grace_ms,
    )

    sounds = AlertSoundPlayer(parent=app)
    sounds.set_volume(settings.sound_volume)
    sounds.set_enabled(settings.sound_enabled)

    host = TimerHost(
        engine,
        parent=app,
        notifications=NotificationScheduler(
            lambda alert: tray.show_notification(alert),
            parent=app,
            enabled=settings.notifications_enabled,
        ),
        live_status=LiveStatusPublisher(
            lambda status: tray.show_status(status),
            parent=app,
            refresh_seconds=settings.live_status_refresh_seconds,
        ),
        sounds=sounds,
    )
    # The sinks above look up ``tray`` when they are called.
    tray = TrayController(host.actions, parent=app)
    engine.state_changed.connect(tray.on_state_changed)
    tray.quit_requested.connect(app.quit)
    app.aboutToQuit.connect(host.enter_background)
    app.applicationStateChanged.connect(
        lambda state: _on_application_state(host, state)
    )

    if config is not None:
        host.start(config)
    elif not host.launch():
        host.start(settings.default_configuration())

    tray.show()
    logger.info("IntervalAlert ready")
    return app.exec()


def _on_application_state(host: TimerHost, state) -> None:
    from PyQt6.QtCore import Qt

    if state == Qt.ApplicationState.ApplicationActive:
        host.enter_foreground()
    elif state in (
        Qt.ApplicationState.ApplicationInactive,
        Qt.ApplicationState.ApplicationSuspended,
        Qt.ApplicationState.ApplicationHidden,
    ):
        host.enter_background()
