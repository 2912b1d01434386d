"""Tests for background alert scheduling."""

from datetime import timedelta

import pytest

from intervalalert.notifications import NotificationScheduler, ScheduledAlert, build_alert
from intervalalert.timer.models import AlertLevel, FixedInterval, Percentage, TimerConfiguration

from helpers import SignalCollector


CONFIG = TimerConfiguration(300, Percentage(25))


@pytest.fixture
def sink():
    return SignalCollector()


@pytest.fixture
def scheduler(qapp, sink, clock):
    return NotificationScheduler(sink, clock=clock)


class TestBuildAlert:

    def test_interval_alert_text(self, clock):
        alert = build_alert(CONFIG, 1, 150, clock.now)
        assert alert.title == "Interval Alert"
        assert alert.body == "Moderate — 50% elapsed"
        assert alert.level is AlertLevel.MODERATE
        assert not alert.is_final

    def test_final_alert_text(self, clock):
        alert = build_alert(CONFIG, 3, 300, clock.now)
        assert alert.title == "Timer Complete!"
        assert alert.body == "Your 5 min timer has ended."
        assert alert.level is AlertLevel.FINAL
        assert alert.is_final

    def test_short_timer_body(self, clock):
        alert = build_alert(TimerConfiguration(45, FixedInterval(15)), 2, 45, clock.now)
        assert alert.body == "Your 45s timer has ended."


class TestScheduling:

    def test_schedules_only_future_offsets(self, scheduler, clock):
        pending = scheduler.schedule_alerts(CONFIG, clock.now, elapsed=100)
        assert [a.index for a in pending] == [1, 2, 3]
        assert pending[0].fire_at == clock.now + timedelta(seconds=50)
        assert pending[-1].is_final

    def test_offset_exactly_at_elapsed_is_skipped(self, scheduler, clock):
        pending = scheduler.schedule_alerts(CONFIG, clock.now, elapsed=150)
        assert [a.index for a in pending] == [2, 3]

    def test_reference_defaults_to_now(self, scheduler, clock):
        pending = scheduler.schedule_alerts(CONFIG)
        assert pending[0].fire_at == clock.now + timedelta(seconds=75)

    def test_rescheduling_replaces_pending(self, scheduler, clock):
        scheduler.schedule_alerts(CONFIG, clock.now, elapsed=0)
        scheduler.schedule_alerts(CONFIG, clock.now, elapsed=200)
        assert [a.index for a in scheduler.pending] == [2, 3]

    def test_cancel_all(self, scheduler, clock):
        scheduler.schedule_alerts(CONFIG, clock.now)
        scheduler.cancel_all()
        assert scheduler.pending == []

    def test_disabled_schedules_nothing(self, qapp, sink, clock):
        scheduler = NotificationScheduler(sink, enabled=False, clock=clock)
        assert scheduler.schedule_alerts(CONFIG, clock.now) == []
        assert scheduler.pending == []

    def test_disabling_cancels_pending(self, scheduler, clock):
        scheduler.schedule_alerts(CONFIG, clock.now)
        scheduler.set_enabled(False)
        assert scheduler.pending == []


class TestDelivery:

    def test_delivery_reaches_sink_once(self, scheduler, sink, clock):
        scheduler.schedule_alerts(CONFIG, clock.now)
        scheduler._deliver(0)
        scheduler._deliver(0)
        assert len(sink) == 1
        assert isinstance(sink.last, ScheduledAlert)
        assert sink.last.index == 0
        assert [a.index for a in scheduler.pending] == [1, 2, 3]

    def test_failing_sink_is_contained(self, qapp, clock):
        def broken(alert):
            raise RuntimeError("permission denied")

        scheduler = NotificationScheduler(broken, clock=clock)
        scheduler.schedule_alerts(CONFIG, clock.now)
        scheduler._deliver(0)  # must not raise
        assert [a.index for a in scheduler.pending] == [1, 2, 3]
