"""Tests for the throttled live-status publisher."""

import pytest

from intervalalert.live_status import LiveStatusPublisher, LiveStatus, status_from_snapshot
from intervalalert.timer.models import AlertLevel, Percentage, TimerConfiguration

from helpers import SignalCollector


CONFIG = TimerConfiguration(300, Percentage(25))


@pytest.fixture
def sink():
    return SignalCollector()


@pytest.fixture
def publisher(qapp, sink, clock):
    return LiveStatusPublisher(sink, clock=clock, refresh_seconds=5)


class TestStatusFromSnapshot:

    def test_fields(self, engine, clock):
        engine.start(CONFIG)
        clock.advance(125)
        engine.tick()
        status = status_from_snapshot(engine.snapshot())
        assert status.remaining_label == "2:55"
        assert status.alert_level is AlertLevel.MODERATE
        assert status.progress == pytest.approx(125 / 300)
        assert not status.is_paused
        assert not status.is_complete


class TestThrottling:

    def test_first_snapshot_publishes(self, publisher, sink, engine):
        engine.start(CONFIG)
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 1

    def test_same_level_within_interval_is_skipped(self, publisher, sink, engine, clock):
        engine.start(CONFIG)
        publisher.on_snapshot(engine.snapshot())
        clock.advance(2)
        engine.tick()
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 1

    def test_refresh_interval_republishes(self, publisher, sink, engine, clock):
        engine.start(CONFIG)
        publisher.on_snapshot(engine.snapshot())
        clock.advance(5)
        engine.tick()
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 2

    def test_level_change_republishes(self, publisher, sink, engine, clock):
        engine.start(CONFIG)
        clock.advance(119)
        engine.tick()
        publisher.on_snapshot(engine.snapshot())
        clock.advance(1)  # 40% → Moderate
        engine.tick()
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 2
        assert sink.last.alert_level is AlertLevel.MODERATE

    def test_not_running_is_ignored(self, publisher, sink, engine):
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 0

    def test_engine_signal_drives_publisher(self, publisher, sink, engine, clock):
        engine.snapshot_changed.connect(publisher.on_snapshot)
        engine.start(CONFIG)
        for _ in range(15):  # 1 s at 15 Hz
            clock.advance(1 / 15)
            engine.tick()
        assert len(sink) == 1


class TestPushAndEnd:

    def test_push_is_unconditional(self, publisher, sink, engine):
        engine.start(CONFIG)
        publisher.push(engine.snapshot())
        publisher.push(engine.snapshot())
        assert len(sink) == 2

    def test_push_paused(self, publisher, sink, engine):
        engine.start(CONFIG)
        engine.pause()
        publisher.push(engine.snapshot())
        assert sink.last.is_paused

    def test_end_complete(self, publisher, sink):
        publisher.end(show_complete=True)
        status = sink.last
        assert isinstance(status, LiveStatus)
        assert status.is_complete
        assert status.alert_level is AlertLevel.FINAL
        assert status.progress == 1.0
        assert status.remaining_label == "0:00"

    def test_end_resets_throttle(self, publisher, sink, engine):
        engine.start(CONFIG)
        publisher.on_snapshot(engine.snapshot())
        publisher.end(show_complete=False)
        publisher.on_snapshot(engine.snapshot())
        assert len(sink) == 3

    def test_failing_sink_is_contained(self, qapp, engine, clock):
        def broken(status):
            raise RuntimeError("surface unavailable")

        publisher = LiveStatusPublisher(broken, clock=clock)
        engine.start(CONFIG)
        publisher.push(engine.snapshot())
        assert publisher.last_status is not None
