"""Tests for alert-tone synthesis and playback scheduling."""

from __future__ import annotations

import io
import wave

import pytest

from intervalalert.audio.sounds import (
    AlertSoundPlayer, generate_alert_tone, sound_name, SAMPLE_RATE, REPEAT_GAP_MS,
)
from intervalalert.timer.models import AlertLevel


class TestToneSynthesis:

    @pytest.mark.parametrize("level", list(AlertLevel))
    def test_valid_wav(self, level):
        data = generate_alert_tone(level)
        with wave.open(io.BytesIO(data), "rb") as wf:
            assert wf.getnchannels() == 1
            assert wf.getsampwidth() == 2
            assert wf.getframerate() == SAMPLE_RATE
            assert wf.getnframes() > 0

    def test_final_tone_is_longest(self):
        lengths = {lv: len(generate_alert_tone(lv)) for lv in AlertLevel}
        assert lengths[AlertLevel.FINAL] == max(lengths.values())

    def test_sound_names(self):
        assert sound_name(AlertLevel.URGENT) == "alert_urgent"


@pytest.fixture
def player(qapp, tmp_path):
    return AlertSoundPlayer(sounds_dir=tmp_path / "sounds")


class TestPlayer:

    def test_generates_cache_files(self, player):
        names = sorted(p.name for p in player.sounds_dir.iterdir())
        assert names == sorted(f"{sound_name(lv)}.wav" for lv in AlertLevel)

    def test_existing_files_are_reused(self, qapp, tmp_path):
        sounds = tmp_path / "sounds"
        sounds.mkdir()
        marker = sounds / "alert_gentle.wav"
        marker.write_bytes(generate_alert_tone(AlertLevel.GENTLE))
        before = marker.stat().st_mtime_ns
        AlertSoundPlayer(sounds_dir=sounds)
        assert marker.stat().st_mtime_ns == before

    def test_volume_clamps(self, player):
        player.set_volume(150)
        assert player.volume == 100
        player.set_volume(-5)
        assert player.volume == 0

    def test_alert_plays_first_repeat_immediately(self, player, monkeypatch):
        played = []
        monkeypatch.setattr(player, "_play_once", played.append)
        player.on_alert_fired(AlertLevel.MODERATE, 2)
        assert played == [AlertLevel.MODERATE]

    def test_disabled_is_silent(self, player, monkeypatch):
        played = []
        monkeypatch.setattr(player, "_play_once", played.append)
        player.set_enabled(False)
        player.on_alert_fired(AlertLevel.FINAL, 0)
        assert played == []
        assert not player.enabled

    def test_repeats_once_per_alert_index(self, player, monkeypatch):
        scheduled = []
        monkeypatch.setattr(player, "_play_once", lambda level: None)
        monkeypatch.setattr(
            player, "_schedule_repeat",
            lambda delay, level: scheduled.append((delay, level)),
        )
        player.on_alert_fired(AlertLevel.URGENT, 14)
        assert len(scheduled) == 14
        assert scheduled[0] == (REPEAT_GAP_MS, AlertLevel.URGENT)
        assert scheduled[-1] == (14 * REPEAT_GAP_MS, AlertLevel.URGENT)
