"""Tests for preset storage."""

import pytest

from intervalalert.database.presets import (
    list_presets, get_preset, save_preset, delete_preset,
)
from intervalalert.database.db import init_db
from intervalalert.timer.models import FixedInterval, Percentage, TimerConfiguration


class TestBuiltIns:

    def test_seeded(self):
        presets = list_presets()
        assert [p.name for p in presets][:3] == ["Quick Shower", "Workout Set", "Focus Block"]
        assert all(p.is_built_in for p in presets[:3])

    def test_seed_is_idempotent(self):
        init_db()
        init_db()
        assert len(list_presets()) == 3

    def test_configuration_round_trips(self):
        workout = get_preset("workout set")
        assert workout.configuration == TimerConfiguration(180, FixedInterval(60))

    def test_built_in_cannot_be_deleted(self):
        shower = get_preset("Quick Shower")
        with pytest.raises(ValueError):
            delete_preset(shower.id)


class TestCustomPresets:

    def test_save_and_list(self):
        saved = save_preset("  Tea  ", TimerConfiguration(240, Percentage(50)))
        assert saved.name == "Tea"
        assert not saved.is_built_in
        assert list_presets()[-1].name == "Tea"
        assert get_preset("tea").configuration.interval_mode == Percentage(50)

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            save_preset("   ", TimerConfiguration(60, Percentage(10)))

    def test_short_duration_rejected(self):
        with pytest.raises(ValueError):
            save_preset("Blink", TimerConfiguration(4, Percentage(10)))

    def test_delete(self):
        saved = save_preset("Plank", TimerConfiguration(90, FixedInterval(30)))
        assert delete_preset(saved.id)
        assert get_preset("Plank") is None

    def test_delete_missing(self):
        assert not delete_preset("does-not-exist")
