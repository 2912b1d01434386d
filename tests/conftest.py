"""Shared pytest fixtures for IntervalAlert tests."""

import os
import sys

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from PyQt6.QtWidgets import QApplication

from intervalalert.database.db import configure_engine, init_db
from intervalalert.timer.engine import TimerEngine

from helpers import FakeClock


@pytest.fixture(scope="session")
def qapp():
    """A single QApplication instance shared across the entire test run."""
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def clock():
    """Hand-driven wall clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def engine(qapp, clock):
    """Fresh TimerEngine on the fake clock."""
    return TimerEngine(parent=None, clock=clock)
