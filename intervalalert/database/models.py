"""SQLAlchemy ORM models for IntervalAlert."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Text
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Preset(Base):
    """A named timer configuration (built-in or user-saved)."""

    __tablename__ = "presets"

    id = Column(String(36), primary_key=True)
    name = Column(String(120), nullable=False)
    total_duration = Column(Float, nullable=False)
    mode_kind = Column(String(20), nullable=False)   # percentage | fixed
    mode_value = Column(Float, nullable=False)       # pct or seconds
    is_built_in = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<Preset name={self.name!r} total={self.total_duration} "
            f"mode={self.mode_kind}:{self.mode_value}>"
        )


class ActiveSession(Base):
    """Single-row snapshot of the in-flight timer, written on backgrounding."""

    __tablename__ = "active_session"

    id = Column(Integer, primary_key=True, default=1)
    total_duration = Column(Float, nullable=False)
    mode_kind = Column(String(20), nullable=False)
    mode_value = Column(Float, nullable=False)
    start_time = Column(DateTime, nullable=False)
    pause_time = Column(DateTime, nullable=True)
    accumulated_pause = Column(Float, nullable=False, default=0.0)
    fired_indices = Column(Text, nullable=False, default="[]")  # JSON list
    saved_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self) -> str:
        return (
            f"<ActiveSession start={self.start_time} "
            f"paused={self.pause_time is not None}>"
        )
