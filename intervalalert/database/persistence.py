"""Durable record of the in-flight session.

Written when the host goes to the background, read back on relaunch so a
killed process can pick up the countdown where the wall clock says it is.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from .db import get_session
from .models import ActiveSession
from ..timer.engine import SessionRecord, SessionRecordError, TimerEngine
from ..timer.models import TimerConfiguration, mode_from_kind

logger = logging.getLogger(__name__)

_ROW_ID = 1


def save_active_session(record: SessionRecord) -> None:
    """Replace the stored session with *record*."""
    mode = record.configuration.interval_mode
    with get_session() as db:
        row = db.get(ActiveSession, _ROW_ID)
        if row is None:
            row = ActiveSession(id=_ROW_ID)
            db.add(row)
        row.total_duration = float(record.configuration.total_duration)
        row.mode_kind = mode.kind
        row.mode_value = mode.value
        row.start_time = record.start_timestamp
        row.pause_time = record.pause_timestamp
        row.accumulated_pause = float(record.accumulated_pause)
        row.fired_indices = json.dumps(sorted(record.fired_indices))


def load_active_session() -> SessionRecord | None:
    """The stored session, or None.  Raises SessionRecordError if corrupt."""
    with get_session() as db:
        row = db.get(ActiveSession, _ROW_ID)
        if row is None:
            return None
        try:
            fired = json.loads(row.fired_indices or "[]")
            if not isinstance(fired, list):
                raise SessionRecordError("fired indices are not a list")
            return SessionRecord(
                configuration=TimerConfiguration(
                    total_duration=row.total_duration,
                    interval_mode=mode_from_kind(row.mode_kind, row.mode_value),
                ),
                start_timestamp=row.start_time,
                pause_timestamp=row.pause_time,
                accumulated_pause=row.accumulated_pause or 0.0,
                fired_indices={int(i) for i in fired},
            )
        except SessionRecordError:
            raise
        except (ValueError, TypeError) as exc:
            raise SessionRecordError(str(exc)) from exc


def clear_active_session() -> None:
    with get_session() as db:
        row = db.get(ActiveSession, _ROW_ID)
        if row is not None:
            db.delete(row)


def persist_engine(engine: TimerEngine) -> bool:
    """Save the engine's session, or clear the record if there is none."""
    record = engine.export_session()
    if record is None:
        clear_active_session()
        return False
    save_active_session(record)
    logger.debug("Persisted session (%d alerts fired)", len(record.fired_indices))
    return True


def restore_engine(engine: TimerEngine) -> bool:
    """Rebuild *engine* from the stored record and fast-forward it.

    Any failure leaves the engine IDLE and drops the record.
    """
    try:
        record = load_active_session()
        if record is None:
            return False
        engine.restore_session(record)
    except (SessionRecordError, SQLAlchemyError) as exc:
        logger.warning("Discarding unrestorable timer session: %s", exc)
        engine.cancel()
        try:
            clear_active_session()
        except SQLAlchemyError as clear_exc:
            logger.warning("Could not clear stored session: %s", clear_exc)
        return False

    logger.info("Restored in-flight timer session")
    engine.recalculate()
    return True
