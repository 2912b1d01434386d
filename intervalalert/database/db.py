"""Database connection and session management."""

import logging
from pathlib import Path
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from .models import Base, Preset
from ..timer.models import BUILT_IN_PRESETS

logger = logging.getLogger(__name__)

# ── paths ────────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "IntervalAlert"
DB_PATH = APP_SUPPORT_DIR / "intervalalert.db"

# ── engine & session factory (created lazily) ─────────────────────────────

_engine = None
_SessionFactory = None


def _get_engine():
    global _engine
    if _engine is None:
        APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(
            f"sqlite:///{DB_PATH}",
            connect_args={"check_same_thread": False},
            echo=False,
        )
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Override the database connection URL.  Used by tests to point at
    an in-memory SQLite database instead of the real one on disk."""
    global _engine, _SessionFactory
    _SessionFactory = None
    _engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


def _seed_built_in_presets(session: OrmSession) -> None:
    """Insert any built-in preset that is missing (idempotent)."""
    existing = {row.id for row in session.query(Preset.id).all()}
    for preset in BUILT_IN_PRESETS:
        if preset.id in existing:
            continue
        mode = preset.configuration.interval_mode
        session.add(Preset(
            id=preset.id,
            name=preset.name,
            total_duration=float(preset.configuration.total_duration),
            mode_kind=mode.kind,
            mode_value=mode.value,
            is_built_in=True,
        ))
        logger.debug("Seeded built-in preset %r", preset.name)


def init_db() -> None:
    """Create all tables and seed the built-in presets."""
    engine = _get_engine()
    Base.metadata.create_all(engine)

    factory = _get_session_factory()
    with factory() as session:
        _seed_built_in_presets(session)
        session.commit()


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
