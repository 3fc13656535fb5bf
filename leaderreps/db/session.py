"""Engine and transaction helpers for the SQL-backed roadmap document store."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, sessionmaker

from ..config import Settings, get_settings
from ..errors import ConfigurationError
from .monitoring import instrument_engine

_lock = threading.Lock()
_engine: Optional[Engine] = None
_sessions: Optional[sessionmaker[Session]] = None


def database_url(settings: Settings) -> URL:
    """Parsed ``LEADERREPS_DATABASE_URL``; a missing or malformed URL is a configuration error."""
    if not settings.database_url:
        raise ConfigurationError(
            "LEADERREPS_DATABASE_URL must be configured before using the database store."
        )
    try:
        return make_url(settings.database_url)
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid LEADERREPS_DATABASE_URL: {exc}") from exc


def engine_options(settings: Settings, url: URL) -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.database_echo, "pool_pre_ping": True}
    if url.get_backend_name() == "sqlite":
        # Requests are served from FastAPI's thread pool.
        options["connect_args"] = {"check_same_thread": False}
    else:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
    return options


def _connect(settings: Settings) -> Engine:
    url = database_url(settings)
    try:
        engine = create_engine(url, **engine_options(settings, url))
    except (ArgumentError, ImportError) as exc:
        raise ConfigurationError(f"Unable to create database engine for {url.drivername}: {exc}") from exc
    instrument_engine(engine)
    return engine


def get_engine() -> Engine:
    global _engine, _sessions
    with _lock:
        if _engine is None:
            _engine = _connect(get_settings())
            _sessions = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
        return _engine


@contextmanager
def session_scope(*, commit: bool = True) -> Iterator[Session]:
    """One unit of work: commit on success (reads pass ``commit=False``), roll back on error."""
    get_engine()
    assert _sessions is not None
    session = _sessions()
    try:
        yield session
        if commit:
            session.commit()
    except Exception:  # noqa: BLE001
        session.rollback()
        raise
    finally:
        session.close()


def create_schema() -> None:
    """Create missing tables directly; deployments run the Alembic migrations instead."""
    from . import models  # noqa: F401
    from .base import Base

    Base.metadata.create_all(get_engine())


def dispose_engine() -> None:
    global _engine, _sessions
    with _lock:
        if _engine is not None:
            _engine.dispose()
        _engine = None
        _sessions = None


__all__ = [
    "create_schema",
    "database_url",
    "dispose_engine",
    "engine_options",
    "get_engine",
    "session_scope",
]
