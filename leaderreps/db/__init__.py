"""Database utilities for the roadmap document store."""

from .session import (
    create_schema,
    database_url,
    dispose_engine,
    engine_options,
    get_engine,
    session_scope,
)

__all__ = [
    "create_schema",
    "database_url",
    "dispose_engine",
    "engine_options",
    "get_engine",
    "session_scope",
]
