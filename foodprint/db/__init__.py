"""Structured reference store (SQLAlchemy)."""

from foodprint.db.base import (
    Base,
    build_engine,
    get_database_url,
    get_session_factory,
    init_db,
    session_scope,
)

__all__ = [
    "Base",
    "build_engine",
    "get_database_url",
    "get_session_factory",
    "init_db",
    "session_scope",
]
