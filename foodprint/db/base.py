"""
Database base configuration and utilities for the reference store
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Create declarative base
Base = declarative_base()


def get_database_url(url: Optional[str] = None, path: Optional[str] = None) -> str:
    """
    Get database URL from arguments or environment

    Returns:
        Database connection URL
    """
    db_url = url or os.getenv("FOODPRINT_DB_URL")
    if db_url:
        return db_url

    # Default to SQLite for development
    db_path = path or os.getenv("FOODPRINT_DB_PATH", "~/.foodprint/foodprint.db")
    db_path = os.path.expanduser(db_path)
    os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)

    return f"sqlite:///{db_path}"


def build_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine for ``url``.

    In-memory SQLite shares one connection across threads so every worker
    sees the same tables.
    """
    if url.startswith("sqlite"):
        engine_config = {
            "connect_args": {"check_same_thread": False},
            "echo": echo,
        }
        if url in ("sqlite://", "sqlite:///:memory:"):
            engine_config["poolclass"] = StaticPool
        return create_engine(url, **engine_config)

    return create_engine(url, echo=echo, pool_pre_ping=True, pool_recycle=3600)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Transactional session context manager

    Commits on success, rolls back on any exception.
    """
    session = factory()

    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine, drop_all: bool = False) -> None:
    """
    Initialize database (create all tables)

    Args:
        engine: SQLAlchemy engine
        drop_all: If True, drop all tables first
    """
    # Register models on Base.metadata
    from foodprint.db import models  # noqa: F401

    if drop_all:
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
