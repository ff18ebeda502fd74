"""
Database connection and session management.

The asset register lives in SQLite by default (``sqlite:///./assetplace.db``).
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from assetplace.config import get_settings
from assetplace.db.models import Base


def create_db_engine(database_url: str) -> Engine:
    """
    Engine for ``database_url``.

    SQLite connections are shared with FastAPI's worker threads, and an
    in-memory SQLite database is pinned to a single connection so every
    session sees the same tables.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url)

    options = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return create_engine(database_url, **options)


engine = create_db_engine(get_settings().database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    """Create the register's tables."""
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Session for scripts: commits on success, rolls back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
