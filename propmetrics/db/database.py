"""
Database connection and session management.
"""

from contextlib import contextmanager
from typing import Callable, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool

from propmetrics.config import get_settings
from propmetrics.db.models import Base

settings = get_settings()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; NullPool for PostgreSQL, default pool for SQLite."""
    if database_url.startswith("postgresql"):
        return create_engine(database_url, poolclass=NullPool)
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
    )


engine = create_db_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine):
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context(
    session_factory: Callable[[], Session] = SessionLocal,
) -> Generator[Session, None, None]:
    """
    Transactional session scope for use outside FastAPI.

    Commits on success and rolls back on any exception.
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
