"""Database configuration and session management."""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from messageboard.config import get_settings

settings = get_settings()


def make_engine(database_url: str, **kwargs: Any) -> Engine:
    """Create an engine, turning on foreign key enforcement for SQLite."""
    if database_url.startswith("sqlite"):
        # Concurrent writers wait for the lock instead of failing with "database is locked"
        kwargs.setdefault("connect_args", {"check_same_thread": False, "timeout": 30})
        new_engine = create_engine(database_url, **kwargs)
        event.listen(new_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        **kwargs,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base: Any = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session.

    The session is returned to the pool on every exit path, and any
    transaction still open at that point is rolled back by ``close()``.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

