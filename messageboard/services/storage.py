"""Transaction helpers shared by the message board services."""

import logging
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Row, Table, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_name(db: Session) -> str:
    """Name of the database dialect the session is bound to."""
    return db.get_bind().dialect.name


def insert_if_absent(
    db: Session, table: Table, values: dict[str, Any], *returning: Any
) -> Row | None:
    """INSERT ... ON CONFLICT DO NOTHING ... RETURNING.

    Returns the returned row, or None when any unique constraint already held
    a matching row and nothing was inserted.
    """
    insert = _INSERT_BY_DIALECT.get(dialect_name(db))
    if insert is None:
        raise NotImplementedError(f"insert_if_absent is not supported on {dialect_name(db)}")

    stmt = insert(table).values(**values).on_conflict_do_nothing().returning(*returning)
    return db.execute(stmt).first()


def rollback_quietly(db: Session) -> None:
    """Roll back the current transaction, logging instead of raising on failure."""
    try:
        db.rollback()
    except SQLAlchemyError as e:
        logger.error(f"Rollback failed: {e}")


@contextmanager
def read_only_snapshot(db: Session) -> Generator[Session, None, None]:
    """Run the enclosed queries in one read-only transaction.

    On PostgreSQL the transaction is REPEATABLE READ so every query in the block
    sees the same snapshot; SQLite transactions are already serializable.
    """
    # SET TRANSACTION must be the first statement of the transaction
    db.commit()
    if dialect_name(db) == "postgresql":
        db.execute(text("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY"))
    try:
        yield db
    finally:
        rollback_quietly(db)
