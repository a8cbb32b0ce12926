"""
Common repository functions shared across multiple repos.

This module contains the pagination helper, the request commit and the
translation from SQLAlchemy errors to the service's persistence errors.

All repository functions are async - use AsyncSession from SQLAlchemy.
"""

import logging
from typing import Any

from sqlalchemy import Select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError, UniqueConstraintViolation
from app.domain.types import Pagination

logger = logging.getLogger(__name__)

__all__ = [
    "PG_UNIQUE_VIOLATION",
    "SQLITE_CONSTRAINT_UNIQUE",
    "apply_pagination",
    "backend_error_code",
    "commit",
    "is_unique_violation",
    "persistence_error",
    "translate_insert_error",
]

# PostgreSQL SQLSTATE for unique_violation
PG_UNIQUE_VIOLATION = "23505"
# SQLite extended result code for a UNIQUE constraint failure
SQLITE_CONSTRAINT_UNIQUE = 2067


def apply_pagination(stmt: Select, pagination: Pagination) -> Select:
    """Skip `offset` rows, then take up to `limit` rows (all when limit is None).

    Args:
        stmt: An ordered Select statement
        pagination: Offset/limit window

    Returns:
        Select statement with OFFSET/LIMIT applied
    """
    stmt = stmt.offset(pagination.offset)
    if pagination.limit is not None:
        stmt = stmt.limit(pagination.limit)
    return stmt


def backend_error_code(error: SQLAlchemyError) -> str | int | None:
    """Extract the driver-level error code wrapped by a SQLAlchemy DBAPIError.

    asyncpg and psycopg expose the SQLSTATE as `sqlstate` (psycopg2 as
    `pgcode`); sqlite3 exposes `sqlite_errorcode`.
    """
    orig = getattr(error, "orig", None)
    if orig is None:
        return None
    for attr in ("sqlstate", "pgcode", "sqlite_errorcode"):
        code = getattr(orig, attr, None)
        if code is not None:
            return code
    return None


def is_unique_violation(error: SQLAlchemyError) -> bool:
    """Return True if the backend rejected the statement for a duplicate key."""
    if not isinstance(error, IntegrityError):
        return False
    code = backend_error_code(error)
    return code == PG_UNIQUE_VIOLATION or code == SQLITE_CONSTRAINT_UNIQUE


def persistence_error(operation: str, error: Exception, **context: Any) -> PersistenceError:
    """Log a backend failure and wrap it as a PersistenceError.

    Args:
        operation: Short name of the failed repository operation
        error: The SQLAlchemy (or driver) exception
        context: Extra identifiers for the log record

    Returns:
        PersistenceError carrying the original exception as its cause
    """
    logger.error(
        f"Database operation failed: {operation}: {error!r}",
        extra={"operation": operation, **context},
    )
    return PersistenceError(f"Database operation failed: {operation}", cause=error)


async def commit(db: AsyncSession, operation: str, **context: Any) -> None:
    """Commit the request's unit of work before the response is built.

    Raises:
        PersistenceError: If the backend rejects the commit (the
            transaction is rolled back)
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error(f"commit {operation}", e, **context) from e


def translate_insert_error(operation: str, error: SQLAlchemyError, **context: Any) -> PersistenceError:
    """Classify an insert failure, distinguishing duplicate keys.

    This is the only place the backend error code is inspected.
    """
    if is_unique_violation(error):
        logger.warning(
            f"Unique constraint violated: {operation}",
            extra={"operation": operation, "code": backend_error_code(error), **context},
        )
        return UniqueConstraintViolation(f"Unique constraint violated: {operation}", cause=error)
    return persistence_error(operation, error, code=backend_error_code(error), **context)
