"""
Repository layer for Account data access.

Account creation is the one write where a duplicate key is reported
distinctly (UniqueConstraintViolation) from any other persistence failure.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import PersistenceError
from app.db.models import Account
from app.repos.common import persistence_error, translate_insert_error

logger = logging.getLogger(__name__)


async def create_account(db: AsyncSession, email: str, password_hash: str) -> Account:
    """
    Persist a new account.

    Args:
        db: Database session
        email: Unique e-mail address
        password_hash: Already hashed password

    Returns:
        Created Account model, including its assigned id

    Raises:
        UniqueConstraintViolation: If the e-mail is already registered
        PersistenceError: For any other backend failure
    """
    account = Account(email=email, password=password_hash)
    try:
        db.add(account)
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        raise translate_insert_error("create_account", e, email=email) from e

    logger.info(f"Created account: id={account.id}", extra={"account_id": account.id})
    return account


async def get_account_by_email(db: AsyncSession, email: str) -> Account:
    """
    Retrieve an account by e-mail address.

    Not found and backend failure are both reported as PersistenceError.

    Raises:
        PersistenceError: If no account matches or the query fails
    """
    try:
        result = await db.execute(select(Account).where(Account.email == email))
        account = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        raise persistence_error("get_account_by_email", e, email=email) from e

    if account is None:
        logger.warning("Account not found", extra={"email": email})
        raise PersistenceError("Account not found")

    return account
