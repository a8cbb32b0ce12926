"""
Ownership checks guarding every mutation of a question or answer.

A resource that does not exist and a resource owned by someone else give
the same answer (False), so non-owners learn nothing about which ids
exist. A failing query is never read as "not owner": it raises
PersistenceError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import UnauthorizedError
from app.repos import answer_repo, question_repo

logger = logging.getLogger(__name__)


async def is_question_owner(db: AsyncSession, question_id: int, account_id: int) -> bool:
    """Return True if the question exists and belongs to the account."""
    return await question_repo.exists_for_owner(db, question_id, account_id)


async def is_answer_owner(db: AsyncSession, answer_id: int, account_id: int) -> bool:
    """Return True if the answer exists and belongs to the account."""
    return await answer_repo.exists_for_owner(db, answer_id, account_id)


async def ensure_question_owner(db: AsyncSession, question_id: int, account_id: int) -> None:
    """
    Require the account to own the question.

    Raises:
        UnauthorizedError: If the question is missing or owned by another account
        PersistenceError: If the ownership query fails
    """
    if not await is_question_owner(db, question_id, account_id):
        logger.warning(
            "Ownership check failed for question",
            extra={"question_id": question_id, "account_id": account_id},
        )
        raise UnauthorizedError(details={"resource": "question", "resource_id": question_id})


async def ensure_answer_owner(db: AsyncSession, answer_id: int, account_id: int) -> None:
    """
    Require the account to own the answer.

    Raises:
        UnauthorizedError: If the answer is missing or owned by another account
        PersistenceError: If the ownership query fails
    """
    if not await is_answer_owner(db, answer_id, account_id):
        logger.warning(
            "Ownership check failed for answer",
            extra={"answer_id": answer_id, "account_id": account_id},
        )
        raise UnauthorizedError(details={"resource": "answer", "resource_id": answer_id})
