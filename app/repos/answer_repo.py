"""
Repository layer for Answer data access.

Answers are created against an existing question, never updated, and
deleted one at a time (or all together by question_repo.delete_question).
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.answer import AnswerCreate
from app.core.errors import PersistenceError
from app.db.models import Answer
from app.domain.types import Pagination
from app.repos.common import apply_pagination, persistence_error

logger = logging.getLogger(__name__)


async def list_answers(db: AsyncSession, pagination: Pagination) -> list[Answer]:
    """Retrieve all answers in creation order, windowed by pagination."""
    stmt = apply_pagination(select(Answer).order_by(Answer.id), pagination)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise persistence_error(
            "list_answers", e, limit=pagination.limit, offset=pagination.offset
        ) from e

    answers = list(result.scalars().all())
    logger.info(f"Retrieved {len(answers)} answers")
    return answers


async def list_question_answers(
    db: AsyncSession, question_id: int, pagination: Pagination
) -> list[Answer]:
    """
    Retrieve the answers of one question, windowed by pagination.

    A question that does not exist and a question without answers both
    yield an empty list.

    Args:
        db: Database session
        question_id: Question whose answers are listed
        pagination: Offset/limit window

    Returns:
        List of Answer models

    Raises:
        PersistenceError: If the query fails
    """
    stmt = apply_pagination(
        select(Answer).where(Answer.corresponding_question == question_id).order_by(Answer.id),
        pagination,
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise persistence_error("list_question_answers", e, question_id=question_id) from e

    answers = list(result.scalars().all())
    logger.debug(
        f"Retrieved {len(answers)} answers for question: {question_id}",
        extra={"question_id": question_id, "count": len(answers)},
    )
    return answers


async def exists_for_owner(db: AsyncSession, answer_id: int, account_id: int) -> bool:
    """
    Check whether an answer with this id exists and belongs to the account.

    Raises:
        PersistenceError: If the query fails
    """
    stmt = select(Answer.id).where(Answer.id == answer_id, Answer.account_id == account_id)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise persistence_error(
            "answer_exists_for_owner", e, answer_id=answer_id, account_id=account_id
        ) from e
    return result.scalar_one_or_none() is not None


async def create_answer(db: AsyncSession, new_answer: AnswerCreate, account_id: int) -> Answer:
    """
    Persist a new answer to an existing question.

    A missing question is rejected by the foreign key and reported as a
    plain PersistenceError; there is no separate "question not found" kind.

    Args:
        db: Database session
        new_answer: Content and the id of the answered question
        account_id: Owner of the new answer

    Returns:
        Created Answer model, including its assigned id

    Raises:
        PersistenceError: If the insert fails
    """
    answer = Answer(
        content=new_answer.content,
        corresponding_question=new_answer.question_id,
        account_id=account_id,
    )
    try:
        db.add(answer)
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error(
            "create_answer", e, question_id=new_answer.question_id, account_id=account_id
        ) from e

    logger.info(
        f"Created answer: id={answer.id} for question {new_answer.question_id}",
        extra={"answer_id": answer.id, "question_id": new_answer.question_id},
    )
    return answer


async def delete_answer(db: AsyncSession, answer_id: int, account_id: int) -> None:
    """
    Delete a single answer owned by the account.

    Raises:
        PersistenceError: If the statement fails or no row matched
    """
    try:
        result = await db.execute(
            delete(Answer).where(Answer.id == answer_id, Answer.account_id == account_id)
        )
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error(
            "delete_answer", e, answer_id=answer_id, account_id=account_id
        ) from e

    if result.rowcount == 0:
        await db.rollback()
        logger.warning(
            f"Delete matched no answer: id={answer_id}",
            extra={"answer_id": answer_id, "account_id": account_id},
        )
        raise PersistenceError(f"Answer {answer_id} was not deleted")

    logger.info(f"Deleted answer: id={answer_id}", extra={"answer_id": answer_id})
