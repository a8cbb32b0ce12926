"""
Repository layer for Question data access.

Provides database operations following the repository pattern to separate
data access logic from API endpoint handlers. SQLAlchemy errors never leave
this module: they are translated to PersistenceError at the call site.
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.question import QuestionCreate, QuestionUpdate
from app.core.errors import PersistenceError
from app.db.models import Answer, Question
from app.domain.types import Pagination
from app.repos.common import apply_pagination, persistence_error

logger = logging.getLogger(__name__)


async def list_questions(db: AsyncSession, pagination: Pagination) -> list[Question]:
    """
    Retrieve questions in creation order, windowed by pagination.

    An offset beyond the end yields an empty list.

    Args:
        db: Database session
        pagination: Offset/limit window

    Returns:
        List of Question models

    Raises:
        PersistenceError: If the query fails
    """
    stmt = apply_pagination(select(Question).order_by(Question.id), pagination)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise persistence_error(
            "list_questions", e, limit=pagination.limit, offset=pagination.offset
        ) from e

    questions = list(result.scalars().all())
    logger.info(f"Retrieved {len(questions)} questions")
    return questions


async def exists_for_owner(db: AsyncSession, question_id: int, account_id: int) -> bool:
    """
    Check whether a question with this id exists and belongs to the account.

    Raises:
        PersistenceError: If the query fails
    """
    stmt = select(Question.id).where(Question.id == question_id, Question.account_id == account_id)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        raise persistence_error(
            "question_exists_for_owner", e, question_id=question_id, account_id=account_id
        ) from e
    return result.scalar_one_or_none() is not None


async def create_question(
    db: AsyncSession, new_question: QuestionCreate, account_id: int
) -> Question:
    """
    Persist a new question owned by the given account.

    Args:
        db: Database session
        new_question: Title, content and optional tags
        account_id: Owner of the new question

    Returns:
        Created Question model, including its assigned id

    Raises:
        PersistenceError: If the insert fails
    """
    question = Question(
        title=new_question.title,
        content=new_question.content,
        tags=new_question.tags,
        account_id=account_id,
    )
    try:
        db.add(question)
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error("create_question", e, account_id=account_id) from e

    logger.info(
        f"Created question: id={question.id}",
        extra={"question_id": question.id, "account_id": account_id},
    )
    return question


async def update_question(
    db: AsyncSession, question_update: QuestionUpdate, question_id: int, account_id: int
) -> Question:
    """
    Replace title, content and tags of a question.

    The write is qualified by both id and owner, so a question deleted (or
    never owned) between the ownership check and this statement updates
    nothing.

    Args:
        db: Database session
        question_update: New title, content and tags
        question_id: Question to update
        account_id: Principal performing the update

    Returns:
        Updated Question model

    Raises:
        PersistenceError: If the statement fails or no row matched
    """
    stmt = (
        update(Question)
        .where(Question.id == question_id, Question.account_id == account_id)
        .values(
            title=question_update.title,
            content=question_update.content,
            tags=question_update.tags,
        )
        .returning(Question)
        .execution_options(populate_existing=True)
    )
    try:
        result = await db.execute(stmt)
        question = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error(
            "update_question", e, question_id=question_id, account_id=account_id
        ) from e

    if question is None:
        logger.warning(
            f"Update matched no question: id={question_id}",
            extra={"question_id": question_id, "account_id": account_id},
        )
        raise PersistenceError(f"Question {question_id} was not updated")

    logger.info(f"Updated question: id={question_id}", extra={"question_id": question_id})
    return question


async def delete_question(db: AsyncSession, question_id: int, account_id: int) -> None:
    """
    Delete a question together with all of its answers.

    Runs two ordered statements in the session's transaction: first the
    answers referencing the question, then the question row qualified by
    owner. The second statement is only issued once the first succeeded.
    Any failure rolls back the whole transaction, so answers are never
    removed while their question survives.

    Args:
        db: Database session
        question_id: Question to delete
        account_id: Principal performing the delete

    Raises:
        PersistenceError: If either statement fails or no question row matched
    """
    try:
        answers_result = await db.execute(
            delete(Answer).where(Answer.corresponding_question == question_id)
        )
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error("delete_question_answers", e, question_id=question_id) from e

    try:
        result = await db.execute(
            delete(Question).where(Question.id == question_id, Question.account_id == account_id)
        )
    except SQLAlchemyError as e:
        await db.rollback()
        raise persistence_error(
            "delete_question", e, question_id=question_id, account_id=account_id
        ) from e

    if result.rowcount == 0:
        await db.rollback()
        logger.warning(
            f"Delete matched no question: id={question_id}",
            extra={"question_id": question_id, "account_id": account_id},
        )
        raise PersistenceError(f"Question {question_id} was not deleted")

    logger.info(
        f"Deleted question: id={question_id}",
        extra={"question_id": question_id, "answers_deleted": answers_result.rowcount},
    )
