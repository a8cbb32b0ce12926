"""
FastAPI routes for Question operations.

Reads are public. Creating requires a session; updating and deleting
additionally require the session's account to own the question.
"""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Path, Request

from app.api.pagination import extract_pagination
from app.api.schemas.answer import AnswerResponse
from app.api.schemas.question import QuestionCreate, QuestionResponse, QuestionUpdate
from app.core.dependencies import AsyncDbSession, ContentFilterDep, CurrentSession
from app.core.ownership import ensure_question_owner
from app.repos import answer_repo, question_repo
from app.repos.common import commit
from app.services.content_filter import ContentFilter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["Questions"])

QuestionIdPath = Annotated[int, Path(description="Question identifier")]


async def _filter_question_text(
    content_filter: ContentFilter, title: str, content: str
) -> tuple[str, str]:
    """Run title and content through the content filter concurrently."""
    filtered_title, filtered_content = await asyncio.gather(
        content_filter.check_content(title),
        content_filter.check_content(content),
    )
    return filtered_title, filtered_content


@router.get(
    "",
    response_model=list[QuestionResponse],
    summary="List questions",
    description="""
    Retrieve questions in creation order.

    **Query Parameters (optional, both or neither):**
    - `limit`: maximum number of questions to return
    - `offset`: number of questions to skip

    **Errors:**
    - 416: Unparseable or incomplete pagination parameters
    """,
)
async def list_questions(request: Request, db: AsyncDbSession) -> list[QuestionResponse]:
    """List questions."""
    pagination = extract_pagination(request.query_params)
    questions = await question_repo.list_questions(db, pagination)
    return [QuestionResponse.model_validate(q) for q in questions]


@router.post(
    "",
    response_model=QuestionResponse,
    summary="Ask a question",
)
async def add_question(
    payload: QuestionCreate,
    db: AsyncDbSession,
    session: CurrentSession,
    content_filter: ContentFilterDep,
) -> QuestionResponse:
    """Create a question owned by the session's account."""
    title, content = await _filter_question_text(content_filter, payload.title, payload.content)
    new_question = QuestionCreate(title=title, content=content, tags=payload.tags)

    question = await question_repo.create_question(db, new_question, session.account_id)
    await commit(db, "create_question", question_id=question.id)

    logger.info(
        f"Account {session.account_id} created question {question.id}",
        extra={"question_id": question.id},
    )
    return QuestionResponse.model_validate(question)


@router.put(
    "/{question_id}",
    response_model=QuestionResponse,
    summary="Update a question",
    description="""
    Replace title, content and tags of a question.

    **Errors:**
    - 401: The question does not exist or belongs to another account
    """,
)
async def update_question(
    question_id: QuestionIdPath,
    payload: QuestionUpdate,
    db: AsyncDbSession,
    session: CurrentSession,
    content_filter: ContentFilterDep,
) -> QuestionResponse:
    """Update a question owned by the session's account."""
    await ensure_question_owner(db, question_id, session.account_id)

    title, content = await _filter_question_text(content_filter, payload.title, payload.content)
    question_update = QuestionUpdate(title=title, content=content, tags=payload.tags)

    question = await question_repo.update_question(
        db, question_update, question_id, session.account_id
    )
    await commit(db, "update_question", question_id=question_id)
    return QuestionResponse.model_validate(question)


@router.delete(
    "/{question_id}",
    summary="Delete a question and its answers",
)
async def delete_question(
    question_id: QuestionIdPath,
    db: AsyncDbSession,
    session: CurrentSession,
) -> dict[str, str]:
    """Delete a question owned by the session's account, with all its answers."""
    await ensure_question_owner(db, question_id, session.account_id)
    await question_repo.delete_question(db, question_id, session.account_id)
    await commit(db, "delete_question", question_id=question_id)
    return {"message": f"Question {question_id} deleted"}


@router.get(
    "/{question_id}/answers",
    response_model=list[AnswerResponse],
    summary="List the answers of a question",
    description="""
    Retrieve the answers of one question in creation order.

    An unknown question id yields an empty list.
    """,
)
async def list_question_answers(
    question_id: QuestionIdPath,
    request: Request,
    db: AsyncDbSession,
) -> list[AnswerResponse]:
    pagination = extract_pagination(request.query_params)
    answers = await answer_repo.list_question_answers(db, question_id, pagination)
    return [AnswerResponse.model_validate(a) for a in answers]
