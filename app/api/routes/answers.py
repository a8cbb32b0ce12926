"""FastAPI routes for Answer operations."""

import logging
from typing import Annotated

from fastapi import APIRouter, Path, Request

from app.api.pagination import extract_pagination, extract_question_id
from app.api.schemas.answer import AnswerCreate, AnswerResponse
from app.core.dependencies import AsyncDbSession, ContentFilterDep, CurrentSession
from app.core.ownership import ensure_answer_owner
from app.repos import answer_repo
from app.repos.common import commit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/answers", tags=["Answers"])


@router.get(
    "",
    response_model=list[AnswerResponse],
    summary="List answers",
    description="""
    Retrieve answers in creation order.

    **Query Parameters (optional):**
    - `question_id`: only answers of this question
    - `limit`, `offset`: pagination window (both or neither)
    """,
)
async def list_answers(request: Request, db: AsyncDbSession) -> list[AnswerResponse]:
    params = request.query_params
    question_id = extract_question_id(params)
    pagination = extract_pagination(params)

    if question_id is None:
        answers = await answer_repo.list_answers(db, pagination)
    else:
        answers = await answer_repo.list_question_answers(db, question_id, pagination)
    return [AnswerResponse.model_validate(a) for a in answers]


@router.post("", response_model=AnswerResponse, summary="Answer a question")
async def add_answer(
    payload: AnswerCreate,
    db: AsyncDbSession,
    session: CurrentSession,
    content_filter: ContentFilterDep,
) -> AnswerResponse:
    """Create an answer owned by the session's account."""
    content = await content_filter.check_content(payload.content)
    new_answer = AnswerCreate(content=content, question_id=payload.question_id)

    answer = await answer_repo.create_answer(db, new_answer, session.account_id)
    await commit(db, "create_answer", answer_id=answer.id)
    return AnswerResponse.model_validate(answer)


@router.delete("/{answer_id}", summary="Delete an answer")
async def delete_answer(
    answer_id: Annotated[int, Path(description="Answer identifier")],
    db: AsyncDbSession,
    session: CurrentSession,
) -> dict[str, str]:
    await ensure_answer_owner(db, answer_id, session.account_id)
    await answer_repo.delete_answer(db, answer_id, session.account_id)
    await commit(db, "delete_answer", answer_id=answer_id)
    return {"message": f"Answer {answer_id} deleted"}
