"""
Test data helpers shared by the test modules.

Async Helper Functions:
- acreate_account(): Create an Account and commit
- acreate_question(): Create a Question and commit
- acreate_answer(): Create an Answer and commit
- register_and_login(): Register through the API and return an auth header
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.answer import AnswerCreate
from app.api.schemas.question import QuestionCreate
from app.core.security import hash_password
from app.repos import account_repo, answer_repo, question_repo
from app.services.content_filter import ContentFilter

TEST_PASSWORD = "correct horse battery staple"


async def acreate_account(db: AsyncSession, email: str = "a@x.com") -> int:
    account = await account_repo.create_account(db, email, hash_password(TEST_PASSWORD))
    await db.commit()
    return account.id


async def acreate_question(
    db: AsyncSession,
    account_id: int,
    title: str = "How to paginate?",
    content: str = "Offset and limit in SQL",
    tags: list[str] | None = None,
) -> int:
    question = await question_repo.create_question(
        db, QuestionCreate(title=title, content=content, tags=tags), account_id
    )
    await db.commit()
    return question.id


async def acreate_answer(
    db: AsyncSession, account_id: int, question_id: int, content: str = "Use OFFSET/LIMIT"
) -> int:
    answer = await answer_repo.create_answer(
        db, AnswerCreate(content=content, question_id=question_id), account_id
    )
    await db.commit()
    return answer.id


def make_content_filter(
    handler: Callable[[httpx.Request], httpx.Response], api_key: str = "test-api-key"
) -> ContentFilter:
    """Content filter whose upstream is answered by `handler`."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ContentFilter(client, url="https://filter.test/bad_words", api_key=api_key)


async def register_and_login(client: httpx.AsyncClient, email: str) -> dict[str, str]:
    """Register an account through the API and return its Authorization header."""
    credentials = {"email": email, "password": TEST_PASSWORD}
    response = await client.post("/api/v1/registration", json=credentials)
    assert response.status_code == 200, response.text

    response = await client.post("/api/v1/login", json=credentials)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
