"""
FastAPI dependency injection utilities.

Provides reusable dependencies for database sessions, authentication and
the content filter. Shared resources (the engine's sessionmaker and the
content filter) are created once in the application lifespan, stored on
`app.state`, and reached here through the request.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_current_session
from app.domain.types import Session
from app.services.content_filter import ContentFilter

# ============================================================================
# Database Dependencies
# ============================================================================


async def get_async_db_session(request: Request) -> AsyncGenerator[AsyncSession]:
    """
    Async database session dependency for FastAPI endpoints.

    Mutating endpoints commit explicitly before building their response;
    anything left uncommitted is rolled back when the session closes.

    Usage:
        @router.get("/questions")
        async def list_questions(db: AsyncDbSession):
            ...

    Yields:
        Async SQLAlchemy database session
    """
    async with request.app.state.session_maker() as session:
        yield session


# Type alias for async database session dependency
AsyncDbSession = Annotated[AsyncSession, Depends(get_async_db_session)]


# ============================================================================
# Authentication Dependencies
# ============================================================================

# Type alias for the authenticated principal
CurrentSession = Annotated[Session, Depends(get_current_session)]


# ============================================================================
# External Collaborators
# ============================================================================


def get_content_filter(request: Request) -> ContentFilter:
    return request.app.state.content_filter


ContentFilterDep = Annotated[ContentFilter, Depends(get_content_filter)]
