"""
Pytest configuration and shared fixtures.

Provides:
- In-memory SQLite database (async SQLAlchemy via aiosqlite) per test
- Async session fixture for repository tests
- FastAPI app + httpx.AsyncClient wired to the test database
- Registered and logged-in accounts a@x.com and b@x.com

Seed helpers live in tests/factories.py.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator

# Settings are read at import time; pin the test environment first
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.pop("CONTENT_FILTER_API_KEY", None)
os.environ.pop("CORS_ORIGINS", None)

import httpx  # noqa: E402 (import after env setup)
import pytest  # noqa: E402 (import after env setup)
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from app.core.db import create_db_engine, create_sessionmaker, create_tables  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.content_filter import ContentFilter  # noqa: E402
from tests.factories import make_content_filter, register_and_login  # noqa: E402


# =============================================================================
# AnyIO Backend Configuration
# =============================================================================
@pytest.fixture
def anyio_backend():
    return "asyncio"


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with all tables, one per test."""
    engine = create_db_engine("sqlite+aiosqlite://")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(async_engine)


@pytest.fixture
async def db(session_maker: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """
    Async session for repository tests.

    Seed data must be committed (the factories do) because repository
    failures roll back the session's open transaction.
    """
    async with session_maker() as session:
        yield session


# =============================================================================
# Application
# =============================================================================


@pytest.fixture
def disabled_content_filter() -> ContentFilter:
    """Content filter without an API key: text passes through untouched."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("disabled content filter must not call upstream")

    return make_content_filter(handler, api_key="")


@pytest.fixture
def app(async_engine: AsyncEngine, disabled_content_filter: ContentFilter):
    return create_app(engine=async_engine, content_filter=disabled_content_filter)


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def auth_a(client: httpx.AsyncClient) -> dict[str, str]:
    return await register_and_login(client, "a@x.com")


@pytest.fixture
async def auth_b(client: httpx.AsyncClient) -> dict[str, str]:
    return await register_and_login(client, "b@x.com")
