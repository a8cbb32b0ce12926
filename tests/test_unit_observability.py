"""
Unit tests for observability features.

Tests cover:
- Request correlation ID and account ID context variables
- Structured JSON log formatting
- Request tracking middleware and metrics endpoint
"""

import json
import logging
import re
import sys

import httpx
import pytest
from fastapi import FastAPI

from app.core.observability import (
    ObservabilityMiddleware,
    StructuredFormatter,
    generate_request_id,
    get_account_id,
    get_request_id,
    metrics_endpoint,
    set_account_id,
    set_correlation_id,
)


class TestContextVariables:
    @pytest.mark.anyio
    async def test_generate_request_id_returns_uuid_format(self):
        uuid_pattern = re.compile(
            r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
        )
        assert uuid_pattern.match(generate_request_id())

    @pytest.mark.anyio
    async def test_request_and_account_ids(self):
        set_correlation_id("request-1")
        set_account_id(5)

        assert get_request_id() == "request-1"
        assert get_account_id() == "5"


class TestStructuredFormatter:
    @pytest.mark.anyio
    async def test_json_output_with_context_and_extra(self):
        set_correlation_id("req-9")
        set_account_id(3)
        record = logging.LogRecord(
            name="app.repos.question_repo",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Created question: id=%s",
            args=(4,),
            exc_info=None,
        )
        record.question_id = 4

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "app.repos.question_repo"
        assert entry["message"] == "Created question: id=4"
        assert entry["request_id"] == "req-9"
        assert entry["account_id"] == "3"
        assert entry["extra"]["question_id"] == 4

    @pytest.mark.anyio
    async def test_exception_info(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            exc_info = sys.exc_info()
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, exc_info)

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["exception"] == {"type": "ValueError", "message": "bad value"}


class TestObservabilityMiddleware:
    @pytest.mark.anyio
    async def test_generates_request_id(self):
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware)

        @app.get("/ping")
        async def ping():
            return {"request_id": get_request_id()}

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ping")

        assert response.headers["X-Request-ID"]
        assert response.json()["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.anyio
    async def test_custom_header_name(self):
        app = FastAPI()
        app.add_middleware(ObservabilityMiddleware, request_id_header="X-Correlation-ID")

        @app.get("/ping")
        async def ping():
            return {}

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ping", headers={"X-Correlation-ID": "abc"})

        assert response.headers["X-Correlation-ID"] == "abc"

    @pytest.mark.anyio
    async def test_metrics_endpoint_format(self):
        response = metrics_endpoint()

        assert response.media_type.startswith("text/plain")
        assert b"rejections_total" in response.body
