"""
Tests for the bad-words content filter client.

The upstream API is replaced by httpx.MockTransport.
"""

import httpx
import pytest

from app.core.errors import ExternalServiceError, ExternalServiceUnavailable
from tests.factories import make_content_filter


class TestContentFilter:
    @pytest.mark.anyio
    async def test_returns_censored_content(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"censored_content": "what the ****"})

        content_filter = make_content_filter(handler)

        assert await content_filter.check_content("what the heck") == "what the ****"

        request = seen[0]
        assert request.method == "POST"
        assert request.headers["apikey"] == "test-api-key"
        assert request.url.params["censor_character"] == "*"
        assert request.content == b"what the heck"

    @pytest.mark.anyio
    async def test_disabled_without_api_key(self, disabled_content_filter):
        assert disabled_content_filter.enabled is False
        assert await disabled_content_filter.check_content("anything") == "anything"

    @pytest.mark.anyio
    async def test_non_success_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "Invalid authentication credentials"})

        content_filter = make_content_filter(handler)

        with pytest.raises(ExternalServiceError) as exc_info:
            await content_filter.check_content("text")

        assert exc_info.value.status == 401
        assert exc_info.value.details["message"] == "Invalid authentication credentials"

    @pytest.mark.anyio
    async def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(ExternalServiceError) as exc_info:
            await make_content_filter(handler).check_content("text")

        assert exc_info.value.status == 502
        assert exc_info.value.details["message"] == "Bad Gateway"

    @pytest.mark.anyio
    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        with pytest.raises(ExternalServiceUnavailable) as exc_info:
            await make_content_filter(handler).check_content("text")

        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.anyio
    async def test_unexpected_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"bad_words_total": 0})

        with pytest.raises(ExternalServiceError):
            await make_content_filter(handler).check_content("text")
