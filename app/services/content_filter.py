"""
Client for the external bad-words filtering API.

Question titles/contents and answer contents pass through `check_content`
before they are persisted when a CONTENT_FILTER_API_KEY is configured. The
service returns the text with offending words replaced by `*`.

Failures are reported unchanged to the rejection classifier:
- non-2xx response -> ExternalServiceError(status, message)
- transport failure (DNS, connect, timeout) -> ExternalServiceUnavailable
"""

import logging

import httpx

from app.core.config import settings
from app.core.errors import ExternalServiceError, ExternalServiceUnavailable

logger = logging.getLogger(__name__)

CENSOR_CHARACTER = "*"


class ContentFilter:
    """
    Thin async client for the bad-words API.

    The httpx client is created once at startup (see app.main) and shared by
    all requests.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str | None = None,
        api_key: str | None = None,
    ):
        self._client = client
        self._url = url or settings.content_filter_url
        self._api_key = api_key if api_key is not None else settings.content_filter_api_key

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def check_content(self, text: str) -> str:
        """
        Return the censored version of `text`.

        Returns the text unchanged when no API key is configured.

        Raises:
            ExternalServiceError: If the API answers with a non-success status
            ExternalServiceUnavailable: If the API cannot be reached
        """
        if not self.enabled:
            return text

        try:
            response = await self._client.post(
                self._url,
                params={"censor_character": CENSOR_CHARACTER},
                headers={"apikey": self._api_key or ""},
                content=text.encode("utf-8"),
            )
        except httpx.HTTPError as e:
            logger.error(f"Content filter unreachable: {e!r}", extra={"url": self._url})
            raise ExternalServiceUnavailable(e) from e

        if not response.is_success:
            message = _error_message(response)
            logger.error(
                f"Content filter returned {response.status_code}",
                extra={"status": response.status_code, "upstream_message": message},
            )
            raise ExternalServiceError(response.status_code, message)

        try:
            return response.json()["censored_content"]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Content filter returned an unexpected body: {e!r}")
            raise ExternalServiceError(response.status_code, "unexpected response body") from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.text


def create_http_client() -> httpx.AsyncClient:
    """Create the shared HTTP client used for outbound calls."""
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.content_filter_timeout_seconds))
