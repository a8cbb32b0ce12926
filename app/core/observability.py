"""
Request correlation, JSON logging and Prometheus metrics.

Every log line written while a request is handled carries the request's
correlation id and, once the bearer token has been verified, the account id.
Both live in context variables set by ObservabilityMiddleware and the
authentication dependency.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from fastapi import Request, Response
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

_request_id_var: ContextVar[str] = ContextVar("request_id", default="")
_account_id_var: ContextVar[str] = ContextVar("account_id", default="")


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    return _request_id_var.get()


def set_correlation_id(request_id: str) -> None:
    """Bind a correlation id to the current request context."""
    _request_id_var.set(request_id)


def get_account_id() -> str:
    return _account_id_var.get()


def set_account_id(account_id: int | str) -> None:
    """Bind the authenticated account to the current request context."""
    _account_id_var.set(str(account_id))


# ============================================================================
# Logging
# ============================================================================

# Attributes every LogRecord has; anything else came in through `extra=`
_STANDARD_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Keys: timestamp, level, logger, message, request_id and account_id (when
    bound), exception (when exc_info is set), source location, and `extra`
    holding whatever the call site passed via `extra={...}`.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in (("request_id", get_request_id()), ("account_id", get_account_id())):
            if value:
                entry[key] = value

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {"type": exc_type.__name__, "message": str(exc_value)}

        entry["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        extra = {k: v for k, v in vars(record).items() if k not in _STANDARD_RECORD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def configure_structured_logging(level: str = "INFO") -> None:
    """Replace root handlers with a single JSON stream handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================================================
# Metrics
# ============================================================================

_registry = CollectorRegistry()

_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class Metrics:
    """Prometheus collectors for HTTP traffic and classified rejections."""

    def __init__(self, registry: CollectorRegistry) -> None:
        self.registry = registry
        self.http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests by method, route template and status",
            ["method", "route", "status_code"],
            registry=registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency",
            ["method", "route"],
            buckets=_LATENCY_BUCKETS,
            registry=registry,
        )
        self.rejections_total = Counter(
            "rejections_total",
            "Failed requests by classified error kind",
            ["kind", "status_code"],
            registry=registry,
        )

    def record_rejection(self, kind: str, status_code: int) -> None:
        self.rejections_total.labels(kind=kind, status_code=str(status_code)).inc()


metrics = Metrics(_registry)


def metrics_endpoint() -> Response:
    """Expose the registry in Prometheus text format."""
    return Response(
        content=generate_latest(_registry),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


# ============================================================================
# Middleware
# ============================================================================


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """
    Correlate, time and count every request.

    The correlation id is taken from the request header when present (and
    generated otherwise), bound to the logging context and echoed back on
    the response. Probe and scrape paths are counted but not access-logged.
    """

    def __init__(
        self,
        app: ASGIApp,
        metrics_instance: Metrics | None = None,
        skip_paths: list[str] | None = None,
        request_id_header: str = "X-Request-ID",
    ) -> None:
        super().__init__(app)
        self.metrics = metrics_instance or metrics
        self.skip_paths = tuple(skip_paths or ("/health", "/readyz", "/metrics"))
        self.request_id_header = request_id_header

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.request_id_header) or generate_request_id()
        set_correlation_id(request_id)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        # Route template rather than the raw path keeps label cardinality bounded
        route = getattr(request.scope.get("route"), "path", request.url.path)

        self.metrics.http_requests_total.labels(
            method=request.method, route=route, status_code=response.status_code
        ).inc()
        self.metrics.http_request_duration_seconds.labels(
            method=request.method, route=route
        ).observe(elapsed)

        response.headers[self.request_id_header] = request_id

        if not request.url.path.endswith(self.skip_paths):
            logging.getLogger("app.request").info(
                f"{request.method} {route} {response.status_code}",
                extra={
                    "route": route,
                    "status_code": response.status_code,
                    "latency_ms": round(elapsed * 1000, 2),
                },
            )

        return response


def extract_request_context(request: Request) -> dict[str, Any]:
    """Request identifiers for log records written outside the middleware."""
    return {
        "request_id": get_request_id(),
        "account_id": get_account_id() or "anonymous",
        "method": request.method,
        "path": request.url.path,
    }
