"""
Classification of every error reaching the HTTP boundary.

`classify` is the single place that decides what a client sees for a
failure: status code, user-facing message and the severity it is logged at.
It is pure - the same error always yields the same Rejection.

Persistence and external-service failures get a generic message; their
cause is logged by `log_rejection` and never returned to the caller.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    CredentialDecodeError,
    ExternalServiceError,
    ExternalServiceUnavailable,
    MissingParametersError,
    ParseError,
    PersistenceError,
    QAServiceError,
    UnauthorizedError,
    UniqueConstraintViolation,
    WrongCredentialError,
    get_status_code,
)
from app.core.observability import metrics

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND_MSG = "Route not found"
INTERNAL_ERROR_MSG = "Internal Server Error"
INVALID_DATA_MSG = "Cannot update, invalid data"
ACCOUNT_EXISTS_MSG = "Account already exists"


class Severity(str, Enum):
    """Log level a rejection is reported at."""

    WARNING = "warning"
    ERROR = "error"

    @property
    def level(self) -> int:
        return logging.WARNING if self is Severity.WARNING else logging.ERROR


@dataclass(frozen=True)
class Rejection:
    """Externally visible outcome of a failed request."""

    status_code: int
    message: str
    severity: Severity
    kind: str


def _validation_summary(error: RequestValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg', 'invalid')}")
    return "Request body deserialize error: " + "; ".join(parts)


def _classify_domain_error(error: QAServiceError) -> Rejection:
    status_code = get_status_code(error)
    kind = type(error).__name__

    if isinstance(error, ParseError):
        return Rejection(status_code, error.message, Severity.WARNING, kind)
    if isinstance(error, MissingParametersError):
        return Rejection(status_code, "Missing parameter", Severity.WARNING, kind)
    if isinstance(error, UnauthorizedError):
        return Rejection(
            status_code, "No permission to change the underlying resource", Severity.ERROR, kind
        )
    if isinstance(error, WrongCredentialError):
        return Rejection(status_code, "Wrong E-Mail/Password combination", Severity.ERROR, kind)
    if isinstance(error, CredentialDecodeError):
        return Rejection(status_code, "Unauthorized", Severity.ERROR, kind)
    # Checked before PersistenceError, its base class
    if isinstance(error, UniqueConstraintViolation):
        return Rejection(status_code, ACCOUNT_EXISTS_MSG, Severity.ERROR, kind)
    if isinstance(error, PersistenceError):
        return Rejection(status_code, INVALID_DATA_MSG, Severity.ERROR, kind)
    if isinstance(error, (ExternalServiceError, ExternalServiceUnavailable)):
        return Rejection(status_code, INTERNAL_ERROR_MSG, Severity.ERROR, kind)

    return Rejection(500, INTERNAL_ERROR_MSG, Severity.ERROR, kind)


def classify(error: BaseException) -> Rejection:
    """
    Map any error surfaced by a request handler to a Rejection.

    Args:
        error: Domain error, FastAPI/Starlette framework error, or anything else

    Returns:
        Rejection with status code, user message, log severity and kind
    """
    if isinstance(error, QAServiceError):
        return _classify_domain_error(error)

    if isinstance(error, RequestValidationError):
        return Rejection(422, _validation_summary(error), Severity.ERROR, "RequestValidationError")

    if isinstance(error, StarletteHTTPException):
        if error.status_code == 404:
            return Rejection(404, ROUTE_NOT_FOUND_MSG, Severity.WARNING, "RouteNotFound")
        if error.status_code == 403:
            return Rejection(403, str(error.detail), Severity.ERROR, "Forbidden")
        return Rejection(error.status_code, str(error.detail), Severity.WARNING, "HTTPException")

    return Rejection(500, INTERNAL_ERROR_MSG, Severity.ERROR, "InternalServerError")


def log_rejection(
    error: BaseException, rejection: Rejection, context: dict[str, Any] | None = None
) -> None:
    """
    Log a classified error with its full internal detail.

    The log record carries the error's own message, details and cause, which
    may include backend or upstream information the client never sees.
    """
    extra: dict[str, Any] = {
        "kind": rejection.kind,
        "status_code": rejection.status_code,
        **(context or {}),
    }
    if isinstance(error, QAServiceError):
        extra["details"] = error.details
        description = error.message
    else:
        description = str(error)

    cause = getattr(error, "cause", None)
    logger.log(
        rejection.severity.level,
        f"{rejection.kind}: {description}",
        extra=extra,
        exc_info=cause if isinstance(cause, BaseException) else None,
    )
    metrics.record_rejection(rejection.kind, rejection.status_code)
