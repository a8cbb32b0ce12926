"""
Domain-specific exceptions for the Question & Answer API.

Every failure the data-access and authorization layer can produce is one of
the exceptions below. They are mapped to HTTP status codes and user-facing
messages by app.core.rejections.
"""

from typing import Any


class QAServiceError(Exception):
    """Base exception for all question/answer service errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ParseError(QAServiceError):
    """
    Raised when a request parameter cannot be parsed.

    Examples:
    - `limit=abc` in the query string
    - Negative offset

    HTTP Status: 416 Range Not Satisfiable
    """

    def __init__(self, raw: str, cause: Exception):
        self.raw = raw
        self.cause = cause
        super().__init__(f"Cannot parse parameter: {cause}", details={"raw": raw})


class MissingParametersError(QAServiceError):
    """
    Raised when a required query parameter is absent.

    HTTP Status: 416 Range Not Satisfiable
    """

    def __init__(self, message: str = "Missing parameter", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class UnauthorizedError(QAServiceError):
    """
    Raised when the principal may not perform the operation.

    Examples:
    - Missing bearer token
    - Updating or deleting a question owned by another account

    HTTP Status: 401 Unauthorized
    """

    def __init__(
        self,
        message: str = "No permission to change the underlying resource",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)


class WrongCredentialError(QAServiceError):
    """
    Raised when an e-mail/password combination does not verify.

    HTTP Status: 401 Unauthorized
    """

    def __init__(self, message: str = "Wrong E-Mail/Password combination"):
        super().__init__(message)


class CredentialDecodeError(QAServiceError):
    """
    Raised when a credential cannot be decoded.

    Examples:
    - Malformed, tampered or expired session token
    - Stored password hash in an unknown format

    HTTP Status: 401 Unauthorized
    """

    def __init__(self, cause: Exception | str):
        self.cause = cause
        super().__init__(f"Cannot decode credential: {cause}")


class PersistenceError(QAServiceError):
    """
    Raised when the backing store rejects or fails a statement.

    The underlying cause is kept for logging only and never returned to the
    caller.

    Examples:
    - Lost connection
    - Foreign key violation (answer for a missing question)
    - Update or delete matched no row

    HTTP Status: 422 Unprocessable Entity
    """

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        details = {"cause": repr(cause)} if cause is not None else {}
        super().__init__(message, details)


class UniqueConstraintViolation(PersistenceError):
    """
    Raised when an insert violates a uniqueness constraint.

    Only account creation distinguishes this from a generic persistence
    failure (duplicate e-mail).

    HTTP Status: 422 Unprocessable Entity
    """

    pass


class ExternalServiceError(QAServiceError):
    """
    Raised when an external service answers with a non-success status.

    HTTP Status: 500 Internal Server Error
    """

    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(
            f"External service returned {status}: {message}",
            details={"status": status, "message": message},
        )


class ExternalServiceUnavailable(QAServiceError):
    """
    Raised when an external service cannot be reached at all.

    HTTP Status: 500 Internal Server Error
    """

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"External service unavailable: {cause}", details={"cause": repr(cause)})


# HTTP Status Code Mapping
ERROR_STATUS_MAP = {
    ParseError: 416,
    MissingParametersError: 416,
    UnauthorizedError: 401,
    WrongCredentialError: 401,
    CredentialDecodeError: 401,
    UniqueConstraintViolation: 422,
    PersistenceError: 422,
    ExternalServiceError: 500,
    ExternalServiceUnavailable: 500,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
