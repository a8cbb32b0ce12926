"""
Tests for error classification at the HTTP boundary.

Tests cover:
- Status code, message and severity for every domain error
- Framework errors (validation, unknown route, forbidden)
- Causes are logged but never part of the client message
"""

import logging

import pytest
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    CredentialDecodeError,
    ExternalServiceError,
    ExternalServiceUnavailable,
    MissingParametersError,
    ParseError,
    PersistenceError,
    UnauthorizedError,
    UniqueConstraintViolation,
    WrongCredentialError,
    get_status_code,
)
from app.core.rejections import Rejection, Severity, classify, log_rejection


def _db_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection closed"))


class TestClassifyDomainErrors:
    """Tests for classify() on QAServiceError subclasses."""

    @pytest.mark.anyio
    async def test_parse_error(self):
        rejection = classify(ParseError("abc", ValueError("invalid literal for int()")))

        assert rejection.status_code == 416
        assert rejection.severity is Severity.WARNING
        assert "Cannot parse parameter" in rejection.message
        assert rejection.kind == "ParseError"

    @pytest.mark.anyio
    async def test_missing_parameters(self):
        rejection = classify(MissingParametersError(details={"missing": "offset"}))

        assert rejection == Rejection(
            416, "Missing parameter", Severity.WARNING, "MissingParametersError"
        )

    @pytest.mark.anyio
    async def test_unauthorized(self):
        rejection = classify(UnauthorizedError(details={"resource": "question"}))

        assert rejection.status_code == 401
        assert rejection.message == "No permission to change the underlying resource"
        assert rejection.severity is Severity.ERROR

    @pytest.mark.anyio
    async def test_missing_token_uses_the_same_message(self):
        """The client sees the generic text, not the internal reason."""
        rejection = classify(UnauthorizedError("Missing bearer token"))

        assert rejection.status_code == 401
        assert rejection.message == "No permission to change the underlying resource"

    @pytest.mark.anyio
    async def test_wrong_credential(self):
        rejection = classify(WrongCredentialError())

        assert rejection.status_code == 401
        assert rejection.message == "Wrong E-Mail/Password combination"

    @pytest.mark.anyio
    async def test_credential_decode(self):
        rejection = classify(CredentialDecodeError("Signature verification failed"))

        assert rejection.status_code == 401
        assert rejection.message == "Unauthorized"

    @pytest.mark.anyio
    async def test_unique_violation_is_reported_as_existing_account(self):
        rejection = classify(UniqueConstraintViolation("duplicate", cause=_db_error()))

        assert rejection.status_code == 422
        assert rejection.message == "Account already exists"
        assert rejection.kind == "UniqueConstraintViolation"

    @pytest.mark.anyio
    async def test_persistence_error_hides_cause(self):
        cause = _db_error()
        rejection = classify(PersistenceError("Database operation failed", cause=cause))

        assert rejection.status_code == 422
        assert rejection.message == "Cannot update, invalid data"
        assert "connection closed" not in rejection.message

    @pytest.mark.anyio
    async def test_external_service_error(self):
        rejection = classify(ExternalServiceError(401, "Invalid authentication credentials"))

        assert rejection.status_code == 500
        assert rejection.message == "Internal Server Error"
        assert "credentials" not in rejection.message

    @pytest.mark.anyio
    async def test_external_service_unavailable(self):
        rejection = classify(ExternalServiceUnavailable(OSError("dns failure")))

        assert rejection.status_code == 500
        assert rejection.message == "Internal Server Error"
        assert rejection.severity is Severity.ERROR

    @pytest.mark.anyio
    async def test_classify_is_deterministic(self):
        error = ParseError("x", ValueError("bad"))

        assert classify(error) == classify(error)


class TestClassifyFrameworkErrors:
    """Tests for classify() on errors raised outside the domain layer."""

    @pytest.mark.anyio
    async def test_request_validation_error(self):
        error = RequestValidationError(
            [{"loc": ("body", "title"), "msg": "Field required", "type": "missing"}]
        )

        rejection = classify(error)

        assert rejection.status_code == 422
        assert rejection.severity is Severity.ERROR
        assert "body.title: Field required" in rejection.message

    @pytest.mark.anyio
    async def test_unknown_route(self):
        rejection = classify(StarletteHTTPException(status_code=404, detail="Not Found"))

        assert rejection == Rejection(404, "Route not found", Severity.WARNING, "RouteNotFound")

    @pytest.mark.anyio
    async def test_forbidden(self):
        rejection = classify(StarletteHTTPException(status_code=403, detail="Forbidden"))

        assert rejection.status_code == 403
        assert rejection.severity is Severity.ERROR

    @pytest.mark.anyio
    async def test_method_not_allowed(self):
        rejection = classify(StarletteHTTPException(status_code=405, detail="Method Not Allowed"))

        assert rejection.status_code == 405
        assert rejection.severity is Severity.WARNING

    @pytest.mark.anyio
    async def test_unexpected_exception(self):
        rejection = classify(RuntimeError("boom"))

        assert rejection.status_code == 500
        assert rejection.message == "Internal Server Error"
        assert rejection.kind == "InternalServerError"


class TestStatusCodeMapping:
    @pytest.mark.anyio
    async def test_every_domain_error_has_a_status(self):
        assert get_status_code(ParseError("x", ValueError("x"))) == 416
        assert get_status_code(MissingParametersError()) == 416
        assert get_status_code(UnauthorizedError()) == 401
        assert get_status_code(WrongCredentialError()) == 401
        assert get_status_code(CredentialDecodeError("x")) == 401
        assert get_status_code(UniqueConstraintViolation("x")) == 422
        assert get_status_code(PersistenceError("x")) == 422
        assert get_status_code(ExternalServiceError(503, "x")) == 500
        assert get_status_code(ExternalServiceUnavailable(OSError("x"))) == 500

    @pytest.mark.anyio
    async def test_unknown_error_defaults_to_500(self):
        assert get_status_code(KeyError("x")) == 500


class TestLogRejection:
    """Tests for log_rejection()."""

    @pytest.mark.anyio
    async def test_logs_cause_at_error_severity(self, caplog):
        error = PersistenceError("Database operation failed: list_questions", cause=_db_error())
        rejection = classify(error)

        with caplog.at_level(logging.WARNING, logger="app.core.rejections"):
            log_rejection(error, rejection, {"path": "/api/v1/questions"})

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert "list_questions" in record.getMessage()
        assert "connection closed" in record.details["cause"]
        assert record.path == "/api/v1/questions"
        assert record.exc_info is not None

    @pytest.mark.anyio
    async def test_logs_parse_error_as_warning(self, caplog):
        error = ParseError("abc", ValueError("invalid literal"))

        with caplog.at_level(logging.WARNING, logger="app.core.rejections"):
            log_rejection(error, classify(error))

        assert caplog.records[-1].levelno == logging.WARNING

    @pytest.mark.anyio
    async def test_counts_rejections(self):
        from app.core.observability import metrics

        error = WrongCredentialError()
        rejection = classify(error)
        counter = metrics.rejections_total.labels(kind=rejection.kind, status_code="401")
        before = counter._value.get()

        log_rejection(error, rejection)

        assert counter._value.get() == before + 1
