import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send

from app.api.routes.accounts import router as accounts_router
from app.api.routes.answers import router as answers_router
from app.api.routes.health import router as health_router
from app.api.routes.questions import router as questions_router
from app.core.config import settings
from app.core.db import create_db_engine, create_sessionmaker, create_tables
from app.core.errors import QAServiceError
from app.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)
from app.core.rejections import classify, log_rejection
from app.services.content_filter import ContentFilter, create_http_client

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def _reject(request: Request, exc: Exception) -> JSONResponse:
    """Classify an error, log its full cause and build the client response."""
    rejection = classify(exc)
    log_rejection(exc, rejection, extract_request_context(request))

    headers = getattr(exc, "headers", None) if isinstance(exc, StarletteHTTPException) else None
    return JSONResponse(
        status_code=rejection.status_code,
        content={"error": rejection.kind, "message": rejection.message},
        headers=headers,
    )


class RejectingCORSMiddleware(CORSMiddleware):
    """CORS middleware whose refused preflights go through the classifier as 403."""

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            request = Request(scope)
            if (
                request.method == "OPTIONS"
                and "origin" in request.headers
                and "access-control-request-method" in request.headers
            ):
                response = self.preflight_response(request_headers=request.headers)
                if response.status_code == 400:
                    detail = bytes(response.body).decode()
                    response = _reject(request, StarletteHTTPException(403, detail=detail))
                await response(scope, receive, send)
                return
        await super().__call__(scope, receive, send)


def create_app(
    engine: AsyncEngine | None = None,
    content_filter: ContentFilter | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - Structured logging with correlation IDs
    - Database engine, session factory and content filter (lifespan)
    - Observability middleware (metrics, request tracking) and CORS
    - Exception handlers routing every failure through the classifier
    - API routers and the Prometheus metrics endpoint

    Args:
        engine: Pre-built engine to use instead of one created from settings.
            The caller keeps ownership and disposes it.
        content_filter: Pre-built content filter to use instead of one
            created from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned_engine: AsyncEngine | None = None
        http_client = None

        if getattr(app.state, "engine", None) is None:
            owned_engine = create_db_engine()
            app.state.engine = owned_engine
            app.state.session_maker = create_sessionmaker(owned_engine)
            if settings.database_create_tables:
                await create_tables(owned_engine)

        if getattr(app.state, "content_filter", None) is None:
            http_client = create_http_client()
            app.state.content_filter = ContentFilter(http_client)

        logger.info(
            "Application started",
            extra={"app_env": settings.app_env, "content_filter": settings.content_filter_enabled},
        )
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()
                app.state.content_filter = None
            if owned_engine is not None:
                await owned_engine.dispose()
                app.state.engine = None
                app.state.session_maker = None
            logger.info("Application stopped")

    app = FastAPI(
        title="Q&A Service API",
        description="Questions and answers with account-owned resources",
        version="0.1.0",
        lifespan=lifespan,
    )

    if engine is not None:
        app.state.engine = engine
        app.state.session_maker = create_sessionmaker(engine)
    if content_filter is not None:
        app.state.content_filter = content_filter

    # ============================================================================
    # Observability Middleware (must be first for correlation tracking)
    # ============================================================================

    if settings.observability_enabled:
        app.add_middleware(
            ObservabilityMiddleware,
            request_id_header=settings.observability_request_id_header,
        )

    # ============================================================================
    # CORS Configuration
    # ============================================================================

    app.add_middleware(
        RejectingCORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _reject(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle routing errors (unknown path, wrong method) and raised HTTP errors."""
        return _reject(request, exc)

    @app.exception_handler(QAServiceError)
    async def qa_service_error_handler(request: Request, exc: QAServiceError) -> JSONResponse:
        """
        Handle domain-specific errors.

        Maps each domain exception to its status code and user-facing message;
        backend and upstream causes stay in the logs.
        """
        return _reject(request, exc)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected exceptions: generic 500, full cause logged."""
        return _reject(request, exc)

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(questions_router, prefix=API_PREFIX)
    app.include_router(answers_router, prefix=API_PREFIX)
    app.include_router(accounts_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus)
    # ============================================================================

    if settings.observability_enabled:

        async def metrics(request: Request):
            return metrics_endpoint()

        app.add_route("/metrics", metrics)

    return app


app = create_app()
