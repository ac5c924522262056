"""API middleware: request logging and error handling, plus CORS setup.

Starlette runs middleware as a stack (last added, first executed).  In
``main.py`` RequestLoggingMiddleware is added after ErrorHandlingMiddleware,
so it wraps it and logs the final status code even when a domain error
was turned into a JSON response.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    DuplicateProviderError,
    ModelResolverError,
    NoModelsAvailableError,
    ProviderNotFoundError,
    ProviderStoreError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

_STATUS_BY_ERROR: dict[type[ModelResolverError], int] = {
    ProviderNotFoundError: 404,
    NoModelsAvailableError: 404,
    DuplicateProviderError: 409,
    ProviderStoreError: 503,
}

# Store failures may carry driver messages with file paths; never echo them.
_STORE_FAILURE_DETAIL = "The provider store is temporarily unavailable. Please retry."


def status_for(exc: ModelResolverError) -> int:
    """Return the HTTP status code for a domain error (500 if unmapped)."""
    for error_type, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; override with specific origins in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``ModelResolverError`` subclasses and return structured JSON errors.

    Full details are logged server-side; the client gets the exception
    class name and a sanitized message.  Other exceptions fall through to
    FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except ModelResolverError as exc:
            status_code = status_for(exc)
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            detail = _STORE_FAILURE_DETAIL if isinstance(exc, ProviderStoreError) else exc.message
            body = ErrorResponse(error=type(exc).__name__, detail=detail)
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
