"""Global error hierarchy and FastAPI exception handlers.

All iconfetch-specific errors extend IconFetchError. Inside the resolution
pipeline these errors are absorbed stage by stage; only setup errors such as
CacheDirectoryError escape the core. The FastAPI exception handlers catch
whatever reaches the HTTP layer (plus Pydantic's RequestValidationError and
unhandled exceptions) and return a consistent JSON envelope:
{ success, data, error, meta }.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class IconFetchError(Exception):
    """Base error for all iconfetch-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class InvalidRequestError(IconFetchError):
    """Malformed or incomplete request from the caller."""

    status_code = 400
    message = "URL parameter is required"


class FetchError(IconFetchError):
    """All fetch attempts for a URL failed.

    ``details`` carries ``url``, ``attempts`` and ``last_error``.
    """

    status_code = 502
    message = "Failed to fetch URL"

    @property
    def last_error(self) -> object:
        return self.details.get("last_error")


class EmptyResponseError(IconFetchError):
    """Upstream answered 2xx with an empty body."""

    status_code = 502
    message = "Empty response body"


class ConversionError(IconFetchError):
    """An image backend could not decode or re-encode the input."""

    status_code = 422
    message = "Image conversion failed"


class CacheDirectoryError(IconFetchError):
    """The cache directory does not exist and cannot be created."""

    status_code = 500
    message = "Cache directory is not usable"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _iconfetch_error_handler(_request: Request, exc: IconFetchError) -> JSONResponse:
    """Handle IconFetchError subclasses."""
    meta = {key: str(value) for key, value in exc.details.items()} if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log traceback, return generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


# ---------------------------------------------------------------------------
# Registration helper
# ---------------------------------------------------------------------------


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(IconFetchError, _iconfetch_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
