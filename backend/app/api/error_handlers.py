"""Error Handlers — global exception handlers for the Throwback API.

Invariants:
    - NotAuthenticatedError -> 302 redirect to the login page
    - AccessDeniedError -> 403 plain text denial message
    - UploadError -> 400 {"success": false, "message"} (message passed through)
    - ThrowbackError -> structured JSON with its own http_status
    - Starlette HTTPException (malformed body, unknown route) -> envelope, own status
    - RequestValidationError -> field-level error details
    - Exception (catch-all) -> never leaks internal details

Design Decisions:
    - Starlette picks the most specific registered class along the MRO, so the
      subclass handlers win over the ThrowbackError handler
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    AccessDeniedError,
    ErrorSeverity,
    NotAuthenticatedError,
    ThrowbackError,
    UploadError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_access_handlers(app)
    _register_upload_error_handler(app)
    _register_throwback_error_handler(app)
    _register_http_exception_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_access_handlers(app: FastAPI) -> None:

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated_handler(
        request: Request, exc: NotAuthenticatedError,
    ):
        return RedirectResponse(
            exc.login_url, status_code=status.HTTP_302_FOUND,
        )

    @app.exception_handler(AccessDeniedError)
    async def access_denied_handler(request: Request, exc: AccessDeniedError):
        return PlainTextResponse(
            exc.message, status_code=status.HTTP_403_FORBIDDEN,
        )


def _register_upload_error_handler(app: FastAPI) -> None:

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        logger.warning(
            f"Upload error: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "message": exc.message},
        )


def _register_throwback_error_handler(app: FastAPI) -> None:
    """Register Throwback domain/infrastructure error handler."""

    @app.exception_handler(ThrowbackError)
    async def throwback_error_handler(request: Request, exc: ThrowbackError):
        """Handle all Throwback domain/infrastructure errors."""
        logger.error(
            f"ThrowbackError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_http_exception_handler(app: FastAPI) -> None:
    """Framework-raised HTTP errors, e.g. a multipart body Starlette cannot parse."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException,
    ):
        logger.warning(
            f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}",
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "An unexpected error occurred",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "success": False,
        "message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
