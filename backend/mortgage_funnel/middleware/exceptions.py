"""Custom exception handlers for consistent error responses.

Every error leaves the API in the same envelope:

    {"success": false, "message": "...", "errorCode": "...", "errors": [...]}

`errors` is only present for per-field validation failures. Unexpected
exceptions are logged with their traceback and answered with the generic
submission-failed message.
"""

import logging
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

SUBMISSION_FAILED_MESSAGE = (
    "We apologize for the inconvenience. Your application could not be processed "
    "at this time. Please try again later or contact us directly."
)


class FunnelError(Exception):
    """Base exception for mortgage funnel API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        errors: list | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.errors = errors
        super().__init__(self.message)


class SubmissionValidationError(FunnelError):
    """Landing submission failed field validation."""

    def __init__(self, errors: list[str]):
        super().__init__(
            message="Invalid application data",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VALIDATION_ERROR",
            errors=errors,
        )


class SubmissionLimitError(FunnelError):
    """Daily per-IP submission limit reached."""

    def __init__(self):
        super().__init__(
            message="Daily submission limit reached. Please try again tomorrow or contact us directly.",
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="SUBMISSION_LIMIT_REACHED",
        )


class InvalidRequestError(FunnelError):
    """Malformed admin request (bad status, empty note, bad bulk action)."""

    def __init__(self, message: str, error_code: str = "INVALID_REQUEST"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
        )


class ResourceNotFoundError(FunnelError):
    def __init__(self, resource: str = "Application", identifier: str | None = None):
        message = f"{resource} not found"
        if identifier:
            message = f"{message}: {identifier}"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
        )


class AuthenticationError(FunnelError):
    def __init__(self, message: str = "Invalid authentication token."):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="AUTHENTICATION_FAILED",
        )


class PermissionDeniedError(FunnelError):
    def __init__(self, message: str = "Access denied. Insufficient permissions."):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="PERMISSION_DENIED",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    errors: Union[dict, list, None] = None,
    headers: dict | None = None,
) -> JSONResponse:
    content = {"success": False, "message": message, "errorCode": error_code}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _request_context(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def funnel_exception_handler(request: Request, exc: FunnelError) -> JSONResponse:
    logger.warning(
        f"{exc.error_code}: {exc.message}",
        extra={**_request_context(request), "error_code": exc.error_code},
    )
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return create_error_response(
        exc.status_code, exc.message, exc.error_code, errors=exc.errors, headers=headers,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra=_request_context(request))
    return create_error_response(
        exc.status_code,
        str(exc.detail),
        f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Malformed request bodies and query parameters."""
    errors = [
        f"{' -> '.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.warning(
        f"Request validation failed on {request.url.path}",
        extra={**_request_context(request), "errors": errors},
    )
    return create_error_response(
        status.HTTP_400_BAD_REQUEST, "Invalid request data", "VALIDATION_ERROR", errors=errors,
    )


async def database_exception_handler(
    request: Request,
    exc: Union[IntegrityError, OperationalError],
) -> JSONResponse:
    """Integrity errors look like a failed submission; lost connections ask for a retry."""
    logger.error(
        f"Database error on {request.url.path}: {exc.__class__.__name__}: {exc}",
        extra=_request_context(request),
    )
    if isinstance(exc, OperationalError):
        return create_error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Database temporarily unavailable. Please try again.",
            "DATABASE_UNAVAILABLE",
        )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, SUBMISSION_FAILED_MESSAGE, "SLA_001",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {exc.__class__.__name__} on {request.url.path}: {exc}",
        extra=_request_context(request),
        exc_info=exc,
    )
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, SUBMISSION_FAILED_MESSAGE, "SLA_001",
    )


def register_exception_handlers(app) -> None:
    """Attach every handler above to the FastAPI app."""
    for exc_class, handler in (
        (FunnelError, funnel_exception_handler),
        (HTTPException, http_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (ValidationError, validation_exception_handler),
        (IntegrityError, database_exception_handler),
        (OperationalError, database_exception_handler),
        (Exception, general_exception_handler),
    ):
        app.add_exception_handler(exc_class, handler)
