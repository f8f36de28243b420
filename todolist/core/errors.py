"""
Error Handling
==============

Standardized error codes, exceptions and exception handlers.

Every handled error is rendered with the same envelope::

    {
        "timestamp": 1760000000000,
        "status": 404,
        "code": "TASK_001",
        "message": "Task not found",
        "errors": {"field": "message; message"}   # validation only
    }
"""

import logging
from typing import Any, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from todolist.utils.helpers import epoch_millis

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes."""

    # Authentication (AUTH_001 - AUTH_010)
    AUTH_INVALID_CREDENTIALS = "AUTH_001"
    AUTH_NOT_AUTHENTICATED = "AUTH_002"
    AUTH_EMAIL_EXISTS = "AUTH_004"

    # Users (USER_001 - USER_010)
    USER_NOT_FOUND = "USER_001"

    # Tasks (TASK_001 - TASK_010)
    TASK_NOT_FOUND = "TASK_001"

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    HTTP_ERROR = "HTTP_ERROR"


# =============================================================================
# Custom Exceptions
# =============================================================================

class AppException(HTTPException):
    """Base application exception with structured error response."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        errors: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = message
        self.errors = errors

        super().__init__(status_code=status_code, detail=message, headers=headers)


class AuthenticationError(AppException):
    """Missing, invalid or expired bearer token."""

    def __init__(
        self,
        message: str = "Not authenticated",
        code: str = ErrorCodes.AUTH_NOT_AUTHENTICATED,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=code,
            message=message,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsError(AppException):
    """Login with an unknown email or a wrong password."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code=ErrorCodes.AUTH_INVALID_CREDENTIALS,
            message=message,
        )


class NotFoundError(AppException):
    """Resource not found errors."""

    def __init__(
        self,
        code: str = ErrorCodes.NOT_FOUND,
        message: str = "Resource not found",
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            code=code,
            message=message,
        )


class TaskNotFoundError(NotFoundError):
    """
    Task is absent, soft-deleted or owned by someone else.

    The three cases share one message so callers cannot probe for
    other users' task ids.
    """

    def __init__(self, task_id: Any):
        self.task_id = task_id
        super().__init__(
            code=ErrorCodes.TASK_NOT_FOUND,
            message=f"Task not found with ID: {task_id}",
        )


class UserNotFoundError(NotFoundError):
    """No user with the given email."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(
            code=ErrorCodes.USER_NOT_FOUND,
            message=f"User not found with email: {email}",
        )


class ConflictError(AppException):
    """Resource conflict errors."""

    def __init__(
        self,
        code: str,
        message: str,
    ):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            code=code,
            message=message,
        )


class EmailAlreadyExistsError(ConflictError):
    """Registration with an email that is already taken."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(
            code=ErrorCodes.AUTH_EMAIL_EXISTS,
            message=f"Email '{email}' is already taken",
        )


class ValidationError(AppException):
    """Validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[dict[str, str]] = None,
    ):
        self.field = field
        if errors is None and field is not None:
            errors = {field: message}
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ErrorCodes.VALIDATION_ERROR,
            message=message,
            errors=errors,
        )


class InternalFaultError(AppException):
    """
    Illegal internal state, e.g. a valid token whose user is missing.

    The detailed reason is logged; clients only see a generic message.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=ErrorCodes.INTERNAL_ERROR,
            message="An unexpected internal error occurred",
        )

    def __str__(self) -> str:
        return self.reason


# =============================================================================
# Exception Handlers
# =============================================================================

def error_body(
    status_code: int,
    code: str,
    message: str,
    errors: Optional[dict[str, str]] = None,
) -> dict[str, Any]:
    """Build the uniform error envelope."""
    body: dict[str, Any] = {
        "timestamp": epoch_millis(),
        "status": status_code,
        "code": code,
        "message": message,
    }
    if errors:
        body["errors"] = errors
    return body


def _field_name(loc: tuple | list) -> str:
    """Drop the request part ("body", "query", ...) from an error location."""
    parts = [str(p) for p in loc]
    if len(parts) > 1 and parts[0] in ("body", "query", "path", "header", "cookie"):
        parts = parts[1:]
    return ".".join(parts) or "request"


def _error_message(error: dict[str, Any]) -> str:
    """Prefer the raw ValueError text over pydantic's 'Value error, ...' prefix."""
    ctx = error.get("ctx") or {}
    if error.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    return error.get("msg", "Validation failed")


def collect_field_errors(raw_errors: list[dict[str, Any]]) -> dict[str, str]:
    """Group pydantic errors by field, joining messages with '; '."""
    grouped: dict[str, list[str]] = {}
    for error in raw_errors:
        field = _field_name(error.get("loc", ()))
        grouped.setdefault(field, []).append(_error_message(error))
    return {field: "; ".join(messages) for field, messages in grouped.items()}


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handler for AppException."""
    if isinstance(exc, InternalFaultError):
        logger.error(
            "%s: Request URI: %s - Reason: %s",
            type(exc).__name__,
            request.url.path,
            exc.reason,
            exc_info=exc,
        )
    else:
        logger.warning(
            "%s: Request URI: %s - Message: %s",
            type(exc).__name__,
            request.url.path,
            exc.message,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.code, exc.message, exc.errors),
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException,
) -> JSONResponse:
    """Handler for standard HTTPException (e.g. 404 for unknown routes)."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, ErrorCodes.HTTP_ERROR, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for request and Pydantic validation errors."""
    errors = collect_field_errors(exc.errors()) if hasattr(exc, "errors") else {}

    logger.warning(
        "Validation error: Request URI: %s - Errors: %s",
        request.url.path,
        errors,
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(
            status.HTTP_400_BAD_REQUEST,
            ErrorCodes.VALIDATION_ERROR,
            "Validation failed",
            errors,
        ),
    )


async def global_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled error: Request URI: %s - %s: %s",
        request.url.path,
        type(exc).__name__,
        exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCodes.INTERNAL_ERROR,
            "An unexpected error occurred",
        ),
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with FastAPI app.

    Usage:
        from todolist.core.errors import setup_exception_handlers
        setup_exception_handlers(app)
    """
    from pydantic import ValidationError as PydanticValidationError
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException as StarletteHTTPException

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
