"""
Custom exceptions and error handlers for consistent error responses.

Every failure is rendered with the same envelope used by successful responses:

    {"success": false, "message": "...", "statusCode": 400}

In development mode the envelope also carries an ``error`` entry with details.
"""

import logging
import re
import traceback
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from backend.app.core.config import settings

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class BusinessRuleError(AppException):
    """Raised when a request is well-formed but violates a domain rule."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_VALIDATION_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class DuplicateFieldError(AppException):
    """Raised when a unique field already holds the submitted value."""

    def __init__(self, message: str, field: str):
        super().__init__(
            message=message,
            error_code="ERR_DUPLICATE_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"field": field}
        )


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Access denied. Insufficient permissions.", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        super().__init__(
            message=f"{resource} not found",
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed", error_code: str = "ERR_AUTH_001"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class TokenRevokedError(AuthenticationError):
    """Raised when token has been revoked."""

    def __init__(self):
        super().__init__(message="Token has been revoked", error_code="ERR_AUTH_002")


def error_envelope(message: str, status_code: int, error: Optional[Any] = None) -> Dict[str, Any]:
    """Build the failure envelope; ``error`` is only exposed in development."""
    content = {
        "success": False,
        "message": message,
        "statusCode": status_code,
    }
    if error is not None and settings.is_development:
        content["error"] = error
    return content


_UNIQUE_FIELD_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    re.compile(r"Key \((\w+)\)="),
)


def _duplicate_field(exc: IntegrityError) -> Optional[str]:
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in _UNIQUE_FIELD_PATTERNS:
        match = pattern.search(text)
        if match:
            head, *rest = match.group(1).split("_")
            return head + "".join(part.title() for part in rest)
    return None


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(
            exc.message,
            exc.status_code,
            {"code": exc.error_code, "details": exc.details} if exc.details else None
        )
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail), exc.status_code),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handler for Pydantic validation errors.

    A malformed path identifier is reported as a missing resource (404);
    anything else wrong with the request is a 400.
    """
    errors = exc.errors()
    if errors and all(error.get("loc", ("",))[0] == "path" for error in errors):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_envelope("Resource not found", status.HTTP_404_NOT_FOUND)
        )

    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(
            "; ".join(messages) or "Validation error",
            status.HTTP_400_BAD_REQUEST,
            {"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]}
        )
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Last-resort translation of unique constraint violations."""
    field = _duplicate_field(exc)
    message = f"Duplicate field value entered for {field}" if field else "Duplicate field value entered"
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(message, status.HTTP_400_BAD_REQUEST)
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope(
            "Server error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            {"message": str(exc), "stack": traceback.format_exc()}
        )
    )
