"""
Error Handling
==============

Standardized error codes and exception handlers.

Every error leaves the API as ``{"success": false, "error": "<message>"}``.
"""

import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """Standardized error codes."""

    # Receipt (RECEIPT_001 - RECEIPT_010)
    RECEIPT_INVALID = "RECEIPT_001"

    # Store (STORE_001 - STORE_010)
    STORE_PROFILE_UPDATE_FAILED = "STORE_001"
    STORE_SUBSCRIPTION_UPDATE_FAILED = "STORE_002"
    STORE_SUBSCRIPTION_CREATE_FAILED = "STORE_003"

    # General
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


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
        field: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.field = field

        super().__init__(status_code=status_code, detail=message)


class ValidationError(AppException):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ErrorCodes.VALIDATION_ERROR,
            message=message,
            field=field,
        )


class InvalidReceiptError(AppException):
    """The receipt validator rejected the receipt."""

    def __init__(self, message: str = "Invalid receipt"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            code=ErrorCodes.RECEIPT_INVALID,
            message=message,
        )


class StoreError(AppException):
    """A database read or write failed."""

    def __init__(self, code: str, message: str):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            code=code,
            message=message,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
        },
    )


async def app_exception_handler(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    """Handler for AppException."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Handler for HTTPException, including routing 404/405."""
    return _error_response(exc.status_code, str(exc.detail))


def format_validation_message(errors: list) -> str:
    """Render the first pydantic error as ``"<field>: <message>"``."""
    if not errors:
        return "Validation error"

    first_error = errors[0]
    # Drop the "body" prefix FastAPI adds to request-body locations
    loc = [str(part) for part in first_error.get("loc", ()) if part != "body"]
    message = first_error.get("msg", "Validation error")
    # pydantic prefixes custom ValueError messages
    message = message.removeprefix("Value error, ")
    if loc:
        return f"{'.'.join(loc)}: {message}"
    return message


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for request/Pydantic validation errors."""
    errors = exc.errors() if hasattr(exc, "errors") else []
    message = format_validation_message(errors) if errors else str(exc)
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def global_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception(
        "Unhandled error on %s %s: %s", request.method, request.url.path, exc
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with FastAPI app.

    Usage:
        from app.core.errors import setup_exception_handlers
        setup_exception_handlers(app)
    """
    from pydantic import ValidationError as PydanticValidationError
    from fastapi.exceptions import RequestValidationError

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
