"""
Name: FastAPI Exception Handlers

Responsibilities:
  - Convert pipeline exceptions to HTTP responses
  - Structured error responses (RFC 7807 style)
  - Centralized logging of errors with correlation IDs
  - Unexpected exceptions become a generic 500 problem response

Collaborators:
  - main.py: Registers these handlers
  - exceptions.py: CleanerError and subclasses

Constraints:
  - All responses use RFC 7807 Problem Details format
  - Empty source is a client error (422); collaborator failures are 502/504

Notes:
  - A write failure after the page was created reports the partial
    document id in "errors"
"""

from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    internal_error,
    validation_error,
)
from .exceptions import (
    CleanerError,
    CollaboratorReadError,
    CollaboratorTimeoutError,
    CollaboratorWriteError,
    ConfigurationError,
    EmptySourceError,
)
from .logger import logger

# R: Most specific first; the first isinstance match wins
_STATUS_MAP: tuple[tuple[type, int, ErrorCode], ...] = (
    (EmptySourceError, 422, ErrorCode.EMPTY_SOURCE),
    (CollaboratorTimeoutError, 504, ErrorCode.COLLABORATOR_TIMEOUT),
    (CollaboratorReadError, 502, ErrorCode.COLLABORATOR_READ_ERROR),
    (CollaboratorWriteError, 502, ErrorCode.COLLABORATOR_WRITE_ERROR),
    (ConfigurationError, 500, ErrorCode.CONFIGURATION_ERROR),
)


def _error_details(exc: CleanerError) -> dict[str, Any]:
    details: dict[str, Any] = {"error_id": exc.error_id}
    if isinstance(exc, CollaboratorTimeoutError) and exc.operation:
        details["operation"] = exc.operation
    if isinstance(exc, (CollaboratorWriteError, CollaboratorTimeoutError)) and exc.document_id:
        details["document_id"] = exc.document_id
        details["batches_written"] = exc.batches_written
    elif isinstance(exc, CollaboratorWriteError):
        details["batches_written"] = exc.batches_written
    return details


async def cleaner_error_handler(request: Request, exc: CleanerError) -> JSONResponse:
    """Handle every CleanerError subclass with its mapped status."""
    status_code, code = 500, ErrorCode.INTERNAL_ERROR
    for exc_type, mapped_status, mapped_code in _STATUS_MAP:
        if isinstance(exc, exc_type):
            status_code, code = mapped_status, mapped_code
            break

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Cleaning run failed",
        extra={
            "error_id": exc.error_id,
            "error_code": exc.error_code,
            "error_message": exc.message,
        },
    )
    app_exc = AppHTTPException(
        status_code=status_code,
        code=code,
        detail=exc.message,
        errors=[_error_details(exc)],
    )
    return await app_exception_handler(request, app_exc)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle body validation errors (e.g. missing sourceId)."""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return await app_exception_handler(
        request, validation_error("Invalid request body", errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors: generic 500, details stay in the logs."""
    logger.error(
        "Unhandled error",
        extra={"error_type": type(exc).__name__, "path": request.url.path},
    )
    return await app_exception_handler(request, internal_error())


def register_exception_handlers(app) -> None:
    """
    Register all exception handlers on the FastAPI app.

    Usage:
        from .exception_handlers import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(CleanerError, cleaner_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
