"""
Standardized error response catalog for API consistency.
All HTTP error responses follow the RFC 7807 Problem Details format.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Application error codes for client-side handling."""

    # 4xx Client Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EMPTY_SOURCE = "EMPTY_SOURCE"

    # 5xx Server Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    COLLABORATOR_READ_ERROR = "COLLABORATOR_READ_ERROR"
    COLLABORATOR_WRITE_ERROR = "COLLABORATOR_WRITE_ERROR"
    COLLABORATOR_TIMEOUT = "COLLABORATOR_TIMEOUT"


class ErrorDetail(BaseModel):
    """RFC 7807 Problem Details response."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"

_OPENAPI_ERROR_CONTENT = {
    PROBLEM_JSON_MEDIA_TYPE: {
        "schema": {"$ref": "#/components/schemas/ErrorDetail"},
    }
}

OPENAPI_ERROR_RESPONSES = {
    "422": {
        "description": "Validation error or empty source (RFC 7807 Problem Details)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    },
    "502": {
        "description": "Notion read/write failed (RFC 7807 Problem Details)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    },
    "504": {
        "description": "Notion call timed out (RFC 7807 Problem Details)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    },
    "default": {
        "description": "Error response (RFC 7807 Problem Details)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    },
}


class AppHTTPException(HTTPException):
    """Application-specific HTTP exception with error code."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.errors = errors


def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(422, ErrorCode.VALIDATION_ERROR, detail, errors)


def internal_error(detail: str = "An unexpected error occurred") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Handler for AppHTTPException."""
    error = ErrorDetail(
        type=f"https://company-cleaner.local/errors/{exc.code.value.lower()}",
        title=exc.code.value.replace("_", " ").title(),
        status=exc.status_code,
        detail=exc.detail,
        code=exc.code,
        instance=str(request.url),
        errors=exc.errors,
    )
    headers = getattr(exc, "headers", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=error.model_dump(mode="json", exclude_none=True),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )
