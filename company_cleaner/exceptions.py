"""
Name: Custom Exceptions and Error Handling

Responsibilities:
  - Define the run-failure taxonomy of the cleaning pipeline
  - Provide error response structure
  - Generate unique error IDs for tracking

Collaborators:
  - exception_handlers.py: maps these to RFC 7807 responses
  - infrastructure.services.notion_client: raises collaborator errors
  - application.use_cases.clean_page: raises EmptySourceError

Constraints:
  - Error responses must include: error_code, message, error_id
  - Soft fallbacks (unclassified lines, failed polishing) are NOT errors

Notes:
  - error_id is UUID for log correlation
  - Writes are not transactional: CollaboratorWriteError carries the id of a
    partially written document when one exists
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Structured error response for API."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class CleanerError(Exception):
    """Base exception for the page cleaner."""

    error_code: str = "CLEANER_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class ConfigurationError(CleanerError):
    """Missing credential/destination or invalid taxonomy. Fatal, never retried."""

    error_code: str = "CONFIGURATION_ERROR"


class CollaboratorReadError(CleanerError):
    """Listing source blocks failed (permission, rate limit, not found)."""

    error_code: str = "COLLABORATOR_READ_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.status_code = status_code


class CollaboratorWriteError(CleanerError):
    """
    Creating the page or appending a batch failed.

    document_id is set when the page already exists in the destination
    (partial document, no rollback).
    """

    error_code: str = "COLLABORATOR_WRITE_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        document_id: str | None = None,
        batches_written: int = 0,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.status_code = status_code
        self.document_id = document_id
        self.batches_written = batches_written


class CollaboratorTimeoutError(CleanerError):
    """
    A collaborator call exceeded the configured timeout.

    document_id and batches_written are set when an append timed out after
    the page was created.
    """

    error_code: str = "COLLABORATOR_TIMEOUT"

    def __init__(
        self,
        message: str,
        operation: str = "",
        document_id: str | None = None,
        batches_written: int = 0,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, error_id=error_id, original_error=original_error)
        self.operation = operation
        self.document_id = document_id
        self.batches_written = batches_written


class EmptySourceError(CleanerError):
    """Extraction produced no usable text. Bad input, not a system fault."""

    error_code: str = "EMPTY_SOURCE"


class PolishError(CleanerError):
    """
    The narrative polisher failed.

    Never fails a run: the use case falls back to the unpolished text.
    """

    error_code: str = "POLISH_ERROR"
