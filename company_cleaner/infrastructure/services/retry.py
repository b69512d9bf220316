"""
Name: Retry Helper with Exponential Backoff + Jitter

Responsibilities:
  - Classify transient vs permanent errors (HTTP codes, exceptions)
  - Provide tenacity-based retry decorator for Notion and Gemini calls
  - Apply exponential backoff with jitter, honoring Retry-After when present
  - Log and count retry attempts

Collaborators:
  - tenacity: Retry library with configurable strategies
  - config.Settings: Retry configuration (max_attempts, delays)
  - metrics.record_retry: collaborator_retries_total counter

Constraints:
  - Only retry transient errors (429, 5xx, timeouts, connection errors)
  - Never retry permanent errors (400, 401, 403, 404)
  - Non-idempotent writes retry only rate limits (is_rate_limited)
  - Retry-After is capped at max_delay

Notes:
  - Exponential backoff: delay = min(base * 2^attempt, max_delay) + jitter
  - Works for both sync and async callables (tenacity detects coroutines)
"""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from ...config import get_settings
from ...logger import logger
from ...metrics import record_retry

# R: HTTP status codes that indicate transient errors (retry-able)
TRANSIENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        409,  # Conflict (Notion: concurrent edit of the same block)
        429,  # Too Many Requests (rate limit)
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }
)

# R: HTTP status codes that indicate permanent errors (no retry)
PERMANENT_HTTP_CODES: frozenset[int] = frozenset(
    {
        400,  # Bad Request
        401,  # Unauthorized
        403,  # Forbidden
        404,  # Not Found
    }
)


def get_http_status_code(exception: BaseException) -> int | None:
    """
    R: Extract HTTP status code from various exception types.

    Supports httpx.HTTPStatusError and google.api_core exceptions.
    """
    # httpx.HTTPStatusError
    response = getattr(exception, "response", None)
    if response is not None and hasattr(response, "status_code"):
        return response.status_code

    # Google API Core exceptions (google.api_core.exceptions.*)
    code = getattr(exception, "code", None)
    if isinstance(code, int) and code >= 100:
        return code

    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code

    return None


def is_transient_error(exception: BaseException) -> bool:
    """
    R: Determine if an exception is transient (should retry).

    Returns:
        True if transient (retry), False if permanent (fail fast)
    """
    status_code = get_http_status_code(exception)
    if status_code is not None:
        if status_code in PERMANENT_HTTP_CODES:
            return False
        if status_code in TRANSIENT_HTTP_CODES:
            return True

    # R: Common transient exception types (connection errors, timeouts)
    exception_name = type(exception).__name__.lower()
    transient_patterns = (
        "timeout",
        "connect",
        "temporary",
        "unavailable",
        "resourceexhausted",
        "deadline",
        "remoteprotocol",
    )
    if any(pattern in exception_name for pattern in transient_patterns):
        return True

    message = str(exception).lower()
    transient_message_patterns = (
        "rate limit",
        "rate_limited",
        "too many requests",
        "quota exceeded",
        "temporarily unavailable",
        "connection reset",
        "timed out",
    )
    if any(pattern in message for pattern in transient_message_patterns):
        return True

    # R: Default: treat unknown errors as non-transient (fail fast)
    return False


def is_rate_limited(exception: BaseException) -> bool:
    """R: True only for 429 responses (the request was rejected unprocessed)."""
    return get_http_status_code(exception) == 429


def retry_after_seconds(exception: BaseException | None) -> float | None:
    """
    R: Parse the Retry-After header of a failed HTTP response.

    Accepts delta-seconds or an HTTP date. Returns None when absent/invalid.
    """
    response = getattr(exception, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    value = headers.get("Retry-After")
    if not value:
        return None

    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


class wait_retry_after:
    """
    R: tenacity wait strategy: server-provided Retry-After, else fallback.
    """

    def __init__(self, fallback: Callable[[RetryCallState], float], max_delay: float):
        self.fallback = fallback
        self.max_delay = max_delay

    def __call__(self, retry_state: RetryCallState) -> float:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_after_seconds(exc)
        if delay is None:
            return self.fallback(retry_state)
        return min(delay, self.max_delay)


def _log_retry(retry_state: RetryCallState, operation: str | None = None) -> None:
    """R: Log and count a retry before sleeping."""
    fn_name = operation or getattr(retry_state.fn, "__name__", "unknown")
    attempt = retry_state.attempt_number
    wait_time = retry_state.next_action.sleep if retry_state.next_action else 0
    exc = retry_state.outcome.exception() if retry_state.outcome else None

    record_retry(fn_name.lstrip("_"))
    logger.warning(
        f"Retry attempt {attempt} for {fn_name}",
        extra={
            "function": fn_name,
            "attempt": attempt,
            "wait_seconds": round(wait_time, 2),
            "error": str(exc) if exc else None,
            "error_type": type(exc).__name__ if exc else None,
        },
    )


def create_retry_decorator(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    operation: str | None = None,
    retry_on: Callable[[BaseException], bool] = is_transient_error,
) -> Callable:
    """
    R: Create a retry decorator with exponential backoff + jitter.

    Uses settings from config unless overridden.

    Args:
        max_attempts: Max attempts including the first call
        base_delay: Initial delay in seconds
        max_delay: Maximum delay cap in seconds (also caps Retry-After)
        operation: Label for retry logs and metrics (default: function name)
        retry_on: Predicate selecting retryable exceptions (default: transient)

    Returns:
        Configured tenacity retry decorator
    """
    settings = get_settings()

    _max_attempts = max_attempts or settings.retry_max_attempts
    _base_delay = base_delay if base_delay is not None else settings.retry_base_delay_seconds
    _max_delay = max_delay if max_delay is not None else settings.retry_max_delay_seconds

    backoff = wait_exponential_jitter(
        initial=_base_delay,
        max=_max_delay,
        jitter=_base_delay,  # R: Jitter up to base_delay seconds
    )
    return retry(
        stop=stop_after_attempt(_max_attempts),
        wait=wait_retry_after(backoff, _max_delay),
        retry=retry_if_exception(retry_on),
        before_sleep=lambda state: _log_retry(state, operation),
        reraise=True,  # R: Re-raise last exception after all retries exhausted
    )
