"""
Name: Prometheus Metrics

Responsibilities:
  - Define and expose Prometheus metrics
  - Provide /metrics endpoint payload
  - Record request latency/count, run outcomes, stage timings and retries

Collaborators:
  - middleware.py: records request metrics
  - application/use_cases/clean_page.py: records stage timings and outcomes
  - infrastructure/services/retry.py: records collaborator retries

Constraints:
  - Low cardinality labels only (endpoint, method, status, stage, outcome)
  - Never label with source or document ids

Notes:
  - Metrics live in a dedicated registry (not the process default)
  - Histogram buckets chosen for collaborator round trips
"""

import re
from contextlib import contextmanager
from time import perf_counter
from typing import Iterator

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

registry = CollectorRegistry()

# R: Request counter with endpoint and status labels
_requests_total = Counter(
    "cleaner_requests_total",
    "Total HTTP requests",
    ["endpoint", "method", "status"],
    registry=registry,
)

_request_latency = Histogram(
    "cleaner_request_latency_seconds",
    "HTTP request latency in seconds",
    ["endpoint", "method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    registry=registry,
)

_runs_total = Counter(
    "cleaner_runs_total",
    "Cleaning runs by outcome",
    ["outcome"],
    registry=registry,
)

_stage_latency = Histogram(
    "cleaner_stage_latency_seconds",
    "Pipeline stage latency in seconds",
    ["stage"],
    buckets=(0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    registry=registry,
)

_collaborator_retries = Counter(
    "cleaner_collaborator_retries_total",
    "Retried collaborator calls",
    ["operation"],
    registry=registry,
)


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """
    R: Record HTTP request metrics.

    Args:
        endpoint: Request path (e.g., "/v1/clean")
        method: HTTP method (e.g., "POST")
        status_code: Response status code
        latency_seconds: Request duration in seconds
    """
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized,
        method=method,
        status=_status_bucket(status_code),
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_run(outcome: str) -> None:
    """R: Count one finished run (created, reused, dry_run or an error code)."""
    _runs_total.labels(outcome=outcome).inc()


def record_stage(stage: str, seconds: float) -> None:
    _stage_latency.labels(stage=stage).observe(seconds)


def record_retry(operation: str) -> None:
    _collaborator_retries.labels(operation=operation).inc()


@contextmanager
def stage_timer(stage: str) -> Iterator[None]:
    """R: Time a pipeline stage, recording even when it raises."""
    start = perf_counter()
    try:
        yield
    finally:
        record_stage(stage, perf_counter() - start)


def _normalize_endpoint(path: str) -> str:
    """R: Replace UUIDs and numeric ids with placeholders."""
    path = re.sub(
        r"[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}",
        "{id}",
        path,
        flags=re.IGNORECASE,
    )
    return re.sub(r"/\d+", "/{id}", path)


def _status_bucket(code: int) -> str:
    """R: Bucket status code (2xx, 4xx, 5xx)."""
    if 200 <= code < 300:
        return "2xx"
    elif 400 <= code < 500:
        return "4xx"
    elif 500 <= code < 600:
        return "5xx"
    return "other"


def get_metrics_response() -> tuple[bytes, str]:
    """R: Prometheus exposition payload and its content type."""
    return generate_latest(registry), CONTENT_TYPE_LATEST
