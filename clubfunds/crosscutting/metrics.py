"""
===============================================================================
FILE: crosscutting/metrics.py
===============================================================================

CRC CARD (Module)
-------------------------------------------------------------------------------
Name:
    Metrics (Prometheus)

Responsibilities:
    - Define Prometheus metrics in a dedicated registry.
    - Provide small, stable helpers to record events and durations.
    - Keep cardinality low (no user ids, no raw ids in paths).
    - Render the /metrics response.

Collaborators:
    - crosscutting.middleware: HTTP latency and counts.
    - application.usecases: state transitions and concurrency conflicts.
    - application.audit_trail: audit write failures.
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# ------------------------
# HTTP
# ------------------------
_requests_total = Counter(
    "clubfunds_requests_total",
    "Total HTTP requests",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "clubfunds_request_latency_seconds",
    "HTTP request latency (seconds)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=_registry,
)

# ------------------------
# Core operations
# ------------------------
_state_transitions_total = Counter(
    "clubfunds_state_transitions_total",
    "Committed state transitions by aggregate and action",
    ["aggregate", "action"],
    registry=_registry,
)

_operation_failures_total = Counter(
    "clubfunds_operation_failures_total",
    "Operations that returned an error result, by operation and error kind",
    ["operation", "kind"],
    registry=_registry,
)

_concurrency_conflicts_total = Counter(
    "clubfunds_concurrency_conflicts_total",
    "Optimistic-lock conflicts by aggregate",
    ["aggregate"],
    registry=_registry,
)

_audit_write_failures_total = Counter(
    "clubfunds_audit_write_failures_total",
    "Audit entries that could not be written (primary operation kept)",
    ["module"],
    registry=_registry,
)


# -----------------------------------------------------------------------------
# Public helpers
# -----------------------------------------------------------------------------


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """HTTP metrics; endpoint normalized and status bucketed."""
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized, method=method, status=_status_bucket(status_code)
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_state_transition(aggregate: str, action: str) -> None:
    _state_transitions_total.labels(aggregate=aggregate, action=action).inc()


def record_operation_failure(operation: str, kind: str) -> None:
    _operation_failures_total.labels(operation=operation, kind=kind).inc()


def record_concurrency_conflict(aggregate: str) -> None:
    _concurrency_conflicts_total.labels(aggregate=aggregate or "unknown").inc()


def record_audit_write_failure(module: str) -> None:
    _audit_write_failures_total.labels(module=module).inc()


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float | None:
    """Read a sample from the registry (used by tests and diagnostics)."""
    return _registry.get_sample_value(name, labels or {})


# -----------------------------------------------------------------------------
# Helpers (cardinality)
# -----------------------------------------------------------------------------


def _normalize_endpoint(path: str) -> str:
    """Replace UUIDs and numeric ids with `{id}`."""
    path = re.sub(
        r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        "{id}",
        path,
        flags=re.IGNORECASE,
    )
    path = re.sub(r"/\d+", "/{id}", path)
    return path


def _status_bucket(code: int) -> str:
    if 200 <= code < 300:
        return "2xx"
    if 400 <= code < 500:
        return "4xx"
    if 500 <= code < 600:
        return "5xx"
    return "other"


def get_metrics_response() -> tuple[bytes, str]:
    """Body and content type for /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST
