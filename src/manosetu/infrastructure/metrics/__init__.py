"""Metrics infrastructure package."""

from manosetu.infrastructure.metrics.prometheus_metrics import (
    # Scheduling metrics
    SESSIONS_SCHEDULED_TOTAL,
    SCHEDULING_CONFLICTS_TOTAL,
    SESSION_DURATION_MINUTES,
    # Lifecycle metrics
    SESSION_TRANSITIONS_TOTAL,
    # Video metrics
    CREDENTIALS_ISSUED_TOTAL,
    # API metrics
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    RATE_LIMIT_EXCEEDED,
    # Helpers
    track_session_scheduled,
    track_scheduling_conflict,
    track_transition,
    track_credential,
    track_http_request,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "SESSIONS_SCHEDULED_TOTAL",
    "SCHEDULING_CONFLICTS_TOTAL",
    "SESSION_DURATION_MINUTES",
    "SESSION_TRANSITIONS_TOTAL",
    "CREDENTIALS_ISSUED_TOTAL",
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "RATE_LIMIT_EXCEEDED",
    "track_session_scheduled",
    "track_scheduling_conflict",
    "track_transition",
    "track_credential",
    "track_http_request",
    "update_system_info",
    "metrics_router",
]
