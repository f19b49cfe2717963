"""
Prometheus Metrics

Production-grade metrics for ManoSetu session scheduling.
Exposes metrics at /metrics endpoint for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
"""

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from fastapi import APIRouter, Response

from manosetu import __version__

# =============================================================================
# SCHEDULING METRICS
# =============================================================================

SESSIONS_SCHEDULED_TOTAL = Counter(
    "manosetu_sessions_scheduled_total",
    "Total number of therapy sessions booked",
)

SCHEDULING_CONFLICTS_TOTAL = Counter(
    "manosetu_scheduling_conflicts_total",
    "Booking requests rejected because the therapist was busy",
    ["detected_by"],  # check, constraint
)

SESSION_DURATION_MINUTES = Histogram(
    "manosetu_session_duration_minutes",
    "Booked session length",
    buckets=[15, 30, 45, 60, 90, 120, 180],
)

# =============================================================================
# LIFECYCLE METRICS
# =============================================================================

SESSION_TRANSITIONS_TOTAL = Counter(
    "manosetu_session_transitions_total",
    "Session status transitions",
    ["from_status", "to_status"],
)

# =============================================================================
# VIDEO CREDENTIAL METRICS
# =============================================================================

CREDENTIALS_ISSUED_TOTAL = Counter(
    "manosetu_video_credentials_total",
    "Video room credentials requested",
    ["outcome"],  # issued, rejected, failed
)

# =============================================================================
# API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "manosetu_http_requests_total",
    "Total HTTP requests",
    ["method", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "manosetu_http_request_duration_seconds",
    "HTTP request duration",
    ["method"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

RATE_LIMIT_EXCEEDED = Counter(
    "manosetu_rate_limit_exceeded_total",
    "Rate limit exceeded events",
    ["client_type"],  # ip, user
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "manosetu_system",
    "ManoSetu system information",
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_session_scheduled(duration_minutes: int) -> None:
    """Record a successful booking."""
    SESSIONS_SCHEDULED_TOTAL.inc()
    SESSION_DURATION_MINUTES.observe(duration_minutes)


def track_scheduling_conflict(detected_by: str = "check") -> None:
    """Record a rejected booking."""
    SCHEDULING_CONFLICTS_TOTAL.labels(detected_by=detected_by).inc()


def track_transition(from_status: str, to_status: str) -> None:
    """Record a session status transition."""
    SESSION_TRANSITIONS_TOTAL.labels(from_status=from_status, to_status=to_status).inc()


def track_credential(outcome: str) -> None:
    """Record a video credential request outcome."""
    CREDENTIALS_ISSUED_TOTAL.labels(outcome=outcome).inc()


def track_http_request(method: str, status_code: int, duration_seconds: float) -> None:
    """Record request count and latency."""
    HTTP_REQUESTS_TOTAL.labels(method=method, status_code=str(status_code)).inc()
    HTTP_REQUEST_DURATION.labels(method=method).observe(duration_seconds)


def update_system_info(environment: str, version: str = __version__) -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.
    
    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )
