"""
Health Check Endpoints

Provides system health and readiness endpoints for:
- Load balancer health checks
- Kubernetes liveness and readiness checks
- Monitoring systems
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from manosetu import __version__
from manosetu.config import get_settings
from manosetu.infrastructure.database import get_db_manager

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Readiness check response with component health."""
    
    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Basic health check endpoint for load balancers",
)
async def health_check() -> HealthResponse:
    """Returns 200 if application is running."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=get_settings().env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",  
    description="Readiness check including database connectivity",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """
    Detailed readiness check.
    
    The session store is the only hard dependency; without it no
    booking can be checked or written. Returns 503 when not ready.
    """
    components = {"database": await get_db_manager().health_check()}
    ready = all(components.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    
    return ReadinessResponse(
        ready=ready,
        components=components,
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Kubernetes liveness endpoint",
)
async def liveness_check() -> HealthResponse:
    """Returns 200 if application process is alive."""
    return HealthResponse(
        status="alive",
        version=__version__,
        environment=get_settings().env,
    )
