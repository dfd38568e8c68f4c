"""
Health check router.

Provides liveness and readiness probes.
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel

from ..container import ServiceContainer
from ..dependencies import get_container

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request):
    """Always returns 200 OK while the process is running."""
    app_settings = request.app.state.settings
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=app_settings.SERVICE_NAME,
        version=app_settings.SERVICE_VERSION,
    )


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness check")
async def readiness_check(
    response: Response, container: ServiceContainer = Depends(get_container)
):
    """Returns 503 when PostgreSQL cannot be reached."""
    checks = {"database": "healthy"}
    try:
        await container.client.fetchval("SELECT 1", timeout=1.0)
    except Exception as exc:
        logger.warning("Database readiness check failed", error=str(exc))
        checks["database"] = "unhealthy"

    ready = all(check == "healthy" for check in checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(
        ready=ready, checks=checks, timestamp=datetime.now(timezone.utc).isoformat()
    )
