"""
Health check endpoints.

Provides liveness and readiness probes for container orchestration.
"""

from fastapi import APIRouter, HTTPException, Request

from .config import settings
from .models import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Returns service health status and configuration info"
)
async def health(request: Request) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        HealthResponse with service status and configuration
    """
    renderer = request.app.state.renderer
    return HealthResponse(
        status="ok",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        store=renderer.store.name,
        font_family=renderer.fonts.family,
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    description="Simple check that the service is running"
)
async def liveness():
    """Returns 200 if the service is running."""
    return {"status": "alive"}


@router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Check that the service is ready to accept requests"
)
async def readiness(request: Request):
    """
    Kubernetes readiness probe.

    Checks that the assistant store is reachable.
    Returns 200 if ready, 503 if not ready.
    """
    checks = {"store": await request.app.state.renderer.store.health_check()}

    if not all(checks.values()):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "not_ready",
                "checks": checks
            }
        )

    return {
        "status": "ready",
        "checks": checks
    }
