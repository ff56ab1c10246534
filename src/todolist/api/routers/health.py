"""Health and readiness endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...schemas.system import HealthStatus

router = APIRouter(tags=["system"])


@router.get(
    "/healthz",
    response_model=HealthStatus,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def read_health() -> HealthStatus:
    """Return a simple heartbeat payload for health checks."""
    return HealthStatus()
