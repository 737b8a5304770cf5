"""Health check router for the schemacheck API."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException

from ..dependencies import SettingsDep, UsageOracleDep
from .service import HealthService

router = APIRouter()


def get_health_service(oracle: UsageOracleDep, settings: SettingsDep) -> HealthService:
    """FastAPI dependency to get the health service."""
    return HealthService(oracle, settings)


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]


@router.get("/health")
async def health_check(health_service: HealthServiceDep) -> dict[str, Any]:
    """Health check endpoint for monitoring and container health checks."""
    try:
        return await health_service.get_health()
    except Exception as e:
        return {"status": "error", "error": str(e)}


@router.get("/status")
async def detailed_status(health_service: HealthServiceDep) -> dict[str, Any]:
    """Detailed status endpoint for debugging and development."""
    try:
        return await health_service.get_detailed_status()
    except Exception as e:
        raise HTTPException(
            status_code=500, detail=f"Failed to retrieve detailed status: {e!r}"
        ) from e
