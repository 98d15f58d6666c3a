"""Health check endpoints. Used for liveness and readiness probes."""

from fastapi import APIRouter

from quickorder.api.v1.dependencies import ManagerDep, RegistryDep
from quickorder.core.config import get_settings
from quickorder.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse(backend=get_settings().database_backend)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(registry: RegistryDep, manager: ManagerDep) -> ReadinessResponse:
    """Return 200 once the session registry is wired (i.e. startup finished)."""
    return ReadinessResponse(
        sessions=len(registry),
        websocket_connections=await manager.get_connection_count(),
    )
