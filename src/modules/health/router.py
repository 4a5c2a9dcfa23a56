from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.modules.health.schemas import HealthCheckResponse, LivenessResponse, ReadinessResponse
from src.modules.health.service import HealthCheckService

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get(
    "/",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Complete Health Check",
    description="Check the database and, when it backs rate limiting, Redis.",
)
async def health_check():
    return await HealthCheckService().get_health_status()


@router.get("/live", response_model=LivenessResponse, summary="Liveness Probe")
async def liveness():
    """Returns 200 while the process is up. Does not touch dependencies."""
    return LivenessResponse(status="ok")


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness Probe")
async def readiness():
    """200 when the stores answer, 503 otherwise."""
    if await HealthCheckService().is_ready():
        return ReadinessResponse(status="ready", ready=True)

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=ReadinessResponse(status="not_ready", ready=False).model_dump(),
    )
