from pydantic import BaseModel, Field


class ServiceStatus(BaseModel):
    name: str = Field(..., description="Service name")
    status: str = Field(..., description="healthy or unhealthy")
    message: str | None = Field(None, description="Additional status information")
    response_time_ms: float | None = Field(None, description="Response time in milliseconds")


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Overall status: healthy, unhealthy, degraded")
    version: str
    environment: str
    services: dict[str, ServiceStatus]
    timestamp: str = Field(..., description="ISO 8601 timestamp")


class LivenessResponse(BaseModel):
    status: str = "ok"


class ReadinessResponse(BaseModel):
    status: str = Field(..., description="ready or not_ready")
    ready: bool
