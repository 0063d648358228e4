"""Health check contracts."""

from typing import Literal

from pydantic import BaseModel


class ServiceHealth(BaseModel):
    status: Literal["healthy", "unhealthy"]
    latency_ms: int | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    overall_status: Literal["healthy", "degraded"]
    version: str
    embedding_service: ServiceHealth
    vector_index: ServiceHealth
    capabilities: dict[str, bool]
