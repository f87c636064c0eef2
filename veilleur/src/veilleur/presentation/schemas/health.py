"""
Schemas for health endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from veilleur.domain.health import HealthSnapshot


class RootResponse(BaseModel):
    """Response of the root endpoint."""

    status: str = Field(default="ok", description="Always 'ok' while serving")


class HealthResponse(BaseModel):
    """
    Health check response schema.

    Always returned with HTTP 200; load balancers read the body.
    """

    status: str = Field(
        ..., description="healthy, degraded or shutting_down"
    )
    timestamp: datetime = Field(..., description="Snapshot time (UTC)")
    uptime: float = Field(..., description="Process uptime in seconds")
    environment: str = Field(..., description="Runtime environment")
    initialized: bool = Field(
        ..., description="Whether heavy initialization completed"
    )

    @classmethod
    def from_snapshot(cls, snapshot: HealthSnapshot) -> "HealthResponse":
        return cls(
            status=snapshot.status,
            timestamp=snapshot.timestamp,
            uptime=snapshot.uptime_seconds,
            environment=snapshot.environment,
            initialized=snapshot.initialized,
        )
