"""
Health snapshot value object.

Derived from ProcessLifecycleState at request time; never cached.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from shared.health import utcnow

from veilleur.domain.lifecycle import LifecyclePhase, ProcessLifecycleState

_STATUS_BY_PHASE = {
    LifecyclePhase.LISTENING: "healthy",
    LifecyclePhase.INITIALIZING: "healthy",
    LifecyclePhase.READY: "healthy",
    LifecyclePhase.DEGRADED: "degraded",
    LifecyclePhase.SHUTTING_DOWN: "shutting_down",
    LifecyclePhase.TERMINATED: "shutting_down",
}


@dataclass(frozen=True)
class HealthSnapshot:
    """
    Point-in-time view of process health.

    Attributes:
        status: healthy, degraded or shutting_down
        timestamp: When the snapshot was taken (UTC)
        uptime_seconds: Seconds since process start
        environment: Runtime environment name
        initialized: Whether heavy initialization completed
    """

    status: str
    timestamp: datetime
    uptime_seconds: float
    environment: str
    initialized: bool

    @classmethod
    def capture(
        cls,
        state: ProcessLifecycleState,
        environment: str,
        now: Optional[datetime] = None,
    ) -> "HealthSnapshot":
        """
        Build a snapshot from the lifecycle state.

        All fields are read in one synchronous pass, so the snapshot can
        never mix values from before and after a phase change.
        """
        status = _STATUS_BY_PHASE[state.phase]
        if state.fallback_active and state.is_serving:
            status = "degraded"

        return cls(
            status=status,
            timestamp=now or utcnow(),
            uptime_seconds=state.uptime_seconds(),
            environment=environment,
            initialized=state.initialized,
        )

    @classmethod
    def capture_minimal(cls, environment: str) -> "HealthSnapshot":
        """Snapshot used when the lifecycle state cannot be read."""
        return cls(
            status="unknown",
            timestamp=utcnow(),
            uptime_seconds=0.0,
            environment=environment,
            initialized=False,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
            "uptime": self.uptime_seconds,
            "environment": self.environment,
            "initialized": self.initialized,
        }
