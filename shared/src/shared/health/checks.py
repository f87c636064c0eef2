"""
Health check definitions and status types.

Defines the probe result models and the checker protocol that every
service implements.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol


class HealthStatus(str, Enum):
    """Health status levels, ordered from best to worst."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.DEGRADED: 1,
    HealthStatus.UNHEALTHY: 2,
}


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


@dataclass
class HealthCheck:
    """
    Result of a single named check.
    """

    name: str
    status: HealthStatus
    message: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Returns:
            Dictionary representation
        """
        result: Dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
        }

        if self.message:
            result["message"] = self.message

        if self.metadata:
            result["metadata"] = self.metadata

        return result


@dataclass
class HealthReport:
    """
    Overall health report.

    Aggregates multiple health checks into one status; the worst check wins.
    """

    checks: Dict[str, HealthCheck]
    version: str
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def status(self) -> HealthStatus:
        worst = HealthStatus.HEALTHY
        for check in self.checks.values():
            if check.status.severity > worst.severity:
                worst = check.status
        return worst

    @property
    def is_healthy(self) -> bool:
        """Check if overall status is healthy."""
        return self.status == HealthStatus.HEALTHY

    @property
    def is_ready(self) -> bool:
        """Ready means every check passed."""
        return self.is_healthy

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON response.

        Returns:
            Dictionary representation
        """
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "version": self.version,
            "checks": {
                name: check.to_dict() for name, check in self.checks.items()
            },
        }


class HealthChecker(Protocol):
    """
    Protocol for health checker implementations.

    Each service implements this protocol with service-specific checks.
    """

    def check_liveness(self) -> HealthReport:
        """
        Liveness: is the process alive at all?

        Failure indicates the process needs a restart.
        """
        ...

    def check_readiness(self) -> HealthReport:
        """
        Readiness: can the process serve its full endpoint set?

        Failure indicates the process should not receive traffic.
        """
        ...
