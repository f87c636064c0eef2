"""
Veilleur Health Checker implementation.

Implements HealthChecker protocol from shared.health on top of the
process lifecycle state.
"""

from shared.health import HealthCheck, HealthReport, HealthStatus

from veilleur.domain.lifecycle import LifecyclePhase, ProcessLifecycleState


class LifecycleHealthChecker:
    """
    Health checker backed by ProcessLifecycleState.

    Checks:
    - Liveness: process has not terminated
    - Readiness: heavy initialization completed and no shutdown in progress
    """

    def __init__(self, state: ProcessLifecycleState, version: str):
        """
        Initialize health checker.

        Args:
            state: Process lifecycle state (read only)
            version: Service version reported in each report
        """
        self.state = state
        self.version = version

    def check_liveness(self) -> HealthReport:
        """
        Liveness probe - is the process alive?

        Returns:
            HealthReport with liveness status
        """
        alive = not self.state.is_terminal
        check = HealthCheck(
            name="process",
            status=HealthStatus.HEALTHY if alive else HealthStatus.UNHEALTHY,
            message="Process is alive" if alive else "Process terminated",
            metadata={"uptime_seconds": round(self.state.uptime_seconds(), 3)},
        )
        return HealthReport(checks={"process": check}, version=self.version)

    def check_readiness(self) -> HealthReport:
        """
        Readiness probe - can the process serve its full endpoint set?

        Returns:
            HealthReport with one check per readiness concern
        """
        return HealthReport(
            checks={
                "initialization": self._check_initialization(),
                "listener": self._check_listener(),
            },
            version=self.version,
        )

    def _check_initialization(self) -> HealthCheck:
        phase = self.state.phase
        metadata = {"phase": phase.value}

        if self.state.initialized:
            return HealthCheck(
                name="initialization",
                status=HealthStatus.HEALTHY,
                message="Heavy initialization complete",
                metadata=metadata,
            )

        failure = self.state.initialization_error
        if failure is not None:
            metadata["error"] = failure.to_dict()
            return HealthCheck(
                name="initialization",
                status=HealthStatus.DEGRADED,
                message=f"Heavy initialization failed at '{failure.step}'",
                metadata=metadata,
            )

        return HealthCheck(
            name="initialization",
            status=HealthStatus.UNHEALTHY,
            message="Heavy initialization not complete",
            metadata=metadata,
        )

    def _check_listener(self) -> HealthCheck:
        if self.state.fallback_active:
            return HealthCheck(
                name="listener",
                status=HealthStatus.DEGRADED,
                message="Fallback listener serving health routes only",
            )

        if self.state.phase in (
            LifecyclePhase.SHUTTING_DOWN,
            LifecyclePhase.TERMINATED,
        ):
            return HealthCheck(
                name="listener",
                status=HealthStatus.UNHEALTHY,
                message="Listener is closing",
            )

        return HealthCheck(
            name="listener",
            status=HealthStatus.HEALTHY,
            message="Primary listener accepting connections",
        )
