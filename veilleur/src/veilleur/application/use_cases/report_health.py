"""
Report Health Use Case.
"""

import logging

from veilleur.domain.health import HealthSnapshot
from veilleur.domain.lifecycle import ProcessLifecycleState

logger = logging.getLogger(__name__)


class ReportHealthUseCase:
    """
    Produce a HealthSnapshot for the /health endpoint.

    Reads the lifecycle phase at call time, so the answer upgrades on its
    own once heavy initialization completes.
    """

    def __init__(self, state: ProcessLifecycleState, environment: str):
        self.state = state
        self.environment = environment

    def execute(self) -> HealthSnapshot:
        """
        Capture current health.

        Returns:
            HealthSnapshot; never raises
        """
        try:
            return HealthSnapshot.capture(self.state, self.environment)
        except Exception:
            logger.exception("Health snapshot failed")
            return HealthSnapshot.capture_minimal(self.environment)
