"""
Process lifecycle state.

One ProcessLifecycleState exists per process. It is owned by the DI
container and handed by reference to the components that read it (health
reporting) or advance it (bootstrap sequencing, shutdown).

Phases only ever move forward:

    LISTENING -> INITIALIZING -> READY | DEGRADED -> SHUTTING_DOWN -> TERMINATED

SHUTTING_DOWN can be entered from any serving phase; shutdown does not
wait for initialization to settle.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, FrozenSet, Optional

from shared.health import utcnow

from veilleur.domain.exceptions import InvalidPhaseTransitionError


class LifecyclePhase(str, Enum):
    """Process lifecycle phases."""

    LISTENING = "listening"
    INITIALIZING = "initializing"
    READY = "ready"
    DEGRADED = "degraded"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


_TRANSITIONS: Dict[LifecyclePhase, FrozenSet[LifecyclePhase]] = {
    LifecyclePhase.LISTENING: frozenset(
        {LifecyclePhase.INITIALIZING, LifecyclePhase.SHUTTING_DOWN}
    ),
    LifecyclePhase.INITIALIZING: frozenset(
        {
            LifecyclePhase.READY,
            LifecyclePhase.DEGRADED,
            LifecyclePhase.SHUTTING_DOWN,
        }
    ),
    LifecyclePhase.READY: frozenset({LifecyclePhase.SHUTTING_DOWN}),
    LifecyclePhase.DEGRADED: frozenset({LifecyclePhase.SHUTTING_DOWN}),
    LifecyclePhase.SHUTTING_DOWN: frozenset({LifecyclePhase.TERMINATED}),
    LifecyclePhase.TERMINATED: frozenset(),
}


@dataclass(frozen=True)
class InitializationFailure:
    """
    Record of why heavy initialization failed.

    Attributes:
        step: Name of the heavy-init step that raised
        error_type: Exception class name
        message: Exception message
        occurred_at: When the failure was recorded
    """

    step: str
    error_type: str
    message: str
    occurred_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_exception(cls, step: str, error: BaseException) -> "InitializationFailure":
        return cls(
            step=step,
            error_type=type(error).__name__,
            message=str(error) or type(error).__name__,
        )

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "error_type": self.error_type,
            "message": self.message,
            "occurred_at": self.occurred_at.isoformat(),
        }


class ProcessLifecycleState:
    """
    Mutable, process-wide lifecycle record.

    Attributes:
        phase: Current lifecycle phase
        started_at: Process start timestamp (UTC)
        initialization_error: Failure record if heavy init failed
        fallback_active: True when the fallback listener is serving
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started_monotonic = clock()
        self.started_at: datetime = utcnow()
        self._phase = LifecyclePhase.LISTENING
        self._initialized = False
        self.initialization_error: Optional[InitializationFailure] = None
        self.fallback_active = False

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def initialized(self) -> bool:
        """True once READY was reached; never reverts."""
        return self._initialized

    def can_advance_to(self, target: LifecyclePhase) -> bool:
        return target in _TRANSITIONS[self._phase]

    def advance_to(self, target: LifecyclePhase) -> None:
        """
        Move to a later phase.

        Args:
            target: Phase to enter

        Raises:
            InvalidPhaseTransitionError: If target is not reachable from
                the current phase
        """
        if not self.can_advance_to(target):
            raise InvalidPhaseTransitionError(self._phase, target)

        self._phase = target
        if target is LifecyclePhase.READY:
            self._initialized = True

    def try_advance_to(self, target: LifecyclePhase) -> bool:
        """
        Move to a later phase if allowed.

        Returns:
            True if the phase changed, False if the move was not allowed
        """
        if not self.can_advance_to(target):
            return False
        self.advance_to(target)
        return True

    def record_initialization_failure(self, failure: InitializationFailure) -> None:
        """Store the first heavy-init failure; later ones are ignored."""
        if self.initialization_error is None:
            self.initialization_error = failure

    def mark_fallback_active(self) -> None:
        self.fallback_active = True

    @property
    def is_serving(self) -> bool:
        return self._phase not in (
            LifecyclePhase.SHUTTING_DOWN,
            LifecyclePhase.TERMINATED,
        )

    @property
    def is_terminal(self) -> bool:
        return self._phase is LifecyclePhase.TERMINATED

    def uptime_seconds(self) -> float:
        """Seconds since this state was created."""
        return max(0.0, self._clock() - self._started_monotonic)
