"""
Lifecycle-related exceptions.
"""

from veilleur.domain.exceptions.base import VeilleurError


class InvalidPhaseTransitionError(VeilleurError):
    """Raised when a lifecycle phase would move backward or sideways."""

    code = "INVALID_PHASE_TRANSITION"

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"Cannot move lifecycle from {current.value} to {target.value}"
        )


class InitializationTimeoutError(VeilleurError):
    """Raised when heavy initialization exceeds its time budget."""

    code = "INITIALIZATION_TIMEOUT"

    def __init__(self, step: str, timeout: float):
        self.step = step
        self.timeout = timeout
        super().__init__(
            f"Heavy initialization exceeded {timeout}s (stalled at step '{step}')"
        )


class ListenerBindError(VeilleurError):
    """Raised when the HTTP listener cannot bind or start serving."""

    code = "LISTENER_BIND_FAILED"

    def __init__(self, host: str, port: int, reason: str):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Failed to bind {host}:{port}: {reason}")


class CollaboratorLoadError(VeilleurError):
    """Raised when a configured collaborator import path cannot be loaded."""

    code = "COLLABORATOR_LOAD_FAILED"

    def __init__(self, name: str, path: str, reason: str):
        self.name = name
        self.path = path
        super().__init__(f"Cannot load {name} from '{path}': {reason}")
