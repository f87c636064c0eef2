"""
Veilleur domain layer: lifecycle state, health snapshots, shutdown events.
"""

from veilleur.domain.health import HealthSnapshot
from veilleur.domain.lifecycle import (
    InitializationFailure,
    LifecyclePhase,
    ProcessLifecycleState,
)
from veilleur.domain.shutdown import ShutdownReason, ShutdownRequest

__all__ = [
    "HealthSnapshot",
    "InitializationFailure",
    "LifecyclePhase",
    "ProcessLifecycleState",
    "ShutdownReason",
    "ShutdownRequest",
]
