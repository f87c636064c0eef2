"""
Domain exceptions for Veilleur.
"""

from veilleur.domain.exceptions.base import VeilleurError
from veilleur.domain.exceptions.lifecycle_exceptions import (
    CollaboratorLoadError,
    InitializationTimeoutError,
    InvalidPhaseTransitionError,
    ListenerBindError,
)

__all__ = [
    "VeilleurError",
    "InvalidPhaseTransitionError",
    "InitializationTimeoutError",
    "ListenerBindError",
    "CollaboratorLoadError",
]
