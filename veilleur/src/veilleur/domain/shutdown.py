"""
Shutdown request events.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from shared.health import utcnow


class ShutdownReason(str, Enum):
    """What triggered a shutdown request."""

    SIGTERM = "SIGTERM"
    SIGINT = "SIGINT"
    UNCAUGHT_EXCEPTION = "uncaughtException"
    UNHANDLED_REJECTION = "unhandledRejection"

    @classmethod
    def from_signal_name(cls, name: str) -> "ShutdownReason":
        return cls(name)


@dataclass(frozen=True)
class ShutdownRequest:
    """
    A single request to shut the process down.

    Attributes:
        reason: Trigger of the request
        received_at: When the request arrived (UTC)
    """

    reason: ShutdownReason
    received_at: datetime = field(default_factory=utcnow)
