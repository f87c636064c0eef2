"""
Graceful shutdown infrastructure.
"""

from veilleur.infrastructure.shutdown.shutdown_manager import (
    EXIT_FORCED,
    EXIT_OK,
    ShutdownManager,
    ShutdownState,
)

__all__ = ["ShutdownManager", "ShutdownState", "EXIT_OK", "EXIT_FORCED"]
