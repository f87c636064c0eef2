"""
API schemas for Veilleur.
"""

from veilleur.presentation.schemas.health import HealthResponse, RootResponse

__all__ = ["HealthResponse", "RootResponse"]
