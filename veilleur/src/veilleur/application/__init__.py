"""
Veilleur application layer.
"""

from veilleur.application.collaborators import (
    Collaborators,
    DatabaseInitializer,
    DevAssetServer,
    RouteRegistrar,
    StaticAssetServer,
)

__all__ = [
    "Collaborators",
    "DatabaseInitializer",
    "RouteRegistrar",
    "DevAssetServer",
    "StaticAssetServer",
]
