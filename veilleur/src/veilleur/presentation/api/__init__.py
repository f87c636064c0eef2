"""
HTTP API for Veilleur.
"""

from veilleur.presentation.api.app_factory import create_app

__all__ = ["create_app"]
