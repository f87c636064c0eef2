"""
Dependency Injection for Veilleur.
"""

from veilleur.di.container import Container

__all__ = ["Container"]
