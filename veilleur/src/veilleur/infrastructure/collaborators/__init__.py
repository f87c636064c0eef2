"""
Collaborator defaults and loading.
"""

from veilleur.infrastructure.collaborators.loader import load_collaborators

__all__ = ["load_collaborators"]
