"""
HTTP listener infrastructure.
"""

from veilleur.infrastructure.http.fallback import FallbackListener
from veilleur.infrastructure.http.listener import HttpListener

__all__ = ["FallbackListener", "HttpListener"]
