"""
Veilleur - Listener-first HTTP process supervisor

Serves health checks from the first moment the process is up, defers slow
initialization behind the listener, and shuts down within a bounded time.
"""

from veilleur.main import VeilleurApp, main

__version__ = "0.1.0"
__all__ = ["VeilleurApp", "main"]
