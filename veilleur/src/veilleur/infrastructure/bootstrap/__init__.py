"""
Bootstrap sequencing.
"""

from veilleur.infrastructure.bootstrap.sequencer import BootstrapSequencer

__all__ = ["BootstrapSequencer"]
