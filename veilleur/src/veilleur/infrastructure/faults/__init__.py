"""
Process fault handling.
"""

from veilleur.infrastructure.faults.fault_handler import FaultHandler

__all__ = ["FaultHandler"]
