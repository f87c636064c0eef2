"""
Application use cases for Veilleur.
"""

from veilleur.application.use_cases.report_health import ReportHealthUseCase
from veilleur.application.use_cases.run_heavy_init import RunHeavyInitUseCase

__all__ = ["ReportHealthUseCase", "RunHeavyInitUseCase"]
