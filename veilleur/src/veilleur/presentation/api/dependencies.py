"""
FastAPI dependencies for Veilleur API.

Provides dependency injection for routes.
"""

from fastapi import Depends, Request

from shared.health import HealthChecker

from veilleur.application.use_cases import ReportHealthUseCase
from veilleur.di import Container


def get_container(request: Request) -> Container:
    """
    Get DI container attached to the serving application.

    Returns:
        Container instance

    Raises:
        RuntimeError: If the application was built without a container
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Container not initialized")
    return container


def get_report_health_use_case(
    container: Container = Depends(get_container),
) -> ReportHealthUseCase:
    """Dependency for the /health use case."""
    return container.report_health_use_case


def get_health_checker(
    container: Container = Depends(get_container),
) -> HealthChecker:
    """Dependency for the liveness/readiness probes."""
    return container.health_checker
