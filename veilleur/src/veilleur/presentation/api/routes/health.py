"""
Health check API routes.

Registered before the listener binds, so they answer from the first
accepted connection. Handlers read the lifecycle phase per request and are
never replaced.
"""

from fastapi import APIRouter, Depends, Response, status

from shared.health import HealthChecker

from veilleur.application.use_cases import ReportHealthUseCase
from veilleur.presentation.api.dependencies import (
    get_health_checker,
    get_report_health_use_case,
)
from veilleur.presentation.schemas import HealthResponse, RootResponse

router = APIRouter(tags=["health"])


@router.get("/", response_model=RootResponse, status_code=status.HTTP_200_OK)
def root() -> RootResponse:
    """Root endpoint; 200 whenever the process is serving."""
    return RootResponse()


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
def health_check_endpoint(
    use_case: ReportHealthUseCase = Depends(get_report_health_use_case),
) -> HealthResponse:
    """
    Process health snapshot.

    Always 200; `status` and `initialized` carry the detail.
    """
    return HealthResponse.from_snapshot(use_case.execute())


@router.get("/health/live", status_code=status.HTTP_200_OK)
def liveness_probe(
    response: Response,
    health_checker: HealthChecker = Depends(get_health_checker),
):
    """
    Liveness probe endpoint.

    Returns 200 if the process is alive, 503 if it terminated.
    """
    report = health_checker.check_liveness()

    if not report.is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()


@router.get("/health/ready", status_code=status.HTTP_200_OK)
def readiness_probe(
    response: Response,
    health_checker: HealthChecker = Depends(get_health_checker),
):
    """
    Readiness probe endpoint.

    Returns 200 once heavy initialization completed on the primary
    listener, 503 while initializing, degraded or shutting down.
    """
    report = health_checker.check_readiness()

    if not report.is_ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return report.to_dict()
