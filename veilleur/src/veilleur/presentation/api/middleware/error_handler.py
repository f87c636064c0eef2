"""
Global error handling middleware.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from veilleur.domain.exceptions import VeilleurError
from veilleur.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MESSAGE = "Internal Server Error"


def resolve_status_code(exc: BaseException) -> int:
    """
    HTTP status carried by an exception.

    Reads `status_code`, then `status`; anything that is not an error
    status falls back to 500.
    """
    for attr in ("status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and 400 <= value <= 599:
            return value
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def veilleur_exception_handler(
    request: Request, exc: VeilleurError
) -> JSONResponse:
    """
    Handle Veilleur domain exceptions.

    Converts domain exceptions to appropriate HTTP responses.
    """
    status_code_map = {
        "INITIALIZATION_TIMEOUT": status.HTTP_503_SERVICE_UNAVAILABLE,
        "LISTENER_BIND_FAILED": status.HTTP_503_SERVICE_UNAVAILABLE,
        "INVALID_PHASE_TRANSITION": status.HTTP_409_CONFLICT,
    }

    status_code = status_code_map.get(exc.code, resolve_status_code(exc))
    logger.error(f"Error: {exc.code}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": exc.code,
            "message": exc.message,
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle any exception a route or collaborator let escape.

    The response body is always `{"message": ...}`.
    """
    status_code = resolve_status_code(exc)
    message = str(exc) or DEFAULT_MESSAGE

    logger.error(f"Error: {exc!r}", exc_info=exc)

    return JSONResponse(status_code=status_code, content={"message": message})
