"""
FastAPI application factory.

The returned application already serves the health routes; everything else
is attached later, in place, by heavy initialization.
"""

from fastapi import FastAPI

from veilleur.di import Container
from veilleur.domain.exceptions import VeilleurError
from veilleur.presentation.api.middleware import (
    ApiLoggingMiddleware,
    RequestIDMiddleware,
    unhandled_exception_handler,
    veilleur_exception_handler,
)
from veilleur.presentation.api.routes import health_router


def create_app(container: Container, fallback: bool = False) -> FastAPI:
    """
    Application factory - creates and configures FastAPI app.

    Args:
        container: DI container exposed to routes via app.state
        fallback: Build the health-only app served by the fallback
            listener

    Returns:
        Configured FastAPI application
    """
    settings = container.settings

    app = FastAPI(
        title=settings.APP_NAME,
        description="Listener-first HTTP process supervisor",
        version=settings.APP_VERSION,
        docs_url=None if fallback else "/docs",
        redoc_url=None,
        openapi_url=None if fallback else "/openapi.json",
    )
    app.state.container = container
    app.state.fallback = fallback

    # Middleware chain (last added runs first)
    app.add_middleware(
        ApiLoggingMiddleware,
        prefix=settings.API_LOG_PREFIX,
        max_length=settings.API_LOG_MAX_LENGTH,
    )
    app.add_middleware(RequestIDMiddleware)

    # Exception handlers
    app.add_exception_handler(VeilleurError, veilleur_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Health routes go first so later mounts at "/" never shadow them
    app.include_router(health_router)

    return app
