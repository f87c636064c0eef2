"""
Contracts for the collaborators driven by heavy initialization.

Veilleur never implements business routes, persistence or asset bundling
itself. It only decides when these run and what happens when they fail.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Protocol

from fastapi import FastAPI


class DatabaseInitializer(Protocol):
    """Seeds or migrates the database. Fails by raising."""

    def __call__(self) -> Awaitable[None]: ...


class RouteRegistrar(Protocol):
    """
    Adds business routes to the live application.

    May return a server object handed on to the dev asset server; None
    means "use the HTTP listener".
    """

    def __call__(self, app: FastAPI) -> Awaitable[Optional[Any]]: ...


class DevAssetServer(Protocol):
    """Development asset tooling (hot-reload middleware, source mounts)."""

    def __call__(self, app: FastAPI, server: Any) -> Awaitable[None]: ...


class StaticAssetServer(Protocol):
    """Production static file serving."""

    def __call__(self, app: FastAPI) -> None: ...


@dataclass
class Collaborators:
    """
    The four collaborators composed by the bootstrap sequence.

    Attributes:
        initialize_database: Step 1 of heavy init
        register_routes: Step 2 of heavy init
        setup_dev_assets: Step 4 in development
        serve_static: Step 4 outside development
    """

    initialize_database: DatabaseInitializer
    register_routes: RouteRegistrar
    setup_dev_assets: DevAssetServer
    serve_static: StaticAssetServer
