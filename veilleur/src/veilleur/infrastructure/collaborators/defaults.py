"""
Default collaborator implementations.

Used when no import path is configured. They let the process run end to
end without a real database or frontend build.
"""

from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from veilleur.infrastructure.monitoring.logger import get_logger

logger = get_logger(__name__)


async def initialize_database() -> None:
    """No database configured; nothing to seed."""
    logger.info("No DATABASE_INITIALIZER configured, skipping seed")


async def register_routes(app: FastAPI) -> Optional[Any]:
    """No business routes configured."""
    logger.info("No ROUTE_REGISTRAR configured, serving health routes only")
    return None


def mount_directory(app: FastAPI, path: str, directory: str, name: str) -> bool:
    """
    Mount a static directory if it exists.

    Returns:
        True if the directory was mounted
    """
    if not Path(directory).is_dir():
        logger.warning(f"Static directory '{directory}' not found, {path} not mounted")
        return False

    app.mount(path, StaticFiles(directory=directory, html=True), name=name)
    return True


class DevAssetDirectory:
    """
    Serves the unbuilt client directory in development.

    Args:
        directory: Client source directory
    """

    def __init__(self, directory: str):
        self.directory = directory

    async def __call__(self, app: FastAPI, server: Any) -> None:
        mount_directory(app, "/", self.directory, "dev-assets")


class StaticAssetDirectory:
    """
    Serves the production build directory.

    Args:
        directory: Build output directory
    """

    def __init__(self, directory: str):
        self.directory = directory

    def __call__(self, app: FastAPI) -> None:
        mount_directory(app, "/", self.directory, "static")
