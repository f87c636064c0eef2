"""
Collaborator resolution from settings.
"""

from typing import Any, Callable, Optional

from uvicorn.importer import ImportFromStringError, import_from_string

from veilleur.application import Collaborators
from veilleur.config.settings import Settings
from veilleur.domain.exceptions import CollaboratorLoadError
from veilleur.infrastructure.collaborators import defaults


def _resolve(name: str, path: Optional[str], default: Callable) -> Callable:
    if not path:
        return default

    try:
        target: Any = import_from_string(path)
    except ImportFromStringError as e:
        raise CollaboratorLoadError(name, path, str(e)) from e

    if not callable(target):
        raise CollaboratorLoadError(name, path, "target is not callable")
    return target


def load_collaborators(settings: Settings) -> Collaborators:
    """
    Build collaborators from configured import paths, falling back to the
    defaults for any path left unset.

    Raises:
        CollaboratorLoadError: If a configured path cannot be imported
    """
    return Collaborators(
        initialize_database=_resolve(
            "DATABASE_INITIALIZER",
            settings.DATABASE_INITIALIZER,
            defaults.initialize_database,
        ),
        register_routes=_resolve(
            "ROUTE_REGISTRAR",
            settings.ROUTE_REGISTRAR,
            defaults.register_routes,
        ),
        setup_dev_assets=_resolve(
            "DEV_ASSET_SERVER",
            settings.DEV_ASSET_SERVER,
            defaults.DevAssetDirectory(settings.DEV_ASSETS_DIR),
        ),
        serve_static=_resolve(
            "STATIC_ASSET_SERVER",
            settings.STATIC_ASSET_SERVER,
            defaults.StaticAssetDirectory(settings.STATIC_DIR),
        ),
    )
