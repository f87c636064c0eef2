"""
Configuration management for Veilleur.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

WILDCARD_HOST = "0.0.0.0"
DEVELOPMENT = "development"


class Settings(BaseSettings):
    """
    Veilleur configuration schema.

    Loads configuration from:
    1. Environment variables (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/<NODE_ENV>.yaml: Environment overrides
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Veilleur"
    APP_VERSION: str = "0.1.0"
    NODE_ENV: str = Field(
        default=DEVELOPMENT,
        description="Runtime environment; 'development' enables dev tooling",
    )
    VERCEL: Optional[str] = Field(
        default=None, description="Set by hosted deployments"
    )

    # Listener
    PORT: int = Field(default=5000, ge=0, le=65535)

    # Heavy initialization
    INIT_TIMEOUT: float = Field(
        default=120.0,
        ge=0,
        description="Seconds before a stalled heavy init degrades (0 = no limit)",
    )

    # Graceful Shutdown
    SHUTDOWN_GRACE_DELAY: float = Field(
        default=1.0,
        ge=0,
        description="Seconds between listener close and exit(0)",
    )
    SHUTDOWN_HARD_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Seconds after shutdown start before exit(1) is forced",
    )

    # Fallback listener
    FALLBACK_ATTEMPTS: int = Field(
        default=2,
        ge=0,
        description="Fallback listener attempts after a failed start (0 = none)",
    )
    FALLBACK_RETRY_DELAY: float = Field(default=1.0, ge=0)

    # Periodic uptime log
    HEALTH_LOG_INTERVAL: float = Field(
        default=300.0,
        ge=0,
        description="Seconds between uptime log lines (0 = disabled)",
    )

    # Assets
    ATTACHED_ASSETS_DIR: str = "attached_assets"
    STATIC_DIR: str = "dist/public"
    DEV_ASSETS_DIR: str = "client"

    # Collaborators ("module:attribute" import paths)
    DATABASE_INITIALIZER: Optional[str] = None
    ROUTE_REGISTRAR: Optional[str] = None
    DEV_ASSET_SERVER: Optional[str] = None
    STATIC_ASSET_SERVER: Optional[str] = None

    # Request logging
    API_LOG_PREFIX: str = "/api"
    API_LOG_MAX_LENGTH: int = Field(default=80, ge=10)

    # Logging
    LOG_LEVEL: str = Field(default="info")
    LOG_FILE: Optional[str] = Field(default=None)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_lower

    @field_validator("NODE_ENV")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower() or DEVELOPMENT

    @property
    def environment(self) -> str:
        return self.NODE_ENV

    @property
    def is_development(self) -> bool:
        """Anything other than 'development' is treated as production."""
        return self.NODE_ENV == DEVELOPMENT

    @property
    def is_hosted(self) -> bool:
        return self.VERCEL is not None

    @property
    def bind_host(self) -> str:
        """
        Host the listener binds to.

        Hosted and self-run deployments both bind the wildcard address so
        the process is reachable from outside its container.
        """
        if self.is_hosted:
            return WILDCARD_HOST
        return WILDCARD_HOST


def load_config(
    config_dir: Optional[Path] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_dir: Directory holding YAML files (default: ./config)
        env_file: Optional .env filename (default: ./.env)
        env: Optional environment name override

    Returns:
        Settings instance

    Raises:
        ValidationError: If a value fails validation
    """
    project_root = Path.cwd()
    config_dir = config_dir or project_root / "config"

    # Load .env file FIRST (before Settings initialization)
    env_file_path = project_root / (env_file or ".env")
    if env_file_path.exists():
        load_dotenv(env_file_path, override=False)

    environment = (env or os.getenv("NODE_ENV") or DEVELOPMENT).lower()

    merged_config = {}
    for filename in ("default.yaml", f"{environment}.yaml"):
        path = config_dir / filename
        if not path.exists():
            continue
        with open(path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config.update(loaded)

    # Init kwargs outrank env vars in pydantic-settings; drop YAML keys the
    # environment already sets so ENV keeps priority
    merged_config = {
        key: value
        for key, value in merged_config.items()
        if key not in os.environ
    }

    if env is not None and "NODE_ENV" not in os.environ:
        merged_config["NODE_ENV"] = env

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).
    """
    global _settings
    _settings = None
