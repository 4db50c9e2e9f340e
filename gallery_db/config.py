"""
Configuration management for GALLERY_DB.

GalleryConfig resolves each setting from the constructor argument, then the
matching GALLERY_DB_* environment variable, then the default in constants.
"""

import os

from .constants import (
    DEFAULT_DB_NAME,
    DEFAULT_HOST,
    DEFAULT_PASSWORD_SCHEME,
    DEFAULT_PORT,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    MIN_SERVER_SELECTION_TIMEOUT_MS,
    SUPPORTED_PASSWORD_SCHEMES,
)
from .exceptions import ConfigurationError

_TRUTHY = ("1", "true", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}", config_key=name, config_value=raw
        ) from e


class GalleryConfig:
    """
    Access layer configuration.

    Example:
        # Using environment variables
        config = GalleryConfig()

        # Or using direct parameters
        config = GalleryConfig(host="db.internal", db_name="photos", bootstrap=True)
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        db_name: str | None = None,
        bootstrap: bool | None = None,
        server_selection_timeout_ms: int | None = None,
        password_scheme: str | None = None,
    ):
        """
        Initialize configuration.

        Args:
            host: MongoDB host (defaults to GALLERY_DB_HOST or localhost)
            port: MongoDB port (defaults to GALLERY_DB_PORT or 27017)
            db_name: Database name (defaults to GALLERY_DB_NAME or "gallery")
            bootstrap: Create collections and indexes on connect
                (defaults to GALLERY_DB_BOOTSTRAP or False)
            server_selection_timeout_ms: Server selection timeout in ms
                (defaults to GALLERY_DB_SERVER_SELECTION_TIMEOUT_MS or 5000)
            password_scheme: Digest scheme for new passwords, "sha256" or "bcrypt"
                (defaults to GALLERY_DB_PASSWORD_SCHEME or "sha256")
        """
        self.host = host or os.getenv("GALLERY_DB_HOST", DEFAULT_HOST)
        self.port = port if port is not None else _env_int("GALLERY_DB_PORT", DEFAULT_PORT)
        self.db_name = db_name or os.getenv("GALLERY_DB_NAME", DEFAULT_DB_NAME)
        self.bootstrap = (
            bootstrap if bootstrap is not None else _env_bool("GALLERY_DB_BOOTSTRAP", False)
        )
        self.server_selection_timeout_ms = (
            server_selection_timeout_ms
            if server_selection_timeout_ms is not None
            else _env_int(
                "GALLERY_DB_SERVER_SELECTION_TIMEOUT_MS", DEFAULT_SERVER_SELECTION_TIMEOUT_MS
            )
        )
        self.password_scheme = (
            password_scheme or os.getenv("GALLERY_DB_PASSWORD_SCHEME", DEFAULT_PASSWORD_SCHEME)
        ).lower()

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If a value is missing or out of range
        """
        if not self.host:
            raise ConfigurationError("host is required", config_key="host")

        if not self.db_name:
            raise ConfigurationError("db_name is required", config_key="db_name")

        if not 1 <= self.port <= 65535:
            raise ConfigurationError(
                f"port must be between 1 and 65535, got {self.port}",
                config_key="port",
                config_value=self.port,
            )

        if self.server_selection_timeout_ms < MIN_SERVER_SELECTION_TIMEOUT_MS:
            raise ConfigurationError(
                f"server_selection_timeout_ms must be >= {MIN_SERVER_SELECTION_TIMEOUT_MS}, "
                f"got {self.server_selection_timeout_ms}",
                config_key="server_selection_timeout_ms",
                config_value=self.server_selection_timeout_ms,
            )

        if self.password_scheme not in SUPPORTED_PASSWORD_SCHEMES:
            raise ConfigurationError(
                f"password_scheme must be one of {SUPPORTED_PASSWORD_SCHEMES}, "
                f"got {self.password_scheme!r}",
                config_key="password_scheme",
                config_value=self.password_scheme,
            )

    def __repr__(self) -> str:
        return (
            f"GalleryConfig(host={self.host!r}, port={self.port}, db_name={self.db_name!r}, "
            f"bootstrap={self.bootstrap})"
        )
