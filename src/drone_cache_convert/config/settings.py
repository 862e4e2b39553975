"""Configuration system for the conversion service.

Settings are read from ``PLUGIN_*`` environment variables (nested blocks use a
double underscore, e.g. ``PLUGIN_LOGGING__LEVEL``) and may be overridden by
command line arguments through :func:`load_settings`.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, IPvAnyAddress, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utils.errors import ConfigurationError

DEFAULT_IMAGE = "meltwater/drone-cache"
DEFAULT_CACHE_PATH = "/var/lib/cache"


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for application output")
    correlation_id_header: str = Field(
        default="X-Correlation-ID", description="Header used for request correlation"
    )
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["secret", "signature", "authorization", "token", "password"],
        description="Fields that should be redacted in logs",
    )


class MetricsSettings(BaseModel):
    """Prometheus metrics configuration."""

    enabled: bool = True
    path: str = Field(default="/metrics", description="HTTP path for Prometheus metrics")


class AppSettings(BaseSettings):
    """Top-level application settings."""

    debug: bool = Field(default=False, description="Enable debug logging")
    service_name: str = "drone-cache-convert"
    host: IPvAnyAddress = Field(default="0.0.0.0", description="Address to listen on")
    port: int = Field(default=3000, ge=0, le=65535, description="Port to listen on")
    secret: SecretStr | None = Field(
        default=None, description="Shared secret used to sign conversion requests"
    )
    image: str = Field(default=DEFAULT_IMAGE, description="Cache plugin image for generated steps")
    cache_path: str = Field(
        default=DEFAULT_CACHE_PATH, description="Path to the cache directory on the host"
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    metrics: MetricsSettings = Field(default_factory=MetricsSettings)

    model_config = SettingsConfigDict(env_prefix="PLUGIN_", env_nested_delimiter="__")

    @property
    def log_level(self) -> str:
        """Effective log level, forced to DEBUG when ``debug`` is enabled."""
        return "DEBUG" if self.debug else self.logging.level

    def require_secret(self) -> str:
        """Return the plaintext shared secret or fail when it is not configured."""
        if self.secret is None or not self.secret.get_secret_value():
            raise ConfigurationError(
                "Shared secret is not configured",
                detail="Set PLUGIN_SECRET or pass --secret",
            )
        return self.secret.get_secret_value()


def load_settings(**overrides: Any) -> AppSettings:
    """Load settings from the environment with explicit overrides applied.

    ``None`` overrides are ignored so unset command line options fall back to
    the environment and defaults.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return AppSettings(**values)
    except ValidationError as err:
        raise ConfigurationError("Invalid configuration", detail=str(err)) from err


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Cached accessor used by production code."""
    return load_settings()
