"""
config.py

PURPOSE: Configuration loading and settings management.
DEPENDENCIES: pydantic, pydantic-settings

ARCHITECTURE NOTES:
Configuration comes from multiple sources (in priority order):
1. Explicit arguments to PaxSenixAI / CLI flags (highest priority)
2. Environment variables (PAXSENIX_*)
3. Defaults (lowest priority)

Durations are in seconds throughout.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://api.paxsenix.dpdns.org"
DEFAULT_MODEL = "gpt-3.5-turbo"


class ClientSettings(BaseSettings):
    """Settings for talking to the service."""

    api_key: str = Field(
        default="",
        description="API key sent as a Bearer token (or set PAXSENIX_API_KEY)",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Service origin",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout and stream watchdog, in seconds",
    )
    retries: int = Field(
        default=0,
        ge=0,
        description="Retries after the first attempt for transient failures",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Linear backoff base, in seconds",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Model used when a request does not name one",
    )

    model_config = {"env_prefix": "PAXSENIX_"}


class OpenTelemetrySettings(BaseSettings):
    """Settings for optional tracing."""

    enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing",
    )
    service_name: str = Field(
        default="paxsenix",
        description="service.name resource attribute",
    )
    endpoint: str | None = Field(
        default=None,
        description="OTLP gRPC endpoint; console export when unset",
    )

    model_config = {"env_prefix": "PAXSENIX_OTEL_"}


class Settings(BaseSettings):
    """Main application settings."""

    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug output",
    )
    client: ClientSettings = Field(
        default_factory=ClientSettings,
        description="Service client settings",
    )
    otel: OpenTelemetrySettings = Field(
        default_factory=OpenTelemetrySettings,
        description="Tracing settings",
    )

    model_config = {"env_prefix": "PAXSENIX_"}


def get_settings() -> Settings:
    """Get application settings, loading from environment."""
    return Settings()
