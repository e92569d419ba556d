"""
Shared configuration management for the Arc Raiders chat gateway.
"""

import os
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str, field_name: str) -> AliasChoices:
    """Accept both the bare environment variable and the field name."""
    return AliasChoices(name, field_name)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = Field(default="local", validation_alias=_env("ENV", "env"))
    log_level: str = Field(default="info", validation_alias=_env("LOG_LEVEL", "log_level"))

    # Upstream game-data API
    upstream_base_url: str = Field(
        default="https://metaforge.app/api/arc-raiders",
        validation_alias=_env("METAFORGE_BASE_URL", "upstream_base_url"),
    )
    fetch_timeout_ms: int = Field(
        default=5000,
        gt=0,
        validation_alias=_env("FETCH_TIMEOUT_MS", "fetch_timeout_ms"),
    )

    # Cache
    cache_ttl_seconds: int = Field(
        default=300,
        gt=0,
        validation_alias=_env("CACHE_TTL", "cache_ttl_seconds"),
    )
    cache_single_flight: bool = Field(
        default=True,
        validation_alias=_env("CACHE_SINGLE_FLIGHT", "cache_single_flight"),
    )
    cache_warm_on_startup: bool = Field(
        default=False,
        validation_alias=_env("CACHE_WARM_ON_STARTUP", "cache_warm_on_startup"),
    )

    # Static data
    loot_data_path: Optional[str] = Field(
        default=None,
        validation_alias=_env("ARC_LOOT_PATH", "loot_data_path"),
    )

    # Security
    api_key: Optional[str] = Field(default=None, validation_alias=_env("API_KEY", "api_key"))

    # Rate limiting
    rate_limit_max_requests: int = Field(
        default=100,
        ge=1,
        validation_alias=_env("RATE_LIMIT_MAX_REQUESTS", "rate_limit_max_requests"),
    )
    rate_limit_window_seconds: int = Field(
        default=15 * 60,
        ge=1,
        validation_alias=_env("RATE_LIMIT_WINDOW_SECONDS", "rate_limit_window_seconds"),
    )
    trusted_proxy_hops: int = Field(
        default=1,
        ge=0,
        validation_alias=_env("TRUST_PROXY_HOPS", "trusted_proxy_hops"),
    )

    @property
    def fetch_timeout_seconds(self) -> float:
        return self.fetch_timeout_ms / 1000.0


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service.

    ``port`` is the fallback used when the ``PORT`` environment variable is unset.
    """
    resolved_port = int(os.getenv("PORT", port))
    return ServiceConfig(service_name=service_name, port=resolved_port, **overrides)
