"""
Shared configuration management for the Finlogic portal services.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Hosted data store (Supabase / PostgREST)
    supabase_url: str = Field(default="https://placeholder.supabase.co")
    supabase_anon_key: str = Field(default="placeholder-anon-key")
    supabase_schema: str = Field(default="public")
    data_store_timeout_seconds: float = Field(default=10.0, gt=0)

    # Query cache
    cache_default_ttl_seconds: float = Field(default=300.0)
    profile_cache_ttl_seconds: Optional[float] = Field(default=None)
    content_cache_ttl_seconds: Optional[float] = Field(default=None)

    # Metrics
    enable_metrics: bool = Field(default=True)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
