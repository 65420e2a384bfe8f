"""
Shared configuration management for the Bookmarks Access Layer.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BOOKMARKS_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cache backend
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_backend: str = Field(default="redis", description="redis or memory")
    bookmark_cache_ttl_seconds: int = Field(default=24 * 60 * 60)
    cache_write_timeout_seconds: float = Field(default=2.0)

    # Short code allocation
    code_length: int = Field(default=9)
    code_max_attempts: int = Field(default=3)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str


def get_config(service_name: str, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
