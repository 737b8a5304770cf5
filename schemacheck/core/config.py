"""Configuration management for schemacheck.

Settings are read from environment variables prefixed with ``SCHEMACHECK_``
(and an optional ``.env`` file) using Pydantic Settings. The command line
overrides individual values with its options.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..usage.models import UsageConfig


class Settings(BaseSettings):
    """Application configuration shared by the CLI and the HTTP service."""

    model_config = SettingsConfigDict(
        env_prefix="SCHEMACHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "testing", "production"] = Field(
        default="development", description="Application environment"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Log level")
    json_logs: bool = Field(default=False, description="Enable JSON formatted logs")

    # Usage lookups
    usage_backend_type: Literal["memory", "file"] = Field(
        default="memory", description="Usage oracle backend"
    )
    usage_path: str | None = Field(
        default=None, description="Usage records file for the file backend"
    )
    usage_tag: str | None = Field(
        default=None, description="Only consider usage recorded against this schema tag"
    )
    usage_window_days: int = Field(
        default=30, ge=1, description="How far back usage counts as current"
    )
    oracle_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for a single usage lookup"
    )
    max_concurrent_queries: int = Field(
        default=16, ge=1, description="Maximum usage lookups in flight at once"
    )

    # Check policy
    fail_warnings_without_usage: bool = Field(
        default=True,
        description="Treat warnings as failures when no usage data is available",
    )

    # HTTP service
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=8000, description="Port to bind to")
    log_requests: bool = Field(
        default=True, description="Enable request logging middleware"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"], description="Allowed CORS origins"
    )

    @computed_field  # type: ignore
    @property
    def usage(self) -> UsageConfig:
        """Create usage oracle configuration from individual fields."""
        return UsageConfig(
            backend_type=self.usage_backend_type,
            path=self.usage_path,
            tag=self.usage_tag,
        )

    @property
    def usage_window(self) -> timedelta:
        return timedelta(days=self.usage_window_days)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
