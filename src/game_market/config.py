"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation,
type coercion, and sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogAPIConfig(BaseSettings):
    """Catalog (Gamalytic) API configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: SecretStr = Field(
        default=...,
        description="API key sent in the 'api-key' header of every request",
    )
    base_url: str = Field(
        default="https://api.gamalytic.com",
        description="Base URL for the catalog API",
    )
    timeout_seconds: int = Field(
        default=30,
        ge=5,
        le=120,
        description="Per-request HTTP timeout in seconds",
    )
    requests_per_minute: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Rate limit for API requests per minute",
    )
    burst_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Requests allowed back to back before pacing applies",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so endpoint joining never doubles slashes."""
        return v.rstrip("/")


class CollectorConfig(BaseSettings):
    """Similar-set collection configuration."""

    model_config = SettingsConfigDict(env_prefix="COLLECTOR_")

    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Listing page size ('limit' query parameter)",
    )
    price_min: float = Field(
        default=7.99,
        ge=0,
        description="Minimum price filter for similar titles",
    )
    max_pages: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Hard ceiling on listing pages fetched per collection",
    )


class SearchConfig(BaseSettings):
    """Search gating configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    min_query_length: int = Field(
        default=2,
        ge=1,
        le=50,
        description="Queries shorter than this are never dispatched",
    )


class RetryConfig(BaseSettings):
    """Retry behavior for transient transport failures."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Maximum number of attempts per request",
    )
    base_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=30.0,
        description="Base delay between retries (exponential backoff)",
    )
    max_delay_seconds: float = Field(
        default=30.0,
        ge=0.0,
        le=300.0,
        description="Maximum delay between retries",
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.5,
        le=4.0,
        description="Base for exponential backoff calculation",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "console"] = Field(
        default="json",
        description="Log output format",
    )
    include_timestamp: bool = Field(
        default=True,
        description="Include timestamp in log entries",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides
    a single entry point for configuration access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    # Sub-configurations
    catalog: CatalogAPIConfig = Field(default_factory=CatalogAPIConfig)
    collector: CollectorConfig = Field(default_factory=CollectorConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    The catalog credential is read once here and reused by every
    client created afterwards.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
