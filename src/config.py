# SPDX-FileCopyrightText: 2026 Andrew Grimberg <tykeal@bardicgrove.org>
# SPDX-License-Identifier: Apache-2.0
"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./data/stayledger.db",
        description="Database URL",
    )

    # Identity provider credentials
    auth_secret_key: str = Field(
        default="",
        description="Fernet key shared with the identity provider",
    )
    auth_token_ttl_seconds: int = Field(
        default=86400,
        ge=60,
        description="Maximum accepted age of a bearer token in seconds",
    )

    # Application mode
    standalone_mode: bool = Field(
        default=False,
        description="Accept X-User-Id header instead of bearer tokens",
    )

    # Listing directory
    # Empty URL means listings are read from the local database
    listing_directory_url: str = Field(
        default="",
        description="Base URL of a remote listing directory service",
    )
    listing_directory_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for listing directory requests",
    )
    listing_directory_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries for transient listing directory failures",
    )

    # Booking rules
    cancellation_window_hours: int = Field(
        default=48,
        ge=0,
        description="Minimum lead time before check-in for cancellation",
    )
    check_in_hour: int = Field(
        default=0,
        ge=0,
        le=23,
        description="UTC hour of day at which a stay begins",
    )
    default_page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Default page size for list endpoints",
    )

    # Server configuration
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8099,
        description="Server port",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings instance.
    """
    return Settings()
