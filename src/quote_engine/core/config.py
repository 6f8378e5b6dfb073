# QuoteEngine - Health Plan Quote Construction Engine
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from beartype import beartype
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUOTE_ENGINE_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    app_name: str = Field(
        default="Broker Quote Engine",
        description="Application name",
        min_length=1,
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )

    # Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    # Catalog backend
    catalog_base_url: str = Field(
        default="http://localhost:3333",
        description="Base URL of the plan catalog API",
        min_length=1,
    )
    catalog_timeout_seconds: float = Field(
        default=15.0,
        ge=1.0,
        le=120.0,
        description="Catalog request timeout in seconds",
    )
    simulation_page_size: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Page size requested from the plan summary listing",
    )

    @field_validator("catalog_base_url")
    @classmethod
    def validate_catalog_base_url(cls: type["Settings"], v: str) -> str:
        """Ensure the catalog URL is an absolute HTTP URL without trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid catalog base URL: {v}")
        return v.rstrip("/")

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
