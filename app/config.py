"""
Application Configuration
=========================

Centralized configuration using Pydantic Settings.
Loads from environment variables with validation.
"""

from functools import lru_cache
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_POSTGRES_SCHEMES = ("postgres", "postgresql", "postgresql+asyncpg")


class ConfigurationError(RuntimeError):
    """Raised when required environment variables are missing or invalid."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    # Server
    PORT: int = Field(gt=0, lt=65536, description="Port to bind to")

    # Database - Supabase
    SUPABASE_URL: str = Field(description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(min_length=1)
    SUPABASE_DATABASE_URL: str = Field(description="Postgres DSN of the Supabase project")

    # App Configuration
    ALLOWED_ORIGINS: str = Field(default="*")

    # Receipt validation (mocked)
    MOCK_RECEIPT_DELAY_MS: int = Field(default=100, ge=0)
    MOCK_RECEIPT_EXPIRY_DAYS: Optional[int] = Field(default=None, gt=0)

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def database_url_async(self) -> str:
        """Convert database URL to async format for asyncpg."""
        scheme, rest = self.SUPABASE_DATABASE_URL.split("://", 1)
        if scheme in ("postgres", "postgresql"):
            scheme = "postgresql+asyncpg"
        return f"{scheme}://{rest}"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() == "development"

    @field_validator("SUPABASE_URL")
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Ensure the Supabase URL is an absolute http(s) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("SUPABASE_URL must be a valid http(s) URL")
        return v.rstrip("/")

    @field_validator("SUPABASE_DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure the DSN points at Postgres."""
        parsed = urlparse(v)
        if parsed.scheme not in _POSTGRES_SCHEMES or not parsed.netloc:
            raise ValueError("SUPABASE_DATABASE_URL must be a postgresql:// DSN")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once. Missing or
    malformed required variables abort startup with a single error naming
    every offending variable.
    """
    try:
        return Settings()
    except ValidationError as exc:
        names = ", ".join(
            ".".join(str(loc) for loc in error["loc"]) for error in exc.errors()
        )
        raise ConfigurationError(
            f"Missing or invalid environment variables: {names}"
        ) from exc


# Export a default settings instance
settings = get_settings()
