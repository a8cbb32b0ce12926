"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables.

Optionally, point `ENV_FILE` at a local env file (for development). When
`ENV_FILE` is unset no env file is read.
"""

import os
from enum import Enum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Configuration is loaded from environment variables, with support
    for .env files in development.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "qa-service"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # Database
    database_url: str = "sqlite+aiosqlite:///./qa-service.db"
    database_pool_size: int = 5
    database_max_overflow: int = 5
    database_pool_timeout: int = 30
    # Create tables from ORM metadata on startup (local development only)
    database_create_tables: bool = False

    # Session tokens
    secret_key: str = "local-development-secret-key-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Content filter (bad words API). Disabled when no API key is set.
    content_filter_url: str = "https://api.apilayer.com/bad_words"
    content_filter_api_key: str | None = None
    content_filter_timeout_seconds: float = 10.0

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def content_filter_enabled(self) -> bool:
        return bool(self.content_filter_api_key)

    @property
    def async_url(self) -> str:
        """Database URL with an async driver selected."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("access_token_expire_minutes")
    @classmethod
    def validate_token_lifetime(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("access_token_expire_minutes must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            # SECRET_KEY must be sufficiently long
            if len(self.secret_key) < 32 or self.secret_key.startswith("local-development"):
                raise ValueError("SECRET_KEY must be set and at least 32 characters in production")

            # Database must use PostgreSQL
            if not self.database_url.startswith("postgresql"):
                raise ValueError("DATABASE_URL must use a postgresql scheme in production")

            if self.database_create_tables:
                raise ValueError("DATABASE_CREATE_TABLES must not be enabled in production")

            # CORS must not allow localhost in production
            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
