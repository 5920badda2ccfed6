"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

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

    # Application environment
    env: Literal["dev", "test", "staging", "prod"] = "dev"

    # Store endpoint and public API key, both required at start
    database_url: str = Field(..., min_length=1)
    public_api_key: str = Field(..., min_length=1)

    # External identity provider (tokens are verified, never issued here)
    identity_jwt_secret: str = "CHANGE_ME_IN_PRODUCTION"
    identity_jwt_algorithm: str = "HS256"
    identity_jwt_audience: str = "authenticated"

    # Rate limiting
    rate_limit_enabled: bool = True

    # Logging
    log_level: str = "INFO"

    # Database initialization
    init_db_on_startup: bool = False

    # Consent defaults (5 years)
    default_retention_months: int = 60

    # Audit log listing
    audit_log_default_limit: int = 50
    audit_log_max_limit: int = 500

    @property
    def database_url_sync(self) -> str:
        """Return sync database URL for Alembic."""
        return self.database_url.replace("+asyncpg", "+psycopg2").replace(
            "+aiosqlite", ""
        )

    @property
    def is_dev(self) -> bool:
        """Check if running in development mode."""
        return self.env == "dev"

    @property
    def is_prod(self) -> bool:
        """Check if running in production mode."""
        return self.env == "prod"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
