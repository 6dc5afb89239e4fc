"""
Application configuration using Pydantic settings.

Every value can come from the environment or a ``.env`` file in the working
directory. ``ENV`` selects development or production behaviour.

Usage:
    from core.config import get_settings
    settings = get_settings()
"""

import os
import warnings
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SECRET_LENGTH = 32

# Placeholder secrets that must never sign production tokens
WEAK_SECRETS = frozenset(
    {"change_me", "changeme", "secret", "your-secret-key", "jwt-secret", "supersecret", "test"}
)


def running_in_production() -> bool:
    return os.getenv("ENV", "development").lower() in ("production", "prod")


class Settings(BaseSettings):
    """
    DevConnector settings.

    Required for production:
        - JWT_SECRET_KEY (at least 32 chars, not a placeholder)
        - DATABASE_URL (a server database; SQLite has no row locks)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "DevConnector"
    api_prefix: str = "/api"
    debug: bool = Field(default=False)

    # Profile store
    database_url: str = Field(default="sqlite:///devconnector.db", validation_alias="DATABASE_URL")
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    auto_create_tables: bool = Field(default=False, validation_alias="AUTO_CREATE_TABLES")

    # Bearer tokens
    jwt_secret_key: str = Field(default="CHANGE_ME", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)

    cors_allowed_origins: str = Field(
        default="http://localhost:3000", validation_alias="CORS_ALLOWED_ORIGINS"
    )
    max_request_size_mb: int = Field(default=10, validation_alias="MAX_REQUEST_SIZE_MB")

    @field_validator("jwt_secret_key")
    @classmethod
    def check_jwt_secret(cls, v: str) -> str:
        """Reject weak signing secrets in production; only warn elsewhere."""
        problem = None
        if v.lower() in WEAK_SECRETS:
            problem = f"JWT_SECRET_KEY is a placeholder value ('{v}')"
        elif len(v) < MIN_SECRET_LENGTH:
            problem = f"JWT_SECRET_KEY should be at least {MIN_SECRET_LENGTH} characters (got {len(v)})"

        if problem is None:
            return v
        if running_in_production():
            raise ValueError(problem)
        warnings.warn(problem, UserWarning, stacklevel=2)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    def validate_production_config(self) -> tuple[list[str], list[str]]:
        """
        Check the configuration before serving traffic.

        Returns:
            Tuple of (errors, warnings); errors are fatal in production
        """
        errors = []
        advisories = []

        if self.jwt_secret_key.lower() in WEAK_SECRETS:
            errors.append("JWT_SECRET_KEY must be set for production")
        elif len(self.jwt_secret_key) < MIN_SECRET_LENGTH:
            errors.append(f"JWT_SECRET_KEY must be at least {MIN_SECRET_LENGTH} characters")

        if self.is_sqlite:
            advisories.append(
                "DATABASE_URL points at SQLite; experience updates are not row-locked"
            )

        if "localhost" in self.cors_allowed_origins:
            advisories.append("CORS_ALLOWED_ORIGINS includes localhost")

        return errors, advisories


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


__all__ = ["Settings", "get_settings", "running_in_production"]
