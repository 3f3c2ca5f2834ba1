"""Environment configuration and validation.

This module defines strongly-typed application settings loaded from environment variables
(optionally via a local `.env` file).

It enforces the invariants the record store relies on, such as locking the DB session timezone to
UTC so stored creation timestamps compare deterministically, and keeping the connection pool
bounded.
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    `DATABASE_URL` wins when set; otherwise the DSN is composed from the individual `DB_*`
    variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="localhost", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="postgres", alias="DB_PASSWORD")
    db_name: str = Field(default="intent", alias="DB_NAME")
    db_timezone: str = Field(default="UTC", alias="DB_TIMEZONE")

    pool_min_size: int = Field(default=1, ge=0, alias="DB_POOL_MIN_SIZE")
    pool_max_size: int = Field(default=5, ge=1, alias="DB_POOL_MAX_SIZE")
    pool_max_lifetime: float = Field(default=30 * 60.0, gt=0, alias="DB_POOL_MAX_LIFETIME")
    pool_max_idle: float = Field(default=10 * 60.0, gt=0, alias="DB_POOL_MAX_IDLE")
    pool_timeout: float = Field(default=30.0, gt=0, alias="DB_POOL_TIMEOUT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("db_timezone")
    @classmethod
    def validate_db_timezone_is_utc(cls, value: str) -> str:
        """Validate that the DB timezone is locked to UTC.

        Creation timestamps are generated in UTC and date-range filters compare against them;
        any other session timezone is rejected at startup.
        """

        if value.upper() != "UTC":
            raise ValueError("DB_TIMEZONE must be UTC")
        return "UTC"

    @model_validator(mode="after")
    def validate_pool_bounds(self) -> Settings:
        """Validate that the pool minimum does not exceed its maximum."""

        if self.pool_min_size > self.pool_max_size:
            raise ValueError("DB_POOL_MIN_SIZE must be <= DB_POOL_MAX_SIZE")
        return self

    @property
    def dsn(self) -> str:
        """Postgres connection string used by the pool and the migration runner."""

        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{quote(self.db_user, safe='')}:{quote(self.db_password, safe='')}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Raises:
        RuntimeError: If the environment configuration is invalid.
    """

    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid environment configuration: {exc}") from exc
