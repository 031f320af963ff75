"""
Application configuration with environment-driven settings.

Values come from the process environment (and a ``.env`` file when present).
The command line entry point layers its flags on top by passing them as init
arguments, which pydantic-settings ranks above every environment source.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "contactbook"
    port: int = Field(default=4000, ge=1, le=65535)
    env: Literal["development", "staging", "production"] = "development"
    debug: bool = Field(
        default=False,
        description="Send the full stack trace of server errors in the response",
    )
    verbose: bool = Field(
        default=False,
        description="Log every request, including static assets",
    )
    log_level: str = "INFO"

    # Database
    db_dsn: str = Field(..., description="Database connection URL")
    db_max_open_conns: int = Field(default=25, ge=1)
    db_max_idle_conns: int = Field(default=25, ge=0)
    db_max_idle_time: timedelta = Field(default=timedelta(minutes=15))
    db_pool_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for a free pooled connection",
    )
    db_auto_create: bool = Field(
        default=True,
        description="Create missing tables on startup",
    )

    # Sessions
    session_secret: str = Field(
        default="change-me-in-production-use-secrets-manager",
        description="Secret key used to sign the session cookie",
    )
    session_lifetime: timedelta = Field(default=timedelta(hours=12))
    session_cookie: str = "session"

    @field_validator("db_dsn")
    @classmethod
    def normalize_dsn(cls, v: str) -> str:
        """Rewrite bare driver schemes to their asyncio dialect."""
        v = v.strip()
        if not v:
            raise ValueError("db_dsn must not be empty")
        scheme, sep, rest = v.partition("://")
        if sep and scheme in _ASYNC_DRIVERS:
            return f"{_ASYNC_DRIVERS[scheme]}://{rest}"
        return v

    @model_validator(mode="after")
    def check_pool_bounds(self) -> "Settings":
        if self.db_max_idle_conns > self.db_max_open_conns:
            self.db_max_idle_conns = self.db_max_open_conns
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.db_dsn.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
