"""Application settings with Pydantic validation and environment loading."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = "CycleScope Domain API"
    app_version: str = "1.0.0"
    debug: bool = Field(
        default=False, description="Enable debug mode (disable in production)"
    )
    root_path: str = Field(default="", description="Root path for reverse proxy")
    environment: str = Field(
        default="production",
        description="Environment: development, staging, production",
    )
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="HTTP port")

    # Database (empty URL means no store is configured)
    database_url: str = Field(
        default="",
        description="PostgreSQL connection URL",
    )
    db_pool_min_size: int = Field(
        default=2, ge=1, le=20, description="Minimum database pool connections"
    )
    db_pool_max_size: int = Field(
        default=10, ge=2, le=100, description="Maximum database pool connections"
    )

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: [
            "https://cyclescope-portal-production.up.railway.app",
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Allowed CORS origins (no wildcards with credentials)",
    )

    # Retention
    retention_days: int = Field(
        default=5, ge=1, le=90, description="Days of domain analyses to keep"
    )

    # Scheduler
    scheduler_enabled: bool = Field(
        default=False, description="Enable background job scheduler"
    )
    analysis_cron: str = Field(
        default="0 22 * * 1-5", description="Cron for the daily analysis run (UTC)"
    )
    cleanup_cron: str = Field(
        default="30 0 * * *", description="Cron for the retention sweep (UTC)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR"
    )
    log_format: str = Field(default="json", description="Log format: json or text")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return upper

    @property
    def has_database(self) -> bool:
        return bool(self.database_url.strip())

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached settings factory."""
    return Settings()


settings = get_settings()
