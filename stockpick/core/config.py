"""Application settings with Pydantic validation and environment loading."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_AUTH_SECRET = "dev-secret-please-change-in-production-min-32-chars"
MIN_SECRET_LENGTH = 32


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
    app_name: str = "Stockpick API"
    app_version: str = "1.0.0"
    debug: bool = Field(
        default=False, description="Enable debug mode (disable in production)"
    )
    root_path: str = Field(default="", description="Root path for reverse proxy")
    environment: str = Field(
        default="production",
        description="Environment: development, staging, production",
    )

    # Security
    auth_secret: str = Field(
        default=DEFAULT_AUTH_SECRET,
        description="Secret key for JWT signing (min 32 chars in production)",
    )
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7, ge=1, description="JWT expiration in minutes"
    )

    # CORS
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"],
        description="Allowed CORS origins (no wildcards with credentials)",
    )

    # Document store
    store_backend: str = Field(
        default="valkey", description="Document store backend: valkey or memory"
    )
    valkey_url: str = Field(
        default="redis://valkey:6379/0", description="Valkey connection URL"
    )
    valkey_max_connections: int = Field(default=10, ge=1, le=100)
    store_prefix: str = Field(
        default="stockpick", description="Key prefix for all stored documents"
    )

    # Usage quota
    quota_default_limit: int = Field(
        default=5, ge=0, description="Monthly AI analysis limit for new users"
    )
    quota_default_enabled: bool = Field(
        default=True, description="Enforce the monthly limit for new users"
    )
    quota_timezone: str = Field(
        default="Asia/Seoul", description="Timezone that defines the billing month"
    )

    # Static catalog
    catalog_dir: Optional[str] = Field(
        default=None, description="Directory with stocks.json, etfs.json, averages.json"
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

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"valkey", "memory"}:
            raise ValueError("store_backend must be 'valkey' or 'memory'")
        return lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid:
            raise ValueError(f"log_level must be one of {valid}")
        return upper

    @model_validator(mode="after")
    def require_real_secret_in_production(self) -> "Settings":
        if self.is_production and (
            self.auth_secret == DEFAULT_AUTH_SECRET or len(self.auth_secret) < MIN_SECRET_LENGTH
        ):
            raise ValueError(
                f"auth_secret must be set to a private value of at least {MIN_SECRET_LENGTH} characters in production"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached settings factory."""
    return Settings()


settings = get_settings()
