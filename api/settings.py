"""
Application settings using pydantic-settings for type-safe configuration.

All environment variables are centralized here with proper typing, validation,
and sensible defaults. Settings are loaded once at startup and cached.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development.
    Production values should be set via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Config Store ===
    store_backend: str = Field(
        default="memory",
        description="Config store backend: 'memory' (development) or 'pocketbase'",
    )

    # === PocketBase Configuration ===
    pocketbase_url: str = Field(
        default="http://127.0.0.1:8090",
        description="PocketBase server URL",
    )
    pocketbase_admin_email: str = Field(
        default="admin@archiver.local",
        description="PocketBase admin email for API authentication",
    )
    pocketbase_admin_password: str = Field(
        default="",
        description="PocketBase admin password (required - no default for security)",
    )
    skip_pb_auth: bool = Field(
        default=False,
        description="Skip PocketBase authentication on startup (for testing)",
    )

    # === Sampling Policy ===
    default_monitor_sampling_period: float = Field(
        default=1.0,
        description="Sampling period in seconds when the caller does not override policy parameters",
    )
    minimum_sampling_period: float = Field(
        default=0.1,
        description="Floor applied to caller supplied sampling periods, in seconds",
    )
    standard_fields_str: str = Field(
        default="HIHI,HIGH,LOW,LOLO,LOPR,HOPR,DRVH,DRVL",
        alias="STANDARD_FIELDS",
        description="Fields archived as part of the stream (comma-separated)",
    )

    # === Engine ===
    engine_url: str = Field(
        default="",
        description="Base URL of the archiving engine; empty disables engine notification",
    )
    engine_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for a single engine notification",
    )

    # === CORS Configuration ===
    allowed_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="ALLOWED_ORIGINS",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Parse comma-separated origins string into list."""
        return [origin.strip() for origin in self.allowed_origins_str.split(",") if origin.strip()]

    @property
    def standard_fields(self) -> list[str]:
        """Parse comma-separated standard fields into list."""
        return [f.strip() for f in self.standard_fields_str.split(",") if f.strip()]

    @field_validator("store_backend", mode="after")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate and normalize store_backend."""
        v = v.lower()
        if v not in ("memory", "pocketbase"):
            raise ValueError(f"Invalid STORE_BACKEND: {v}. Must be 'memory' or 'pocketbase'")
        return v

    @field_validator("minimum_sampling_period", "default_monitor_sampling_period", mode="after")
    @classmethod
    def validate_positive_period(cls, v: float) -> float:
        """Sampling periods must be positive."""
        if v <= 0:
            raise ValueError(f"Sampling period must be positive, got {v}")
        return v

    @field_validator("pocketbase_admin_password", mode="after")
    @classmethod
    def validate_admin_password(cls, v: str) -> str:
        """Warn when the admin password is unset or an insecure default."""
        insecure_defaults = {"password", "admin", "123456", ""}
        if v in insecure_defaults:
            logger.warning(
                "SECURITY WARNING: POCKETBASE_ADMIN_PASSWORD is not set or uses an insecure default. "
                "Set a strong password in your .env file for production use."
            )
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
