"""Application configuration and settings management."""

from typing import Any

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Storefront Availability Engine"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied by the app factory.")
    timezone: str = Field(
        default="UTC",
        description="Shop-local IANA timezone used for weekdays, clock times, holidays and peak hours.",
    )

    closing_soon_minutes: int = Field(default=30, ge=0)
    closure_grace_seconds: float = Field(default=1.0, ge=0.0)
    reopen_poll_interval_seconds: float = Field(default=30.0, gt=0.0)

    max_delivery_distance_km: float = Field(default=5.0, ge=0.0)
    free_delivery_threshold: float = Field(default=500.0, ge=0.0)
    peak_hour_rate: float = Field(default=16.111, ge=0.0)
    normal_hour_rate: float = Field(default=11.111, ge=0.0)
    peak_hour_start: int = Field(default=11, ge=0, le=23)
    peak_hour_end: int = Field(default=13, ge=0, le=24)
    base_delivery_fee: float = Field(default=0.0, ge=0.0)
    fallback_price_per_km: float = Field(
        default=5.0,
        ge=0.0,
        description="Rate used when the admin price-per-km setting is present but not a finite number.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()


settings = Settings()
