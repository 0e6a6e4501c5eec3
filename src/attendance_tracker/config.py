"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from attendance_tracker.domain.qr import MAX_EXPIRY_MINUTES

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    qr_expiry_minutes: int = Field(default=10, ge=1, le=MAX_EXPIRY_MINUTES)
    active_session_cache_seconds: int = 5
    poll_interval_seconds: float = 5.0
    notify_webhook_url: str | None = None
    session_timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
