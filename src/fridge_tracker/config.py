"""Application configuration."""

import os
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

from fridge_tracker.adapters.google_calendar_client import DEFAULT_BASE_URL
from fridge_tracker.adapters.google_identity_broker import (
    DEFAULT_REVOKE_URL,
    DEFAULT_TOKEN_URL,
)

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    google_client_id: str
    google_client_secret: str
    google_refresh_token: str | None = None
    google_api_base_url: str = DEFAULT_BASE_URL
    google_token_url: str = DEFAULT_TOKEN_URL
    google_revoke_url: str = DEFAULT_REVOKE_URL
    food_calendar_name: str = "食材"
    food_calendar_color_id: str = "5"
    timezone: str = "Asia/Tokyo"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def tzinfo(self) -> ZoneInfo:
        """Viewer time zone used for day buckets and month windows."""
        return ZoneInfo(self.timezone)
