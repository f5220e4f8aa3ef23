"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

_PLATFORM_ALIASES = {
    "ios": "healthkit",
    "healthkit": "healthkit",
    "apple": "healthkit",
    "android": "googlefit",
    "googlefit": "googlefit",
    "google_fit": "googlefit",
    "health_connect": "googlefit",
    "healthconnect": "googlefit",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    nutrition_provider: Literal["nutritionix", "off"] = "nutritionix"
    nutritionix_app_id: str | None = None
    nutritionix_app_key: str | None = None
    nutritionix_base_url: str = "https://trackapi.nutritionix.com/v2"
    off_base_url: str = "https://world.openfoodfacts.org"
    plan_functions_base_url: str | None = None
    plan_generation_timeout_seconds: float = 120.0
    health_platform: str | None = None
    health_bridge_url: str | None = None
    health_timeout_seconds: float = 15.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_platform_tag(raw: str | None) -> str | None:
    """Normalize a configured health platform tag."""
    if raw is None:
        return None
    cleaned = raw.strip().lower().replace("-", "_").replace(" ", "_")
    if not cleaned:
        return None
    return _PLATFORM_ALIASES.get(cleaned, cleaned)
