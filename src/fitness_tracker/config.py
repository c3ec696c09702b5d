"""Application configuration."""

import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "supabase_url", "SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL"
        ),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "supabase_anon_key", "SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY"
        ),
    )
    functions_path: str = "/functions/v1"
    request_timeout_seconds: float = 15.0
    lookup_timeout_seconds: float = 8.0
    food_search_cache_size: int = 60
    search_debounce_seconds: float = 0.35
    default_body_weight_kg: float = 70.0
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def functions_base_url(self) -> str:
        """Return the Edge Function gateway URL without a trailing slash."""
        base = self.supabase_url.strip().rstrip("/")
        path = "/" + self.functions_path.strip("/")
        return f"{base}{path}"
