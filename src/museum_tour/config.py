"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from museum_tour.domain.chunks import NarrativeMode

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:8000"
    api_timeout_seconds: float = Field(default=30, gt=0)
    stream_timeout_seconds: float = Field(default=120, gt=0)
    audio_voice: str | None = None
    log_level: str = "INFO"
    audio_progress_step: float = Field(default=5.0, gt=0)
    narrative_mode: str = NarrativeMode.REPLACE.value
    supabase_url: str
    supabase_service_key: str
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_narrative_mode(raw: str | None) -> NarrativeMode:
    """Parse the narrative combination mode from env."""
    if raw is None:
        return NarrativeMode.REPLACE
    cleaned = raw.strip().lower()
    if not cleaned:
        return NarrativeMode.REPLACE
    try:
        return NarrativeMode(cleaned)
    except ValueError:
        allowed = ", ".join(mode.value for mode in NarrativeMode)
        raise ValueError(
            f"Unknown narrative mode {raw!r}; expected one of: {allowed}"
        ) from None
