"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEFAULT_GEMINI_MODELS = [
    "gemini-2.0-flash",
    "gemini-2.5-flash",
    "gemini-1.5-flash",
    "models/gemini-2.0-flash",
    "models/gemini-2.5-flash",
    "models/gemini-1.5-flash",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    gemini_api_key: str
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    gemini_models: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GEMINI_MODELS)
    )
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 2048
    max_retries: int = Field(default=3, ge=0)
    backoff_base_seconds: float = Field(default=1.0, ge=0.0)
    store_backend: str = "sqlite"
    database_url: str = "sqlite:///data/nutrition.db"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    assemblyai_api_key: str | None = None
    assemblyai_base_url: str = "https://api.assemblyai.com/v2"
    transcription_language: str = "es"
    max_audio_bytes: int = 10 * 1024 * 1024
    host: str = "127.0.0.1"
    port: int = 3001
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_model_candidates(raw: list[str]) -> list[str]:
    """Normalize the configured model candidates, keeping order."""
    candidates: list[str] = []
    for chunk in raw:
        value = chunk.strip()
        if value and value not in candidates:
            candidates.append(value)
    return candidates
