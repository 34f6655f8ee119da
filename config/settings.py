"""Application settings and configuration management."""
from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_BUNDLED_CATALOG = Path(__file__).resolve().parents[1] / "dsa_catalog" / "data" / "problems.json"


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    CONFIG_PATH: str = Field(default="app_config.json")

    DSA_CATALOG_PATH: str = Field(default=str(_BUNDLED_CATALOG))
    DSA_PROBLEM_COUNT: int = Field(default=4, ge=1)
    CODING_PROBLEM_AFTER_ROUNDS: int = Field(default=3, ge=3, le=5)

    MAX_AUDIO_BYTES: int = Field(default=10 * 1024 * 1024, ge=1)
    RESUME_MAX_PAGES: int = Field(default=50, ge=1)

    LLM_TIMEOUT_S: float = Field(default=60.0, gt=0)
    TRANSCRIPTION_TIMEOUT_S: float = Field(default=60.0, gt=0)
    PROSODY_TIMEOUT_S: float = Field(default=30.0, gt=0)

    TRANSCRIPTION_BASE_URL: str = "https://api.assemblyai.com/v2"
    TRANSCRIPTION_API_KEY_ENV: str = "ASSEMBLY_AI_API_KEY"
    TRANSCRIPTION_POLL_INTERVAL_S: float = Field(default=1.0, gt=0)
    PROSODY_BASE_URL: str = "http://localhost:8081"

    SESSION_IDLE_MINUTES: int = Field(default=90, ge=1)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
