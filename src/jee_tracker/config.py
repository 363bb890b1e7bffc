"""
Configuration for the tracker.
Settings come from environment variables (prefix ``JEE_TRACKER_``) or a .env file.
"""
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from jee_tracker.db import DEFAULT_DB_PATH

EXAM_DATE = "2026-01-21"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    db_path: str = Field(
        default=DEFAULT_DB_PATH,
        description="SQLite file holding the state document"
    )

    # Assistant
    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("JEE_TRACKER_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY"),
        description="Google Gemini API key; the assistant is unavailable without it"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model used by the assistant"
    )
    request_timeout: float = Field(
        default=60.0,
        description="Assistant request timeout in seconds"
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level"
    )
    export_dir: str = Field(
        default=".",
        description="Directory for backups and CSV exports"
    )

    model_config = SettingsConfigDict(
        env_prefix="JEE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore"
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
