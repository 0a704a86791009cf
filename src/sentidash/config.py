from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sentidash.core.errors import ConfigurationError

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings with validation.

    All settings are loaded from environment variables (or a .env file).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Gemini
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.5-flash"
    request_timeout_sec: float = 60.0

    # Exports / evaluation
    output_dir: str = "."
    ground_truth_path: str = ""  # empty -> bundled reference set

    log_level: str = "INFO"

    @field_validator("request_timeout_sec")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"request_timeout_sec must be > 0, got {v}")
        return v

    @field_validator("gemini_model", "gemini_base_url")
    @classmethod
    def must_not_be_blank(cls, v: str, info) -> str:
        if not v.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got {v}")
        return level

    def validate_gemini_credentials(self) -> None:
        """Raise if the Gemini API key is missing."""
        if not self.gemini_api_key.strip():
            raise ConfigurationError("GEMINI_API_KEY must be set")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from environment."""
    global _settings
    _settings = Settings()
    return _settings
