"""Application configuration using Pydantic settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "CallCoach Quality Engine"
    APP_VERSION: str = "0.1.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # JSON lines instead of the console renderer

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the level name and reject unknown levels."""
        level = str(v).upper()
        if level not in _LOG_LEVELS:
            msg = f"Unsupported LOG_LEVEL: {v}"
            raise ValueError(msg)
        return level

    # Call sessions
    CALL_MAX_INTERACTIONS: int = 10  # Automatic end after this many turns
    MAX_UTTERANCE_LENGTH: int = 1000  # Longer utterances are truncated before scoring

    # Monitoring
    ENABLE_PROMETHEUS_METRICS: bool = True


settings = Settings()
