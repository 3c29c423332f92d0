"""Configuration management for chorus."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_utils import configure_logging


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHORUS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_key: Optional[str] = Field(None, description="API key for the OpenAI-compatible provider")
    api_base: Optional[str] = Field(None, description="Optional API base URL")

    # Model Configuration
    chat_model: str = Field(default="gpt-3.5-turbo", description="Model behind the gpt3 chat preset")
    advanced_chat_model: str = Field(default="gpt-4", description="Model behind the gpt4 chat preset")
    completion_model: str = Field(
        default="gpt-3.5-turbo-instruct", description="Model behind the davinci single-turn preset"
    )
    max_tokens: int = Field(default=1024, description="Maximum tokens per generation")
    timeout_seconds: float = Field(default=60, description="Timeout for one completion request in seconds")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")


def get_settings() -> Settings:
    """Get application settings.

    Values come from ``CHORUS_*`` environment variables or a local ``.env``
    file. Logging is configured as a side effect so the first run is already
    observable.

    Returns:
        Settings instance
    """
    settings = Settings()

    configure_logging(level=settings.log_level)

    return settings
