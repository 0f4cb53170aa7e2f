"""Application configuration via pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    # Conversation
    chat_gpt_system_prompt: str = "You are a helpful assistant."
    gpt_thread_max_count: int | None = None  # None or <= 0 keeps the whole thread

    # Completion service
    completion_protocol: Literal["chat", "retrieval"] = "chat"
    openai_api_url: str = ""
    openai_api_key: str = ""
    openai_deploy_name: str = ""
    openai_api_version: str = "2023-03-15-preview"

    # Moderation
    moderation_backend: Literal["static", "blob"] = "static"
    azure_storage_connection_string: str = ""
    moderation_container: str = "ngwordcontainer"
    moderation_blob_name: str = "ngwords.txt"
    moderation_fail_closed: bool = False

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080

    @field_validator("gpt_thread_max_count", mode="before")
    @classmethod
    def _blank_max_count_is_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
