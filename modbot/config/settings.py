"""Settings for the conversation memory subsystem.

Values come from ``MODBOT_``-prefixed environment variables or a local
``.env`` file, falling back to the defaults below.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Memory and storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MODBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Session tier
    max_session_messages: int = Field(default=100, gt=0)
    context_session_messages: int = Field(default=6, ge=0)

    # Durable tier
    max_stored_conversations: int = Field(default=50, gt=0)
    max_messages_per_conversation: int = Field(default=1000, gt=0)
    auto_save: bool = True
    storage_key: str = Field(default="modbot-conversations", min_length=1)
    database_url: str = "sqlite:///data/modbot.db"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
