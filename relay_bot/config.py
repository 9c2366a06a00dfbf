import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache


GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


class Settings(BaseSettings):
    # Telegram
    telegram_bot_token: str
    telegram_webhook_secret: str = ""  # Optional: for webhook verification
    required_channel: str  # @channelusername or numeric chat id

    # Gemini (via OpenAI-compatible endpoint)
    gemini_api_key: str
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = GEMINI_OPENAI_BASE_URL

    # Registry of chats that have used the bot
    users_file: str = "users.json"

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    @field_validator("telegram_bot_token", "gemini_api_key", "required_channel")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.strip().upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
