"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized configuration loaded from environment or .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    groq_api_key: Optional[str] = Field(default=None, validation_alias="GROQ_API_KEY")
    openfda_label_url: str = "https://api.fda.gov/drug/label.json"
    label_limit: int = 100
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "moonshotai/kimi-k2-instruct-0905"
    llm_timeout_s: Optional[float] = None
    search_debounce_s: float = 0.8


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def read_api_key() -> Optional[str]:
    """Read the chat-completion credential fresh from the environment."""
    return Settings().groq_api_key or None
