"""
config.py — Centralized Settings
=================================
Every setting the app needs, in one place. Reads from .env file.

Nothing here is strictly required at startup: the relay endpoints report
a missing OpenAI key as a normal error response, so a fresh checkout can
boot and serve the journal without any keys configured.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # --- AI Services ---
    openai_api_key: str = Field(default="", description="OpenAI API key for chat and transcription")
    anthropic_api_key: str = Field(default="", description="Anthropic API key, used when chat_provider is 'anthropic'")

    # --- Authentication ---
    daybook_api_key: str = Field(default="", description="Key for the first profile (setup_profile.py)")

    # --- Database ---
    database_url: str = Field(default="sqlite:///./daybook.db")

    # --- Server ---
    environment: str = Field(default="development")

    # --- AI Model Preferences ---
    # "openai" or "anthropic". The relay contract is the same for both.
    chat_provider: str = Field(default="openai")
    chat_model: str = Field(default="gpt-4o-mini")
    anthropic_chat_model: str = Field(default="claude-sonnet-4-20250514")
    chat_temperature: float = Field(default=0.7)
    chat_max_tokens: int = Field(default=1024)
    transcription_model: str = Field(default="whisper-1")

    # --- Journal ---
    preferences_file: str = Field(default="preferences.json")
    seed_fixtures: bool = Field(default=True)

    # --- Logging ---
    log_level: str = Field(default="INFO")
    log_file: str = Field(default="", description="Rotating log file path; empty logs to console only")


settings = Settings()
