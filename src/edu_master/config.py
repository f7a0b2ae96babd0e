"""Runtime configuration read from the environment and ``.env``."""

from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """EduMaster settings.

    Only the provider selected by ``llm_provider`` needs an API key;
    keys are SecretStr so they never show up in reprs or logs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"

    # Model provider: gemini | anthropic | openai | deepseek
    llm_provider: str = "gemini"

    gemini_api_key: SecretStr | None = None
    anthropic_api_key: SecretStr | None = None
    openai_api_key: SecretStr | None = None
    deepseek_api_key: SecretStr | None = None

    gemini_default_model: str = "gemini-2.5-flash"
    anthropic_default_model: str = "claude-sonnet-4-20250514"
    openai_default_model: str = "gpt-4o-mini"
    deepseek_default_model: str = "deepseek-chat"
    deepseek_base_url: str = "https://api.deepseek.com"

    # Retry policy for 429/503 failures
    llm_max_attempts: int = Field(default=5, ge=1)
    llm_base_delay: float = Field(default=2.0, ge=0)
    llm_max_jitter: float = Field(default=1.0, ge=0)

    batch_step_delay: float = Field(default=0.5, ge=0)

    storage_dir: Path = Path(".edu_master")
    export_dir: Path = Path("exports")

    @field_validator("llm_provider", "log_level")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("llm_provider")
    @classmethod
    def _lowercase_provider(cls, value: str) -> str:
        return value.lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    return Settings()
