"""Tests for application configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from edu_master.config import Environment, Settings, get_settings


class TestSettings:
    """Test Settings model validation and defaults."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings loads with all defaults (no env vars needed)."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("LLM_PROVIDER", raising=False)
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.environment == Environment.DEVELOPMENT
        assert s.llm_provider == "gemini"
        assert s.gemini_default_model == "gemini-2.5-flash"

    def test_retry_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.llm_max_attempts == 5
        assert s.llm_base_delay == 2.0
        assert s.llm_max_jitter == 1.0
        assert s.batch_step_delay == 0.5

    def test_storage_paths(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.storage_dir == Path(".edu_master")
        assert s.export_dir == Path("exports")

    def test_secret_str_not_exposed(self) -> None:
        """API keys are not exposed in repr or string conversion."""
        s = Settings(
            gemini_api_key="super-secret-key",  # type: ignore[arg-type]
            _env_file=None,  # type: ignore[call-arg]
        )
        assert "super-secret-key" not in repr(s)
        assert s.gemini_api_key is not None
        assert s.gemini_api_key.get_secret_value() == "super-secret-key"

    def test_api_keys_optional(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.gemini_api_key is None
        assert s.anthropic_api_key is None
        assert s.openai_api_key is None
        assert s.deepseek_api_key is None

    def test_environment_enum(self) -> None:
        s = Settings(environment="production", _env_file=None)  # type: ignore[arg-type, call-arg]
        assert s.environment == Environment.PRODUCTION

    def test_invalid_environment(self) -> None:
        with pytest.raises(ValidationError):
            Settings(environment="invalid", _env_file=None)  # type: ignore[arg-type, call-arg]

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("BATCH_STEP_DELAY", "1.5")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.llm_provider == "anthropic"
        assert s.batch_step_delay == 1.5

    def test_provider_normalized(self) -> None:
        s = Settings(llm_provider=" Anthropic ", _env_file=None)  # type: ignore[call-arg]
        assert s.llm_provider == "anthropic"

    def test_max_attempts_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(llm_max_attempts=0, _env_file=None)  # type: ignore[call-arg]


class TestGetSettings:
    def test_cached_singleton(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
