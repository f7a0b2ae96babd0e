"""Build the provider selected in settings.

Each PROVIDER_CONFIGS entry names the Settings fields that hold the
provider's key, default model and (optionally) base URL. A new backend
needs a registry class plus one entry here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import SecretStr

from edu_master.config import Settings
from edu_master.errors import ProviderNotConfiguredError
from edu_master.llm.providers import PROVIDER_REGISTRY, LLMProvider

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProviderFactoryConfig:
    key_field: str
    model_field: str
    base_url_field: str | None = None
    extra_kwargs: dict[str, Any] = field(default_factory=dict)

    def api_key(self, settings: Settings) -> SecretStr | None:
        return getattr(settings, self.key_field)

    def provider_kwargs(self, settings: Settings, api_key: SecretStr) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "api_key": api_key.get_secret_value(),
            "default_model": getattr(settings, self.model_field),
        }
        if self.base_url_field is not None:
            kwargs["base_url"] = getattr(settings, self.base_url_field)
        return {**kwargs, **self.extra_kwargs}


PROVIDER_CONFIGS: dict[str, ProviderFactoryConfig] = {
    "gemini": ProviderFactoryConfig("gemini_api_key", "gemini_default_model"),
    "anthropic": ProviderFactoryConfig("anthropic_api_key", "anthropic_default_model"),
    "openai": ProviderFactoryConfig("openai_api_key", "openai_default_model"),
    "deepseek": ProviderFactoryConfig(
        "deepseek_api_key",
        "deepseek_default_model",
        base_url_field="deepseek_base_url",
        extra_kwargs={"provider_name": "deepseek"},
    ),
}


def create_provider(settings: Settings, name: str | None = None) -> LLMProvider:
    """Instantiate ``name`` (default: ``settings.llm_provider``).

    Raises:
        ProviderNotConfiguredError: Unknown provider, or its key is unset.
    """
    provider_name = name or settings.llm_provider
    provider_cls = PROVIDER_REGISTRY.get(provider_name)
    config = PROVIDER_CONFIGS.get(provider_name)
    if provider_cls is None or config is None:
        raise ProviderNotConfiguredError(
            f"Unknown LLM provider: '{provider_name}'. "
            f"Available: {', '.join(sorted(PROVIDER_REGISTRY))}"
        )

    api_key = config.api_key(settings)
    if api_key is None:
        logger.warning("llm_provider_missing_key", provider=provider_name)
        raise ProviderNotConfiguredError(
            f"No API key configured for provider '{provider_name}' "
            f"(set {config.key_field.upper()})"
        )

    kwargs = config.provider_kwargs(settings, api_key)
    provider = provider_cls(**kwargs)
    logger.info("llm_provider_selected", provider=provider_name, model=kwargs["default_model"])
    return provider
