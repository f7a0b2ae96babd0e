"""LLM provider implementations.

PROVIDER_REGISTRY maps provider names (``Settings.llm_provider``)
to their implementation classes. To add a new provider:

1. Create a new module in this package (e.g., mistral.py)
2. Implement LLMProvider subclass
3. Add entry to PROVIDER_REGISTRY below and PROVIDER_CONFIGS in factory.py
"""

from edu_master.llm.providers.anthropic import AnthropicProvider
from edu_master.llm.providers.base import ContentBlockedError, LLMProvider
from edu_master.llm.providers.gemini import GeminiProvider
from edu_master.llm.providers.openai_compat import OpenAICompatProvider

PROVIDER_REGISTRY: dict[str, type[LLMProvider]] = {
    "gemini": GeminiProvider,
    "anthropic": AnthropicProvider,
    "openai": OpenAICompatProvider,
    "deepseek": OpenAICompatProvider,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "AnthropicProvider",
    "ContentBlockedError",
    "GeminiProvider",
    "LLMProvider",
    "OpenAICompatProvider",
]
