"""OpenAI-compatible provider (OpenAI + DeepSeek)."""

from collections.abc import AsyncIterator
from typing import Any

import openai

from edu_master.llm.providers.base import ContentBlockedError, LLMProvider
from edu_master.llm.schemas import LLMRequest, LLMResponse


class OpenAICompatProvider(LLMProvider):
    """Provider for OpenAI API and compatible services (DeepSeek).

    DeepSeek uses the same API format with a different base_url.
    """

    def __init__(
        self,
        api_key: str,
        default_model: str,
        provider_name: str = "openai",
        base_url: str | None = None,
    ) -> None:
        super().__init__()
        self.provider_name = provider_name
        self._default_model = default_model
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
        )

    def _kwargs(self, request: LLMRequest) -> dict[str, Any]:
        messages: list[dict[str, str]] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.prompt})
        kwargs: dict[str, Any] = {
            "model": request.model or self._default_model,
            "messages": messages,
            "max_tokens": request.max_tokens,
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        return kwargs

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Generate text completion via OpenAI-compatible API."""
        kwargs = self._kwargs(request)

        with self._measure_latency() as timer:
            response = await self._client.chat.completions.create(**kwargs)

        choice = response.choices[0]
        if choice.finish_reason == "content_filter":
            raise ContentBlockedError("finish_reason=content_filter")
        usage = response.usage
        return LLMResponse(
            content=choice.message.content or "",
            provider=self.provider_name,
            model_id=kwargs["model"],
            tokens_in=usage.prompt_tokens if usage else None,
            tokens_out=usage.completion_tokens if usage else None,
            latency_ms=timer.elapsed_ms,
        )

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        """Open a streamed chat completion."""
        chunks = await self._client.chat.completions.create(
            **self._kwargs(request), stream=True
        )
        return _iter_text(chunks)


async def _iter_text(chunks: AsyncIterator[Any]) -> AsyncIterator[str]:
    async for chunk in chunks:
        if not chunk.choices:
            continue
        choice = chunk.choices[0]
        if choice.finish_reason == "content_filter":
            raise ContentBlockedError("finish_reason=content_filter")
        if choice.delta.content:
            yield choice.delta.content
