"""Anthropic Claude provider."""

from collections.abc import AsyncIterator
from typing import Any

import anthropic

from edu_master.llm.providers.base import ContentBlockedError, LLMProvider
from edu_master.llm.schemas import LLMRequest, LLMResponse


class AnthropicProvider(LLMProvider):
    """Anthropic provider using official SDK."""

    provider_name = "anthropic"

    def __init__(self, api_key: str, default_model: str) -> None:
        super().__init__()
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._default_model = default_model

    def _kwargs(self, request: LLMRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": request.model or self._default_model,
            "max_tokens": request.max_tokens,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.system_prompt:
            kwargs["system"] = request.system_prompt
        return kwargs

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Generate text completion via Anthropic."""
        kwargs = self._kwargs(request)

        with self._measure_latency() as timer:
            response = await self._client.messages.create(**kwargs)

        if response.stop_reason == "refusal":
            raise ContentBlockedError("stop_reason=refusal")
        return LLMResponse(
            content=response.content[0].text if response.content else "",
            provider=self.provider_name,
            model_id=kwargs["model"],
            tokens_in=response.usage.input_tokens,
            tokens_out=response.usage.output_tokens,
            latency_ms=timer.elapsed_ms,
        )

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        """Open a streamed message and yield its text deltas."""
        events = await self._client.messages.create(**self._kwargs(request), stream=True)
        return _iter_text(events)


async def _iter_text(events: AsyncIterator[Any]) -> AsyncIterator[str]:
    async for event in events:
        if event.type == "content_block_delta" and event.delta.type == "text_delta":
            yield event.delta.text
        elif event.type == "message_delta" and event.delta.stop_reason == "refusal":
            raise ContentBlockedError("stop_reason=refusal")
