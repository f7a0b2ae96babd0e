"""Google Gemini provider via google-genai SDK."""

from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from edu_master.llm.providers.base import ContentBlockedError, LLMProvider
from edu_master.llm.schemas import LLMRequest, LLMResponse


class GeminiProvider(LLMProvider):
    """Gemini provider using google-genai SDK.

    Supports single-shot generation and streamed generation
    via ``generate_content_stream``.
    """

    provider_name = "gemini"

    def __init__(self, api_key: str, default_model: str) -> None:
        super().__init__()
        self._client = genai.Client(api_key=api_key)
        self._default_model = default_model

    def _config(self, request: LLMRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=request.temperature,
            max_output_tokens=request.max_tokens,
            system_instruction=request.system_prompt,
        )

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Generate text completion via Gemini."""
        model = request.model or self._default_model

        with self._measure_latency() as timer:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=request.prompt,
                config=self._config(request),
            )

        _raise_if_blocked(response)
        usage = response.usage_metadata
        return LLMResponse(
            content=response.text or "",
            provider=self.provider_name,
            model_id=model,
            tokens_in=usage.prompt_token_count if usage else None,
            tokens_out=usage.candidates_token_count if usage else None,
            latency_ms=timer.elapsed_ms,
        )

    async def stream(self, request: LLMRequest) -> AsyncIterator[str]:
        """Open a Gemini content stream."""
        response_stream = await self._client.aio.models.generate_content_stream(
            model=request.model or self._default_model,
            contents=request.prompt,
            config=self._config(request),
        )
        return _iter_text(response_stream)


async def _iter_text(response_stream: AsyncIterator[Any]) -> AsyncIterator[str]:
    async for chunk in response_stream:
        _raise_if_blocked(chunk)
        if chunk.text:
            yield chunk.text


def _raise_if_blocked(response: Any) -> None:
    """Raise ContentBlockedError when Gemini refused the prompt or answer."""
    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason:
        raise ContentBlockedError(str(feedback.block_reason))
    for candidate in response.candidates or []:
        if candidate.finish_reason == types.FinishReason.SAFETY:
            raise ContentBlockedError("finish_reason=SAFETY")
