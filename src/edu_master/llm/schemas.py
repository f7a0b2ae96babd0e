"""Request/response records passed between GenerationClient and providers."""

from pydantic import BaseModel, ConfigDict


class LLMRequest(BaseModel):
    """One (system prompt, user input) pair.

    ``model`` left empty means the provider's default model; a ``None``
    temperature leaves the provider default in place. ``action`` only
    labels log lines (``plan``, ``material_quiz``, ...).
    """

    model_config = ConfigDict(frozen=True)

    prompt: str
    system_prompt: str | None = None
    model: str = ""
    temperature: float | None = None
    max_tokens: int = 8192
    action: str = ""


class LLMResponse(BaseModel):
    """Complete answer of an atomic call."""

    content: str
    provider: str
    model_id: str
    tokens_in: int | None = None
    tokens_out: int | None = None
    latency_ms: int = 0
