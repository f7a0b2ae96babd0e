"""GenerationClient -- single entry point for all model calls.

Wraps one LLMProvider with:
1. Retry with exponential backoff + jitter for transient failures
   (rate limit, overload); other failures fail immediately.
2. Failure classification and translation into a user-facing
   message carried by GenerationError.

No caching happens here; stage controllers own their caches.
"""

import asyncio
import json
import random
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, TypeVar

import structlog

from edu_master.errors import FailureCategory, GenerationError
from edu_master.llm.providers.base import ContentBlockedError, LLMProvider
from edu_master.llm.schemas import LLMRequest

logger = structlog.get_logger()

_T = TypeVar("_T")

SleepFn = Callable[[float], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_BASE_DELAY = 2.0
DEFAULT_MAX_JITTER = 1.0

_RATE_LIMIT_MARKERS = ("429", "quota", "RESOURCE_EXHAUSTED", "rate limit", "rate_limit")
_OVERLOAD_MARKERS = ("503", "UNAVAILABLE", "overloaded")

FAILURE_MESSAGES: dict[FailureCategory, str] = {
    FailureCategory.RATE_LIMITED: (
        "⚠️ 사용량 한도(Quota)를 초과했습니다. "
        "1분 정도 기다린 후 다시 시도해주세요. (Code 429)"
    ),
    FailureCategory.OVERLOADED: (
        "⚠️ 서비스가 일시적으로 혼잡합니다. 잠시 후 다시 시도해주세요. (Code 503)"
    ),
    FailureCategory.SAFETY_BLOCKED: "⚠️ 안전 정책에 의해 콘텐츠 생성이 차단되었습니다.",
}
UNKNOWN_ERROR_PREFIX = "오류 발생: "
UNKNOWN_ERROR_FALLBACK = "알 수 없는 오류가 발생했습니다."


def classify_failure(exc: BaseException) -> FailureCategory:
    """Classify an exception raised by a provider SDK.

    Uses duck typing (getattr) to avoid importing SDK-specific
    exception classes -- works with anthropic, openai, google-genai.
    Numeric status is checked first, then the message text.
    """
    if isinstance(exc, ContentBlockedError):
        return FailureCategory.SAFETY_BLOCKED

    for attr in ("status_code", "code", "status"):
        status = getattr(exc, attr, None)
        if isinstance(status, int) and not isinstance(status, bool):
            if status == 429:
                return FailureCategory.RATE_LIMITED
            if status in (503, 529):
                return FailureCategory.OVERLOADED

    text = _failure_text(exc)
    if any(marker in text for marker in _RATE_LIMIT_MARKERS):
        return FailureCategory.RATE_LIMITED
    if any(marker in text for marker in _OVERLOAD_MARKERS):
        return FailureCategory.OVERLOADED
    if "SAFETY" in text:
        return FailureCategory.SAFETY_BLOCKED
    return FailureCategory.UNKNOWN


def _failure_text(exc: BaseException) -> str:
    parts = [str(exc)]
    status = getattr(exc, "status", None)
    if isinstance(status, str):
        parts.append(status)
    body = getattr(exc, "body", None)
    if body:
        parts.append(json.dumps(body, default=str) if not isinstance(body, str) else body)
    return " ".join(parts)


def extract_error_message(exc: BaseException) -> str:
    """Return the human part of an error, unwrapping ``{"error": {"message"}}`` JSON."""
    message = str(exc).strip() or UNKNOWN_ERROR_FALLBACK
    if message.startswith("{"):
        try:
            payload: Any = json.loads(message)
        except json.JSONDecodeError:
            return message
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
    return message


def format_error(exc: BaseException, category: FailureCategory) -> str:
    """Translate a failure into the message shown to the user."""
    if category in FAILURE_MESSAGES:
        return FAILURE_MESSAGES[category]
    return f"{UNKNOWN_ERROR_PREFIX}{extract_error_message(exc)}"


class GenerationClient:
    """Sends (system prompt, user input) pairs to a provider.

    Args:
        provider: Provider that performs the actual network call.
        max_attempts: Total attempts per call, including the first.
        base_delay: Delay in seconds before the first retry; doubles
            on every following retry.
        max_jitter: Upper bound of the random delay added to each wait.
            Capped at ``base_delay`` so waits are strictly increasing.
        sleep: Awaitable used for waiting (injectable for tests).
        rng: Returns a float in [0, 1) for jitter (injectable for tests).
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        max_jitter: float = DEFAULT_MAX_JITTER,
        sleep: SleepFn = asyncio.sleep,
        rng: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._provider = provider
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_jitter = max(0.0, min(max_jitter, base_delay))
        self._sleep = sleep
        self._rng = rng

    @property
    def provider_name(self) -> str:
        return self._provider.provider_name

    def backoff_delay(self, retry_index: int) -> float:
        """Seconds to wait before retry number ``retry_index`` (0-based)."""
        return self._base_delay * 2**retry_index + self._rng() * self._max_jitter

    async def generate(
        self,
        system_prompt: str,
        user_input: str,
        *,
        action: str = "",
    ) -> str:
        """Generate the full text in one call.

        Raises:
            GenerationError: Retries exhausted or non-retryable failure.
        """
        request = LLMRequest(prompt=user_input, system_prompt=system_prompt, action=action)
        response = await self._call_with_retries(
            lambda: self._provider.complete(request), action=action
        )
        logger.info(
            "llm_call_completed",
            provider=response.provider,
            model=response.model_id,
            action=action,
            tokens_in=response.tokens_in,
            tokens_out=response.tokens_out,
            latency_ms=response.latency_ms,
        )
        return response.content

    async def generate_stream(
        self,
        system_prompt: str,
        user_input: str,
        *,
        action: str = "",
    ) -> AsyncIterator[str]:
        """Yield text fragments as they arrive.

        Only opening the stream is retried; a failure after the first
        fragment propagates as GenerationError.
        """
        request = LLMRequest(prompt=user_input, system_prompt=system_prompt, action=action)
        fragments = await self._call_with_retries(
            lambda: self._provider.stream(request), action=action
        )
        count = 0
        try:
            async for fragment in fragments:
                if fragment:
                    count += 1
                    yield fragment
        except GenerationError:
            raise
        except Exception as exc:
            category = classify_failure(exc)
            logger.warning(
                "llm_stream_interrupted",
                provider=self.provider_name,
                action=action,
                fragments=count,
                category=category,
                error=str(exc),
            )
            raise GenerationError(category, format_error(exc, category)) from exc
        logger.info(
            "llm_stream_completed",
            provider=self.provider_name,
            action=action,
            fragments=count,
        )

    # -- internal: retry loop -------------------------------------------

    async def _call_with_retries(
        self,
        call: Callable[[], Awaitable[_T]],
        *,
        action: str,
    ) -> _T:
        """Retry ``call`` with exponential backoff on transient failures."""
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await call()
            except Exception as exc:
                category = classify_failure(exc)
                if not category.retryable or attempt == self._max_attempts:
                    logger.warning(
                        "llm_call_failed",
                        provider=self.provider_name,
                        action=action,
                        attempt=attempt,
                        max_attempts=self._max_attempts,
                        category=category,
                        error=str(exc),
                    )
                    raise GenerationError(
                        category, format_error(exc, category), attempts=attempt
                    ) from exc

                wait = self.backoff_delay(attempt - 1)
                logger.warning(
                    "llm_call_retrying",
                    provider=self.provider_name,
                    action=action,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                    category=category,
                    wait_s=round(wait, 2),
                )
                await self._sleep(wait)

        raise AssertionError("retry loop exited without result")  # pragma: no cover
