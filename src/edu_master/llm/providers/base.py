"""Provider contract shared by every model backend."""

import abc
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass

from edu_master.llm.schemas import LLMRequest, LLMResponse


class ContentBlockedError(Exception):
    """The backend refused the prompt or stopped the answer on safety grounds.

    ``str(exc)`` contains ``SAFETY`` for every provider.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"SAFETY: content blocked ({reason})")


@dataclass
class LatencyTimer:
    """``with`` block that records wall time in milliseconds."""

    elapsed_ms: int = 0
    _started: float = 0.0

    def __enter__(self) -> "LatencyTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.elapsed_ms = round((time.perf_counter() - self._started) * 1000)


class LLMProvider(abc.ABC):
    """One model backend.

    ``complete`` returns the whole answer. ``stream`` is a coroutine that
    opens the stream and returns the fragment iterator, so a refused
    connection is raised before iteration starts.
    """

    provider_name: str = ""

    @abc.abstractmethod
    async def complete(self, request: LLMRequest) -> LLMResponse: ...

    @abc.abstractmethod
    async def stream(self, request: LLMRequest) -> AsyncIterator[str]: ...

    def _measure_latency(self) -> LatencyTimer:
        return LatencyTimer()
