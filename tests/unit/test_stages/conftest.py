"""Fixtures for stage controller tests."""

from collections.abc import AsyncIterator, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from edu_master.errors import GenerationError
from edu_master.llm.client import GenerationClient
from edu_master.models.program import ApiState


def _stream(*items: str | GenerationError) -> AsyncIterator[str]:
    async def _gen() -> AsyncIterator[str]:
        for item in items:
            if isinstance(item, GenerationError):
                raise item
            yield item

    return _gen()


@pytest.fixture()
def stream_of() -> Callable[..., AsyncIterator[str]]:
    """Build an async fragment stream; a GenerationError item is raised in place."""
    return _stream


@pytest.fixture()
def client() -> MagicMock:
    """GenerationClient double: ``generate`` is an AsyncMock, ``generate_stream``
    returns whatever ``side_effect``/``return_value`` the test configures."""
    fake = MagicMock(spec=GenerationClient)
    fake.generate = AsyncMock(return_value="")
    fake.generate_stream = MagicMock(side_effect=lambda *a, **kw: _stream())
    return fake


@pytest.fixture()
def published() -> list[ApiState]:
    return []


@pytest.fixture()
def on_change(published: list[ApiState]) -> Callable[[ApiState], None]:
    return published.append
