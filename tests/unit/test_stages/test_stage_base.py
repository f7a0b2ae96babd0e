"""Tests for StageController state transitions and the stale-result guard."""

import asyncio
from collections.abc import AsyncIterator, Callable
from unittest.mock import MagicMock

from edu_master.errors import FailureCategory, GenerationError
from edu_master.models.program import ApiState, MaterialKind
from edu_master.stages.base import (
    OTHER_OPTION,
    PreparedPrompt,
    StageController,
    resolve_choice,
)
from edu_master.stages.materials import MaterialController
from edu_master.state.store import ProgramStore

PREPARED = PreparedPrompt(system_prompt="sys", user_prompt="user", prompt_version="v1")


def _rate_limited() -> GenerationError:
    return GenerationError(FailureCategory.RATE_LIMITED, "⚠️ quota", attempts=5)


class TestResolveChoice:
    def test_regular_option(self) -> None:
        assert resolve_choice("원데이 클래스/특강", "ignored") == "원데이 클래스/특강"

    def test_other_uses_custom(self) -> None:
        assert resolve_choice(OTHER_OPTION, "  코딩 캠프 ") == "코딩 캠프"


class TestRunStream:
    async def test_publishes_cumulative_output(
        self,
        client: MagicMock,
        store: ProgramStore,
        stream_of: Callable[..., AsyncIterator[str]],
        published: list[ApiState],
        on_change: Callable[[ApiState], None],
    ) -> None:
        client.generate_stream.side_effect = lambda *a, **kw: stream_of("A", "B", "C")
        controller = StageController(client, store, on_change=on_change)

        text = await controller._run_stream(PREPARED, action="test")

        assert text == "ABC"
        assert published[0] == ApiState(is_loading=True)
        assert [s.output for s in published[1:4]] == ["A", "AB", "ABC"]
        assert all(s.is_loading for s in published[:4])
        assert published[-1] == ApiState(output="ABC")
        client.generate_stream.assert_called_once_with("sys", "user", action="test")

    async def test_error_ends_loading(
        self,
        client: MagicMock,
        store: ProgramStore,
        stream_of: Callable[..., AsyncIterator[str]],
    ) -> None:
        client.generate_stream.side_effect = lambda *a, **kw: stream_of("partial", _rate_limited())
        controller = StageController(client, store)

        assert await controller._run_stream(PREPARED, action="test") is None
        assert controller.api_state.is_loading is False
        assert controller.api_state.error == "⚠️ quota"

    async def test_fail_bumps_token(self, client: MagicMock, store: ProgramStore) -> None:
        controller = StageController(client, store)
        before = controller.token
        controller._fail("nope")
        assert controller.token == before + 1
        assert controller.api_state == ApiState(error="nope")


class TestStaleResults:
    async def test_superseded_stream_is_dropped(
        self, client: MagicMock, planned_store: ProgramStore
    ) -> None:
        gate = asyncio.Event()

        async def slow() -> AsyncIterator[str]:
            yield "old "
            await gate.wait()
            yield "stale"

        async def fast() -> AsyncIterator[str]:
            yield "new"

        client.generate_stream.side_effect = [slow(), fast()]
        controller = MaterialController(client, planned_store)

        first = asyncio.create_task(controller.generate(MaterialKind.QUIZ))
        while controller.api_state.output != "old ":
            await asyncio.sleep(0)

        assert await controller.generate(MaterialKind.SCRIPT) == "new"
        gate.set()
        assert await first is None

        assert controller.api_state == ApiState(output="new")
        cache = planned_store.state.material_cache
        assert cache == {MaterialKind.SCRIPT: "new"}

    async def test_superseded_atomic_call_is_dropped(
        self, client: MagicMock, store: ProgramStore
    ) -> None:
        controller = StageController(client, store)
        token = controller._begin()

        async def generate(*args: object, **kwargs: object) -> str:
            controller._show("cached")
            return "late result"

        client.generate.side_effect = generate
        assert await controller._call_atomic(token, PREPARED, action="test") is None
        assert controller.api_state == ApiState(output="cached")

    async def test_stale_error_is_dropped(self, client: MagicMock, store: ProgramStore) -> None:
        controller = StageController(client, store)
        token = controller._begin()

        async def generate(*args: object, **kwargs: object) -> str:
            controller._show("newer")
            raise _rate_limited()

        client.generate.side_effect = generate
        assert await controller._call_atomic(token, PREPARED, action="test") is None
        assert controller.api_state.error is None
        assert controller.api_state.output == "newer"
