"""Shared machinery for the four stage controllers.

Every controller owns one ApiState and a generation-sequence token.
Starting a request bumps the token; fragments, results and errors
from a request whose token is no longer the latest are discarded.
Generation failures end the pending state and never propagate out
of a controller.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import aclosing
from typing import NamedTuple

import structlog

from edu_master.errors import GenerationError
from edu_master.llm.client import GenerationClient
from edu_master.models.program import ApiState
from edu_master.stages.prompt_loader import PromptData, format_user_prompt
from edu_master.state.store import ProgramStore

logger = structlog.get_logger()

OnChange = Callable[[ApiState], None]

PLAN_REQUIRED_MESSAGE = "Step 1에서 수업 설계를 먼저 완료해주세요."
OTHER_OPTION = "기타"
UNDECIDED = "미정"


class PreparedPrompt(NamedTuple):
    """System prompt plus the filled user payload for one request."""

    system_prompt: str
    user_prompt: str
    prompt_version: str


def prepare_prompt(prompt: PromptData, **values: str) -> PreparedPrompt:
    return PreparedPrompt(
        system_prompt=prompt.system_prompt,
        user_prompt=format_user_prompt(prompt.user_prompt_template, **values),
        prompt_version=prompt.version,
    )


def resolve_choice(value: str, custom: str) -> str:
    """Replace the 기타 option with the user's custom text."""
    return custom.strip() if value == OTHER_OPTION else value


class StageController:
    """Base class: ApiState bookkeeping, token guard, stream folding.

    Args:
        client: Generation client shared by all stages.
        store: Program state owner.
        on_change: Called with the new ApiState after every change.
    """

    stage_name: str = ""

    def __init__(
        self,
        client: GenerationClient,
        store: ProgramStore,
        *,
        on_change: OnChange | None = None,
    ) -> None:
        self._client = client
        self._store = store
        self._on_change = on_change
        self._api_state = ApiState()
        self._token = 0

    @property
    def api_state(self) -> ApiState:
        return self._api_state

    @property
    def token(self) -> int:
        return self._token

    # -- state transitions ----------------------------------------------

    def _publish(self, state: ApiState) -> None:
        self._api_state = state
        if self._on_change is not None:
            self._on_change(state)

    def _begin(self) -> int:
        """Start a request: supersede older ones and enter loading state."""
        self._token += 1
        self._publish(ApiState(is_loading=True))
        return self._token

    def _is_current(self, token: int) -> bool:
        return token == self._token

    def _apply(self, token: int, state: ApiState) -> bool:
        """Publish ``state`` only if ``token`` is still the latest."""
        if not self._is_current(token):
            logger.debug(
                "stale_result_dropped",
                stage=self.stage_name,
                token=token,
                latest=self._token,
            )
            return False
        self._publish(state)
        return True

    def _fail(self, message: str) -> None:
        """Surface an error without calling the model."""
        self._token += 1
        self._publish(ApiState(error=message))

    def _show(self, output: str) -> None:
        """Replace the visible output (e.g. from cache) and supersede requests."""
        self._token += 1
        self._publish(ApiState(output=output))

    # -- generation ------------------------------------------------------

    async def _run_stream(self, prepared: PreparedPrompt, *, action: str) -> str | None:
        """Stream into ApiState; return the final text, or None if failed/stale."""
        token = self._begin()
        parts: list[str] = []
        try:
            stream = self._client.generate_stream(
                prepared.system_prompt, prepared.user_prompt, action=action
            )
            async with aclosing(stream) as fragments:
                async for fragment in fragments:
                    if not self._is_current(token):
                        logger.debug("stale_stream_dropped", stage=self.stage_name, token=token)
                        return None
                    parts.append(fragment)
                    self._publish(ApiState(output="".join(parts), is_loading=True))
        except GenerationError as exc:
            self._apply(token, ApiState(error=exc.message))
            return None

        text = "".join(parts)
        if not self._apply(token, ApiState(output=text)):
            return None
        logger.info(
            "stage_generation_completed",
            stage=self.stage_name,
            action=action,
            prompt_version=prepared.prompt_version,
            chars=len(text),
        )
        return text

    async def _call_atomic(
        self,
        token: int,
        prepared: PreparedPrompt,
        *,
        action: str,
    ) -> str | None:
        """Single-shot call for request ``token``; None if failed or stale.

        The caller publishes the final state on success.
        """
        try:
            text = await self._client.generate(
                prepared.system_prompt, prepared.user_prompt, action=action
            )
        except GenerationError as exc:
            self._apply(token, ApiState(error=exc.message))
            return None
        if not self._is_current(token):
            logger.debug("stale_result_dropped", stage=self.stage_name, token=token)
            return None
        return text
