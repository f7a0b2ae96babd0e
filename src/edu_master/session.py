"""EduSession -- wires storage, stores, client and stage controllers.

Usage::

    session = EduSession(get_settings())
    session.load()
    await session.planner.generate(form)
"""

from __future__ import annotations

from functools import cached_property

import structlog

from edu_master.config import Settings
from edu_master.llm.client import GenerationClient
from edu_master.llm.setup import create_generation_client
from edu_master.stages.base import OnChange
from edu_master.stages.copywriter import CopywriterController
from edu_master.stages.feedback import FeedbackController
from edu_master.stages.materials import MaterialController
from edu_master.stages.planner import PlannerController
from edu_master.state.storage import LocalStorage
from edu_master.state.store import ProgramStore, SurveyAnswerStore

logger = structlog.get_logger()


class EduSession:
    """Single-user session state plus the four stages.

    The generation client is created on first use so that commands
    which never call the model work without an API key.

    Args:
        settings: Application settings.
        client: Pre-built client (tests); defaults to the configured one.
        on_change: ApiState observer passed to every controller.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        client: GenerationClient | None = None,
        on_change: OnChange | None = None,
    ) -> None:
        self._settings = settings
        self._client = client
        self._on_change = on_change
        self.storage = LocalStorage(settings.storage_dir)
        self.program = ProgramStore(self.storage)
        self.answers = SurveyAnswerStore(self.storage)

    @property
    def settings(self) -> Settings:
        return self._settings

    def load(self) -> None:
        """Rehydrate program state and survey answers from storage."""
        self.program.load()
        self.answers.load()
        logger.info("session_loaded", storage_dir=str(self.storage.base_dir))

    def reset(self) -> None:
        self.program.reset()
        self.answers.clear()

    @property
    def client(self) -> GenerationClient:
        if self._client is None:
            self._client = create_generation_client(self._settings)
        return self._client

    @cached_property
    def planner(self) -> PlannerController:
        return PlannerController(self.client, self.program, on_change=self._on_change)

    @cached_property
    def materials(self) -> MaterialController:
        return MaterialController(
            self.client,
            self.program,
            on_change=self._on_change,
            step_delay=self._settings.batch_step_delay,
        )

    @cached_property
    def copywriter(self) -> CopywriterController:
        return CopywriterController(self.client, self.program, on_change=self._on_change)

    @cached_property
    def feedback(self) -> FeedbackController:
        return FeedbackController(
            self.client, self.program, self.answers, on_change=self._on_change
        )
