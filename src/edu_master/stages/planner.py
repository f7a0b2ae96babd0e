"""Stage 1: curriculum planning."""

from __future__ import annotations

import structlog
from pydantic import BaseModel, Field

from edu_master.models.artifacts import MarkdownReport
from edu_master.models.program import Schedule
from edu_master.stages.base import (
    OTHER_OPTION,
    UNDECIDED,
    PreparedPrompt,
    StageController,
    prepare_prompt,
    resolve_choice,
)
from edu_master.stages.prompt_loader import load_stage_prompt

logger = structlog.get_logger()

FILE_PREFIX = "교육설계"
TOPIC_REQUIRED_MESSAGE = "교육 주제를 입력해주세요."

TARGET_OPTIONS = [
    "유아/유치원생",
    "초등학교 저학년",
    "초등학교 고학년",
    "중학생",
    "고등학생 (수험생)",
    "대학생",
    "성인/직장인",
    "학부모",
    "노인/실버",
    OTHER_OPTION,
]

TRAINING_TYPE_OPTIONS = [
    "정규 수업 (교과/학기)",
    "방과후 학교/동아리",
    "원데이 클래스/특강",
    "온라인 화상 수업",
    "블렌디드 러닝",
    "자기주도 학습 코칭",
    "캠프/수련회",
    OTHER_OPTION,
]

DURATION_OPTIONS = [
    "1회성 특강",
    "4주 과정 (단기)",
    "8주 과정 (표준)",
    "12주 과정 (장기)",
    "1학기 (6개월)",
    OTHER_OPTION,
]


class PlannerForm(BaseModel):
    """Raw planner inputs as the user entered them."""

    topic: str
    targets: list[str] = Field(default_factory=list)
    target_custom: str = ""
    student_count: str = ""
    learning_goal: str = ""
    training_type: str = TRAINING_TYPE_OPTIONS[0]
    type_custom: str = ""
    duration_text: str = DURATION_OPTIONS[0]
    duration_custom: str = ""
    duration_weeks: int = Field(default=1, ge=0)
    sessions_per_week: int = Field(default=1, ge=0)
    hours_per_session: float = Field(default=1.0, ge=0)

    def resolved_target(self) -> str:
        """Join selected targets; 기타 becomes the custom text, empty becomes 미정."""
        parts = [target for target in self.targets if target != OTHER_OPTION]
        if OTHER_OPTION in self.targets and self.target_custom.strip():
            parts.append(self.target_custom.strip())
        return ", ".join(parts) or UNDECIDED

    def resolved_type(self) -> str:
        return resolve_choice(self.training_type, self.type_custom)

    def resolved_duration(self) -> str:
        return resolve_choice(self.duration_text, self.duration_custom)

    def schedule(self) -> Schedule:
        return Schedule(
            duration_weeks=self.duration_weeks,
            sessions_per_week=self.sessions_per_week,
            hours_per_session=self.hours_per_session,
        )


class PlannerController(StageController):
    """Writes the form into ProgramState, then streams the curriculum."""

    stage_name = "planner"

    def prepare(self, form: PlannerForm) -> PreparedPrompt:
        return prepare_prompt(
            load_stage_prompt("planner"),
            topic=form.topic.strip(),
            target=form.resolved_target(),
            students=form.student_count.strip() or UNDECIDED,
            goal=form.learning_goal.strip(),
            duration=form.resolved_duration(),
            format=form.resolved_type(),
            schedule=form.schedule().describe(),
        )

    async def generate(self, form: PlannerForm) -> str | None:
        """Plan a course. Returns the curriculum, or None on failure."""
        if not form.topic.strip():
            self._fail(TOPIC_REQUIRED_MESSAGE)
            return None

        self._store.update(
            topic=form.topic.strip(),
            target_audience=form.resolved_target(),
            student_count=form.student_count.strip(),
            learning_goal=form.learning_goal.strip(),
            training_type=form.resolved_type(),
            duration=form.resolved_duration(),
            schedule=form.schedule(),
        )

        text = await self._run_stream(self.prepare(form), action="curriculum_planning")
        if text is None:
            return None
        self._store.update(curriculum=text)
        return text

    def artifact(self) -> MarkdownReport | None:
        state = self._store.state
        text = self.api_state.output or state.curriculum
        if not text:
            return None
        return MarkdownReport(
            title=f"{state.topic} 교육 설계",
            text=text,
            file_prefix=FILE_PREFIX,
        )
