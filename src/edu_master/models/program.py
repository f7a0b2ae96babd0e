"""Program state schemas shared by every stage."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, computed_field


class MaterialKind(StrEnum):
    """Material types produced by stage 2, in batch-export order."""

    LESSON_PLAN = "lesson_plan"
    SCRIPT = "script"
    PPT_OUTLINE = "ppt_outline"
    WORKSHEET = "worksheet"
    QUIZ = "quiz"
    CHECKLIST = "checklist"

    @property
    def display_name(self) -> str:
        return MATERIAL_NAMES[self]

    @property
    def short_name(self) -> str:
        """Display name without the parenthesized English suffix."""
        return self.display_name.split(" (")[0]


MATERIAL_NAMES: dict[MaterialKind, str] = {
    MaterialKind.LESSON_PLAN: "수업 지도안 (Lesson Plan)",
    MaterialKind.SCRIPT: "강의 스크립트/대본",
    MaterialKind.PPT_OUTLINE: "수업 PPT 구성안",
    MaterialKind.WORKSHEET: "학습 활동지/워크시트",
    MaterialKind.QUIZ: "이해 점검 퀴즈/테스트",
    MaterialKind.CHECKLIST: "수업 준비물 및 체크리스트",
}


class Schedule(BaseModel):
    """Detailed schedule; totals are derived and never stored independently."""

    duration_weeks: int = Field(default=1, ge=0)
    sessions_per_week: int = Field(default=1, ge=0)
    hours_per_session: float = Field(default=1.0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_sessions(self) -> int:
        return self.duration_weeks * self.sessions_per_week

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_hours(self) -> float:
        return self.total_sessions * self.hours_per_session

    def describe(self) -> str:
        """Human-readable summary used in prompts."""
        return (
            f"총 기간: {self.duration_weeks}주, 주 {self.sessions_per_week}회, "
            f"1회 {_fmt_number(self.hours_per_session)}시간 "
            f"(총 {self.total_sessions}회, {_fmt_number(self.total_hours)}시간)"
        )


def _fmt_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class ProgramState(BaseModel):
    """Everything the user entered plus generated artifacts worth keeping.

    Persisted whole after every accepted mutation.
    """

    topic: str = ""
    target_audience: str = ""
    student_count: str = ""
    learning_goal: str = ""
    training_type: str = ""
    duration: str = ""
    schedule: Schedule | None = None
    curriculum: str | None = None
    material_cache: dict[MaterialKind, str] = Field(default_factory=dict)
    last_modified: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_plan(self) -> bool:
        return bool(self.topic.strip())


class ApiState(BaseModel):
    """Transient per-stage request state."""

    output: str = ""
    is_loading: bool = False
    error: str | None = None
