"""Survey form schemas."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class QuestionType(StrEnum):
    SHORT_ANSWER = "SHORT_ANSWER"
    PARAGRAPH = "PARAGRAPH"
    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    CHECKBOX = "CHECKBOX"
    DROPDOWN = "DROPDOWN"
    LINEAR_SCALE = "LINEAR_SCALE"

    @property
    def has_options(self) -> bool:
        return self in CHOICE_TYPES

    @property
    def label(self) -> str:
        return QUESTION_TYPE_LABELS[self]


CHOICE_TYPES = frozenset(
    {QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX, QuestionType.DROPDOWN}
)

QUESTION_TYPE_LABELS: dict[QuestionType, str] = {
    QuestionType.SHORT_ANSWER: "단답형 (Short Answer)",
    QuestionType.PARAGRAPH: "서술형 (Paragraph)",
    QuestionType.MULTIPLE_CHOICE: "객관식 (Multiple Choice)",
    QuestionType.CHECKBOX: "체크박스 (Checkboxes)",
    QuestionType.DROPDOWN: "드롭다운 (Dropdown)",
    QuestionType.LINEAR_SCALE: "척도형 (Linear Scale)",
}


class SurveyQuestion(BaseModel):
    """Single form question. Options exist only on choice types."""

    id: str
    title: str
    type: QuestionType
    options: list[str] = Field(default_factory=list)
    required: bool = False

    @model_validator(mode="after")
    def _drop_options_for_free_text(self) -> "SurveyQuestion":
        if not self.type.has_options:
            self.options = []
        return self


class SurveySchema(BaseModel):
    """Survey draft produced by stage 4."""

    title: str
    description: str = ""
    questions: list[SurveyQuestion] = Field(default_factory=list)


AnswerValue = str | int | float | list[str]
SurveyAnswers = dict[str, AnswerValue]
