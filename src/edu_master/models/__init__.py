from edu_master.models.artifacts import (
    Artifact,
    BulletElement,
    MarkdownReport,
    SlideBlock,
    SlideDeck,
    SlideElement,
    SurveyArtifact,
    TableElement,
    TextElement,
)
from edu_master.models.program import (
    ApiState,
    MaterialKind,
    ProgramState,
    Schedule,
)
from edu_master.models.survey import (
    AnswerValue,
    QuestionType,
    SurveyAnswers,
    SurveyQuestion,
    SurveySchema,
)

__all__ = [
    "AnswerValue",
    "ApiState",
    "Artifact",
    "BulletElement",
    "MarkdownReport",
    "MaterialKind",
    "ProgramState",
    "QuestionType",
    "Schedule",
    "SlideBlock",
    "SlideDeck",
    "SlideElement",
    "SurveyAnswers",
    "SurveyArtifact",
    "SurveyQuestion",
    "SurveySchema",
    "TableElement",
    "TextElement",
]
