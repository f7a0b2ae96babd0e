from edu_master.state.storage import LocalStorage
from edu_master.state.store import (
    PROGRAM_STATE_KEY,
    SURVEY_ANSWERS_KEY,
    ProgramStore,
    SurveyAnswerStore,
)

__all__ = [
    "PROGRAM_STATE_KEY",
    "SURVEY_ANSWERS_KEY",
    "LocalStorage",
    "ProgramStore",
    "SurveyAnswerStore",
]
