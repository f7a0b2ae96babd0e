"""Stage 4: survey drafts, live answers and feedback analysis."""

from __future__ import annotations

from enum import StrEnum

import structlog

from edu_master.errors import ExportError, MalformedOutputError
from edu_master.export.files import ExportedFile
from edu_master.export.survey_pdf import to_survey_pdf
from edu_master.ingestion.base import ProcessingError
from edu_master.ingestion.spreadsheet import read_feedback_file
from edu_master.llm.client import GenerationClient
from edu_master.models.artifacts import MarkdownReport, SurveyArtifact
from edu_master.models.program import ApiState
from edu_master.models.survey import AnswerValue, SurveyAnswers, SurveySchema
from edu_master.parsing.survey import parse_survey
from edu_master.stages.base import OnChange, PreparedPrompt, StageController, prepare_prompt
from edu_master.stages.prompt_loader import load_stage_prompt
from edu_master.state.store import ProgramStore, SurveyAnswerStore

logger = structlog.get_logger()

ANALYSIS_FILE_PREFIX = "분석리포트"
MALFORMED_SURVEY_MESSAGE = "데이터 형식이 올바르지 않습니다. 텍스트 모드로 표시합니다."
NO_FEEDBACK_MESSAGE = "분석할 피드백 데이터를 입력하거나 파일을 업로드해주세요."
NO_SURVEY_MESSAGE = "생성된 설문지가 없습니다."


class FeedbackMode(StrEnum):
    SURVEY = "survey"
    ANALYSIS = "analysis"


class FeedbackController(StageController):
    """Creates survey drafts (atomic JSON) and analyzes feedback (stream).

    Answers live in SurveyAnswerStore and survive survey regeneration.
    """

    stage_name = "feedback"

    def __init__(
        self,
        client: GenerationClient,
        store: ProgramStore,
        answers: SurveyAnswerStore,
        *,
        on_change: OnChange | None = None,
    ) -> None:
        super().__init__(client, store, on_change=on_change)
        self._answers = answers
        self.mode = FeedbackMode.SURVEY
        self.feedback_text = ""
        self.survey: SurveySchema | None = None

    @property
    def answers(self) -> SurveyAnswers:
        return self._answers.answers

    # -- survey ------------------------------------------------------------

    def prepare_survey(self) -> PreparedPrompt:
        state = self._store.state
        return prepare_prompt(
            load_stage_prompt("feedback_survey"),
            topic=state.topic,
            target=state.target_audience,
        )

    async def create_survey(self) -> SurveySchema | None:
        """Request a survey draft and parse it.

        Malformed output keeps the raw text visible with an error and
        leaves ``survey`` unset.
        """
        self.mode = FeedbackMode.SURVEY
        self.survey = None
        token = self._begin()
        raw = await self._call_atomic(token, self.prepare_survey(), action="survey_draft")
        if raw is None:
            return None

        try:
            survey = parse_survey(raw)
        except MalformedOutputError as exc:
            logger.warning("survey_malformed", error=str(exc), chars=len(raw))
            self._apply(token, ApiState(output=raw, error=MALFORMED_SURVEY_MESSAGE))
            return None

        if not self._apply(token, ApiState(output=raw)):
            return None
        self.survey = survey
        logger.info("survey_created", title=survey.title, questions=len(survey.questions))
        return survey

    def set_answer(self, question_id: str, value: AnswerValue) -> SurveyAnswers:
        return self._answers.set_answer(question_id, value)

    def toggle_choice(self, question_id: str, option: str) -> SurveyAnswers:
        return self._answers.toggle_choice(question_id, option)

    def clear_answers(self) -> None:
        self._answers.clear()

    def survey_artifact(self) -> SurveyArtifact | None:
        if self.survey is None:
            return None
        return SurveyArtifact(survey=self.survey, answers=self.answers)

    def export_survey_pdf(self) -> ExportedFile:
        """Render the survey and its current answers.

        Raises:
            ExportError: No survey has been created yet.
        """
        if self.survey is None:
            raise ExportError(NO_SURVEY_MESSAGE)
        return to_survey_pdf(self.survey, self.answers)

    # -- analysis ------------------------------------------------------------

    def load_feedback_file(self, filename: str, content: bytes) -> str | None:
        """Append an uploaded spreadsheet to the feedback text.

        Read failures are shown as the stage error; returns the
        extracted text, or None on failure.
        """
        try:
            text = read_feedback_file(filename, content)
        except ProcessingError as exc:
            self._fail(str(exc))
            return None
        self.feedback_text += text
        self.mode = FeedbackMode.ANALYSIS
        return text

    def prepare_analysis(self) -> PreparedPrompt:
        return prepare_prompt(
            load_stage_prompt("feedback_analysis"),
            topic=self._store.state.topic,
            data=self.feedback_text,
        )

    async def analyze(self) -> str | None:
        self.mode = FeedbackMode.ANALYSIS
        if not self.feedback_text.strip():
            self._fail(NO_FEEDBACK_MESSAGE)
            return None
        return await self._run_stream(self.prepare_analysis(), action="feedback_analysis")

    def analysis_artifact(self) -> MarkdownReport | None:
        if self.mode != FeedbackMode.ANALYSIS or not self.api_state.output:
            return None
        return MarkdownReport(
            title=f"{self._store.state.topic} 분석 리포트",
            text=self.api_state.output,
            file_prefix=ANALYSIS_FILE_PREFIX,
        )
