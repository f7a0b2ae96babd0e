"""Tests for survey JSON parsing."""

import json
from typing import Any

import pytest

from edu_master.errors import MalformedOutputError
from edu_master.models.survey import QuestionType
from edu_master.parsing.survey import parse_survey, strip_code_fences


def _survey_json(questions: list[dict[str, Any]], **extra: Any) -> str:
    return json.dumps({"title": "만족도 조사", "questions": questions, **extra}, ensure_ascii=False)


class TestStripCodeFences:
    def test_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_fence(self) -> None:
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestParseSurvey:
    def test_fenced_survey(self) -> None:
        raw = "```json\n" + _survey_json(
            [
                {"id": "q1", "title": "이름", "type": "SHORT_ANSWER", "required": True},
                {
                    "id": "q2",
                    "title": "만족도",
                    "type": "MULTIPLE_CHOICE",
                    "options": ["좋음", "보통", "나쁨"],
                },
            ],
            description="수업 후 설문",
        ) + "\n```"
        survey = parse_survey(raw)
        assert survey.title == "만족도 조사"
        assert survey.description == "수업 후 설문"
        assert [q.id for q in survey.questions] == ["q1", "q2"]
        assert survey.questions[0].required is True
        assert survey.questions[1].type == QuestionType.MULTIPLE_CHOICE
        assert survey.questions[1].options == ["좋음", "보통", "나쁨"]

    def test_missing_ids_are_positional(self) -> None:
        survey = parse_survey(
            _survey_json(
                [
                    {"title": "A", "type": "PARAGRAPH"},
                    {"id": "", "title": "B", "type": "PARAGRAPH"},
                ]
            )
        )
        assert [q.id for q in survey.questions] == ["q_1", "q_2"]

    def test_duplicate_ids_made_unique(self) -> None:
        survey = parse_survey(
            _survey_json(
                [
                    {"id": "q", "title": "A", "type": "PARAGRAPH"},
                    {"id": "q", "title": "B", "type": "PARAGRAPH"},
                    {"id": "q", "title": "C", "type": "PARAGRAPH"},
                ]
            )
        )
        assert [q.id for q in survey.questions] == ["q", "q_2", "q_3"]

    def test_defaults_for_missing_fields(self) -> None:
        survey = parse_survey(
            _survey_json(
                [{"title": "Pick", "type": "CHECKBOX", "options": None, "required": None}],
                description=None,
            )
        )
        question = survey.questions[0]
        assert question.options == []
        assert question.required is False
        assert survey.description == ""

    def test_free_text_options_dropped(self) -> None:
        survey = parse_survey(
            _survey_json([{"title": "Why", "type": "PARAGRAPH", "options": ["x"]}])
        )
        assert survey.questions[0].options == []

    def test_numeric_scale_options_ignored(self) -> None:
        survey = parse_survey(
            _survey_json(
                [{"id": "a", "title": "만족도", "type": "LINEAR_SCALE", "options": [1, 2, 3, 4, 5]}]
            )
        )
        assert survey.questions[0].type == QuestionType.LINEAR_SCALE
        assert survey.questions[0].options == []

    def test_numeric_choice_options_become_text(self) -> None:
        survey = parse_survey(
            _survey_json([{"title": "학년", "type": "DROPDOWN", "options": [1, 2, 3.5]}])
        )
        assert survey.questions[0].options == ["1", "2", "3.5"]

    def test_no_questions(self) -> None:
        assert parse_survey('{"title": "Empty"}').questions == []

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedOutputError) as exc_info:
            parse_survey("Here is your survey: {title:")
        assert exc_info.value.raw_content == "Here is your survey: {title:"
        assert exc_info.value.schema_name == "SurveySchema"

    def test_top_level_list(self) -> None:
        with pytest.raises(MalformedOutputError, match="not an object"):
            parse_survey("[1, 2]")

    def test_questions_not_list(self) -> None:
        with pytest.raises(MalformedOutputError, match="not a list"):
            parse_survey('{"title": "T", "questions": "none"}')

    def test_question_not_object(self) -> None:
        with pytest.raises(MalformedOutputError, match="question 1"):
            parse_survey('{"title": "T", "questions": ["Q?"]}')

    def test_unknown_type(self) -> None:
        with pytest.raises(MalformedOutputError, match="RATING"):
            parse_survey(_survey_json([{"title": "A", "type": "RATING"}]))

    def test_missing_title(self) -> None:
        with pytest.raises(MalformedOutputError):
            parse_survey('{"questions": []}')
