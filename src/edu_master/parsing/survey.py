"""Survey JSON parsing.

The model is asked for bare JSON but often wraps it in code fences.
Parsing is all-or-nothing: either a complete SurveySchema or
MalformedOutputError, never a partial survey.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from pydantic import ValidationError

from edu_master.errors import MalformedOutputError
from edu_master.models.survey import QuestionType, SurveySchema

logger = structlog.get_logger()

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove every ```json / ``` marker, wherever it appears."""
    return _FENCE_RE.sub("", text).strip()


def parse_survey(raw: str) -> SurveySchema:
    """Parse model output into a SurveySchema.

    Fallbacks applied before validation:
    - missing or blank ``id`` -> ``q_{n}`` (1-based position)
    - duplicate ``id`` -> suffixed ``_{k}`` until unique
    - missing ``options`` on a choice question -> ``[]``
    - missing ``required`` -> False, missing ``description`` -> ""

    Raises:
        MalformedOutputError: Invalid JSON or a value of the wrong shape.
    """
    cleaned = strip_code_fences(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(raw, "SurveySchema", f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedOutputError(raw, "SurveySchema", "top-level value is not an object")

    questions = data.get("questions", [])
    if not isinstance(questions, list):
        raise MalformedOutputError(raw, "SurveySchema", "'questions' is not a list")

    normalized = dict(data)
    if normalized.get("description") is None:
        normalized["description"] = ""
    normalized["questions"] = _normalize_questions(questions, raw)

    try:
        survey = SurveySchema.model_validate(normalized)
    except ValidationError as exc:
        raise MalformedOutputError(raw, "SurveySchema", str(exc)) from exc

    logger.debug("survey_parsed", title=survey.title, questions=len(survey.questions))
    return survey


def _normalize_questions(questions: list[Any], raw: str) -> list[dict[str, Any]]:
    seen: set[str] = set()
    result: list[dict[str, Any]] = []
    for index, item in enumerate(questions):
        if not isinstance(item, dict):
            raise MalformedOutputError(
                raw, "SurveySchema", f"question {index + 1} is not an object"
            )
        question = dict(item)

        base_id = str(question.get("id") or "").strip() or f"q_{index + 1}"
        question_id = base_id
        suffix = 2
        while question_id in seen:
            question_id = f"{base_id}_{suffix}"
            suffix += 1
        seen.add(question_id)
        question["id"] = question_id

        if question.get("required") is None:
            question["required"] = False

        qtype = question.get("type")
        if isinstance(qtype, str) and qtype not in QuestionType.__members__:
            raise MalformedOutputError(
                raw, "SurveySchema", f"question {index + 1} has unknown type {qtype!r}"
            )
        question["options"] = _normalize_options(qtype, question.get("options"))
        result.append(question)
    return result


def _normalize_options(qtype: Any, options: Any) -> Any:
    """Choice options as strings; anything on other types is dropped.

    Scale questions often come back with ``[1, 2, 3, 4, 5]``.
    """
    if not (isinstance(qtype, str) and QuestionType(qtype).has_options):
        return []
    if options is None:
        return []
    if isinstance(options, list):
        return [str(item) if isinstance(item, int | float) else item for item in options]
    return options
