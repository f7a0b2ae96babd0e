"""Stores that own program state and survey answers.

Each store holds the current value in memory and writes the whole
object to LocalStorage after every accepted change.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from edu_master.models.program import MaterialKind, ProgramState
from edu_master.models.survey import AnswerValue, SurveyAnswers
from edu_master.state.storage import LocalStorage

logger = structlog.get_logger()

PROGRAM_STATE_KEY = "program_state"
SURVEY_ANSWERS_KEY = "survey_answers"

_ANSWERS_ADAPTER: TypeAdapter[SurveyAnswers] = TypeAdapter(SurveyAnswers)


class ProgramStore:
    """Single owner of ProgramState.

    All mutations go through ``update``; the new state is validated,
    stamped with ``last_modified`` and persisted before it becomes
    visible.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._state = ProgramState()

    @property
    def state(self) -> ProgramState:
        return self._state

    def load(self) -> ProgramState:
        """Rehydrate from storage; corrupt data yields an empty state."""
        raw = self._storage.get_item(PROGRAM_STATE_KEY)
        if raw is None:
            self._state = ProgramState()
            return self._state
        try:
            self._state = ProgramState.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "program_state_corrupt",
                key=PROGRAM_STATE_KEY,
                errors=exc.error_count(),
            )
            self._state = ProgramState()
        else:
            logger.info(
                "program_state_loaded",
                topic=self._state.topic,
                cached_materials=len(self._state.material_cache),
            )
        return self._state

    def update(self, **changes: Any) -> ProgramState:
        """Apply field changes and persist the result.

        Raises:
            ValueError: Unknown field name.
            ValidationError: A value does not fit its field.
        """
        unknown = set(changes) - set(ProgramState.model_fields)
        if unknown:
            raise ValueError(f"Unknown program fields: {', '.join(sorted(unknown))}")

        data = self._state.model_dump(exclude={"last_modified"})
        data.update(changes)
        data["last_modified"] = datetime.now(UTC)
        self._state = ProgramState.model_validate(data)
        self._persist()
        logger.debug("program_state_updated", fields=sorted(changes))
        return self._state

    def set_material(self, kind: MaterialKind, text: str) -> ProgramState:
        """Create or overwrite exactly one material cache entry."""
        cache = dict(self._state.material_cache)
        cache[kind] = text
        return self.update(material_cache=cache)

    def reset(self) -> ProgramState:
        self._state = ProgramState()
        self._storage.remove_item(PROGRAM_STATE_KEY)
        logger.info("program_state_reset")
        return self._state

    def _persist(self) -> None:
        self._storage.set_item(PROGRAM_STATE_KEY, self._state.model_dump_json())


class SurveyAnswerStore:
    """Answers to the current survey, keyed by question id."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._answers: SurveyAnswers = {}

    @property
    def answers(self) -> SurveyAnswers:
        return dict(self._answers)

    def load(self) -> SurveyAnswers:
        raw = self._storage.get_item(SURVEY_ANSWERS_KEY)
        if raw is None:
            self._answers = {}
            return self.answers
        try:
            self._answers = _ANSWERS_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "survey_answers_corrupt",
                key=SURVEY_ANSWERS_KEY,
                errors=exc.error_count(),
            )
            self._answers = {}
        return self.answers

    def set_answer(self, question_id: str, value: AnswerValue) -> SurveyAnswers:
        self._answers = {**self._answers, question_id: value}
        self._persist()
        return self.answers

    def toggle_choice(self, question_id: str, option: str) -> SurveyAnswers:
        """Add ``option`` to a checkbox answer, or remove it if present."""
        current = self._answers.get(question_id)
        selected = list(current) if isinstance(current, list) else []
        if option in selected:
            selected.remove(option)
        else:
            selected.append(option)
        return self.set_answer(question_id, selected)

    def clear(self) -> None:
        self._answers = {}
        self._storage.remove_item(SURVEY_ANSWERS_KEY)
        logger.info("survey_answers_cleared")

    def _persist(self) -> None:
        self._storage.set_item(SURVEY_ANSWERS_KEY, json.dumps(self._answers, ensure_ascii=False))
