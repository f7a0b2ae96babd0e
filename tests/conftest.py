"""Shared pytest fixtures."""

from pathlib import Path

import pytest

from edu_master.config import Settings
from edu_master.models.program import ProgramState, Schedule
from edu_master.state.storage import LocalStorage
from edu_master.state.store import ProgramStore, SurveyAnswerStore


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the developer's .env and working directory."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        environment="testing",  # type: ignore[arg-type]
        gemini_api_key="test-key",  # type: ignore[arg-type]
        storage_dir=tmp_path / "storage",
        export_dir=tmp_path / "exports",
        llm_base_delay=0.0,
        llm_max_jitter=0.0,
        batch_step_delay=0.0,
    )


@pytest.fixture()
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "storage")


@pytest.fixture()
def store(storage: LocalStorage) -> ProgramStore:
    return ProgramStore(storage)


@pytest.fixture()
def answer_store(storage: LocalStorage) -> SurveyAnswerStore:
    return SurveyAnswerStore(storage)


@pytest.fixture()
def planned_store(store: ProgramStore) -> ProgramStore:
    """Store with a completed stage-1 plan."""
    store.update(
        topic="파이썬 기초",
        target_audience="중학생",
        student_count="20",
        learning_goal="간단한 프로그램을 작성",
        training_type="방과후 학교/동아리",
        duration="8주 과정 (표준)",
        schedule=Schedule(duration_weeks=8, sessions_per_week=2, hours_per_session=1.5),
        curriculum="# 📅 Course Overview",
    )
    return store


@pytest.fixture()
def program_state() -> ProgramState:
    return ProgramState(topic="파이썬 기초", target_audience="중학생")
