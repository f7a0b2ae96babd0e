"""Tests for the command-line interface."""

import logging
from collections.abc import AsyncIterator, Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog

from edu_master.cli import StreamPrinter, build_parser, run
from edu_master.config import Settings
from edu_master.errors import FailureCategory, GenerationError
from edu_master.llm.client import GenerationClient
from edu_master.models.program import ApiState, MaterialKind
from edu_master.state.storage import LocalStorage
from edu_master.state.store import ProgramStore

# -- test helpers ----------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """run() configures logging; undo it so later tests start clean."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


async def _fragments(*items: str) -> AsyncIterator[str]:
    for item in items:
        yield item


def _fake_client(*fragments: str) -> MagicMock:
    fake = MagicMock(spec=GenerationClient)
    fake.generate = AsyncMock(return_value="")
    fake.generate_stream = MagicMock(side_effect=lambda *a, **kw: _fragments(*fragments))
    return fake


def _saved_program(settings: Settings) -> ProgramStore:
    store = ProgramStore(LocalStorage(settings.storage_dir))
    store.load()
    return store


# -- parser ----------------------------------------------------------------


class TestParser:
    def test_requires_command(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_plan_arguments(self) -> None:
        args = build_parser().parse_args(
            ["plan", "--topic", "AI", "--target", "중학생", "--target", "학부모", "--weeks", "8"]
        )
        assert args.target == ["중학생", "학부모"]
        assert args.weeks == 8
        assert args.export is None

    def test_material_kind_choices(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["material", "--kind", "poster"])


class TestStreamPrinter:
    def test_prints_only_new_text(self, capsys: pytest.CaptureFixture[str]) -> None:
        printer = StreamPrinter()
        printer(ApiState(is_loading=True))
        printer(ApiState(output="안녕", is_loading=True))
        printer(ApiState(output="안녕하세요", is_loading=True))
        printer(ApiState(output="안녕하세요"))
        assert capsys.readouterr().out == "안녕하세요\n"


# -- commands --------------------------------------------------------------


class TestCommands:
    def test_status_without_plan(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run(["status"], settings=settings) == 0
        assert "No program planned yet" in capsys.readouterr().out

    def test_plan_saves_state_and_exports(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake = _fake_client("# 📅 과정 ", "개요")
        with patch("edu_master.session.create_generation_client", return_value=fake):
            code = run(
                [
                    "plan",
                    "--topic",
                    "파이썬 기초",
                    "--target",
                    "중학생",
                    "--weeks",
                    "8",
                    "--sessions",
                    "2",
                    "--hours",
                    "1.5",
                    "--export",
                    "doc",
                ],
                settings=settings,
            )

        assert code == 0
        out = capsys.readouterr().out
        assert "# 📅 과정 개요" in out
        assert "Saved:" in out
        assert (settings.export_dir / "교육설계_파이썬 기초 교육 설계.doc").exists()
        state = _saved_program(settings).state
        assert state.curriculum == "# 📅 과정 개요"
        assert state.schedule is not None
        assert state.schedule.total_sessions == 16

    def test_status_after_plan(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        store = _saved_program(settings)
        store.update(topic="파이썬 기초", curriculum="# 계획")
        store.set_material(MaterialKind.QUIZ, "# 퀴즈")

        assert run(["status"], settings=settings) == 0
        out = capsys.readouterr().out
        assert "파이썬 기초" in out
        assert "quiz" in out

    def test_generation_error_exit_code(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake = _fake_client()
        error = GenerationError(FailureCategory.RATE_LIMITED, "⚠️ quota")

        async def failing(*args: object, **kwargs: object) -> AsyncIterator[str]:
            raise error
            yield ""

        fake.generate_stream.side_effect = failing
        with patch("edu_master.session.create_generation_client", return_value=fake):
            assert run(["plan", "--topic", "AI"], settings=settings) == 1
        assert "⚠️ quota" in capsys.readouterr().err

    def test_missing_api_key(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        keyless = settings.model_copy(update={"gemini_api_key": None})
        assert run(["plan", "--topic", "AI"], settings=keyless) == 2
        assert "No API key" in capsys.readouterr().err

    def test_material_requires_plan(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("edu_master.session.create_generation_client", return_value=_fake_client()):
            assert run(["material", "--kind", "quiz"], settings=settings) == 1
        assert "Step 1" in capsys.readouterr().err

    def test_cached_material_export(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _saved_program(settings).update(topic="파이썬 기초")
        store = _saved_program(settings)
        store.set_material(MaterialKind.PPT_OUTLINE, "# Slide 1: 도입\n- 목표")

        with patch("edu_master.session.create_generation_client", return_value=_fake_client()):
            code = run(
                ["material", "--kind", "ppt_outline", "--cached", "--export", "pptx"],
                settings=settings,
            )

        assert code == 0
        saved = list(settings.export_dir.glob("*.pptx"))
        assert [p.name for p in saved] == ["수업 PPT 구성안_파이썬 기초  수업 PPT 구성안.pptx"]
        assert "# Slide 1" in capsys.readouterr().out

    def test_unsupported_export_format(
        self, settings: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        store = _saved_program(settings)
        store.update(topic="파이썬 기초")
        store.set_material(MaterialKind.QUIZ, "# 퀴즈")
        with patch("edu_master.session.create_generation_client", return_value=_fake_client()):
            code = run(
                ["material", "--kind", "quiz", "--cached", "--export", "pptx"],
                settings=settings,
            )
        assert code == 1
        assert "Cannot export" in capsys.readouterr().err

    def test_analyze_file(
        self, settings: Settings, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        _saved_program(settings).update(topic="파이썬 기초")
        upload = tmp_path / "feedback.csv"
        upload.write_bytes("의견\n실습이 좋았어요\n".encode())
        fake = _fake_client("## 분석")

        with patch("edu_master.session.create_generation_client", return_value=fake):
            code = run(["analyze", "--file", str(upload)], settings=settings)

        assert code == 0
        user_prompt = fake.generate_stream.call_args.args[1]
        assert "실습이 좋았어요" in user_prompt
        assert "## 분석" in capsys.readouterr().out

    def test_reset(self, settings: Settings, capsys: pytest.CaptureFixture[str]) -> None:
        _saved_program(settings).update(topic="AI")
        assert run(["reset"], settings=settings) == 0
        assert _saved_program(settings).state.has_plan is False

    def test_unwritable_export_dir(
        self, settings: Settings, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory")
        blocked = settings.model_copy(update={"export_dir": blocker})
        store = _saved_program(blocked)
        store.update(topic="파이썬 기초")
        store.set_material(MaterialKind.QUIZ, "# 퀴즈")

        with patch("edu_master.session.create_generation_client", return_value=_fake_client()):
            code = run(
                ["material", "--kind", "quiz", "--cached", "--export", "doc"],
                settings=blocked,
            )

        assert code == 1
        assert "Cannot save" in capsys.readouterr().err
