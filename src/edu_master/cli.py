"""Command-line interface for the four-stage workflow.

Usage::

    edu-master <command> [options]

Commands:
    status      Show the saved program
    reset       Clear the saved program and survey answers
    plan        Stage 1: design the curriculum
    material    Stage 2: generate one teaching material
    bundle      Stage 2: generate missing materials and zip all of them
    promo       Stage 3: write promotional copy
    survey      Stage 4: create a survey draft
    analyze     Stage 4: analyze feedback text or a spreadsheet
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog

from edu_master.config import Settings, get_settings
from edu_master.errors import ExportError, ProviderNotConfiguredError
from edu_master.export.dispatch import ExportFormat, export_artifact
from edu_master.export.files import ExportedFile, save_file
from edu_master.logging_config import configure_logging
from edu_master.models.artifacts import Artifact
from edu_master.models.program import ApiState, MaterialKind
from edu_master.session import EduSession
from edu_master.stages.base import StageController
from edu_master.stages.copywriter import CHANNEL_OPTIONS
from edu_master.stages.planner import DURATION_OPTIONS, TRAINING_TYPE_OPTIONS, PlannerForm

logger = structlog.get_logger()

Handler = Callable[[EduSession, argparse.Namespace], Awaitable[int]]


class StreamPrinter:
    """ApiState observer that echoes newly arrived text to stdout."""

    def __init__(self) -> None:
        self._printed = ""

    def __call__(self, state: ApiState) -> None:
        if not state.output.startswith(self._printed):
            self._printed = ""
        if state.is_loading and len(state.output) > len(self._printed):
            sys.stdout.write(state.output[len(self._printed) :])
            sys.stdout.flush()
            self._printed = state.output
        elif not state.is_loading and self._printed:
            sys.stdout.write("\n")
            self._printed = ""


def _finish(controller: StageController) -> int:
    """Report the stage error, if any, and return the exit code."""
    error = controller.api_state.error
    if error:
        print(error, file=sys.stderr)
        return 1
    return 0


def _save(session: EduSession, file: ExportedFile) -> int:
    try:
        path = save_file(file, session.settings.export_dir)
    except OSError as exc:
        print(f"Cannot save {file.filename}: {exc}", file=sys.stderr)
        return 1
    print(f"Saved: {path}")
    return 0


def _export(session: EduSession, artifact: Artifact | None, fmt: str | None) -> int:
    if fmt is None:
        return 0
    if artifact is None:
        print("Nothing to export.", file=sys.stderr)
        return 1
    try:
        file = export_artifact(artifact, fmt)
    except ExportError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return _save(session, file)


# -- commands --------------------------------------------------------------


async def cmd_status(session: EduSession, _args: argparse.Namespace) -> int:
    state = session.program.state
    if not state.has_plan:
        print("No program planned yet. Run `edu-master plan` first.")
        return 0
    print(f"Topic:      {state.topic}")
    print(f"Target:     {state.target_audience}")
    print(f"Students:   {state.student_count or '-'}")
    print(f"Goal:       {state.learning_goal or '-'}")
    print(f"Format:     {state.training_type or '-'}")
    print(f"Duration:   {state.duration or '-'}")
    if state.schedule is not None:
        print(f"Schedule:   {state.schedule.describe()}")
    print(f"Curriculum: {'yes' if state.curriculum else 'no'}")
    cached = [kind.value for kind in MaterialKind if kind in state.material_cache]
    print(f"Materials:  {', '.join(cached) if cached else '-'}")
    print(f"Answers:    {len(session.answers.answers)}")
    print(f"Modified:   {state.last_modified.isoformat()}")
    return 0


async def cmd_reset(session: EduSession, _args: argparse.Namespace) -> int:
    session.reset()
    print("Program and survey answers cleared.")
    return 0


async def cmd_plan(session: EduSession, args: argparse.Namespace) -> int:
    form = PlannerForm(
        topic=args.topic,
        targets=args.target or [],
        target_custom=args.target_custom,
        student_count=args.students,
        learning_goal=args.goal,
        training_type=args.type,
        type_custom=args.type_custom,
        duration_text=args.duration,
        duration_custom=args.duration_custom,
        duration_weeks=args.weeks,
        sessions_per_week=args.sessions,
        hours_per_session=args.hours,
    )
    await session.planner.generate(form)
    code = _finish(session.planner)
    if code:
        return code
    return _export(session, session.planner.artifact(), args.export)


async def cmd_material(session: EduSession, args: argparse.Namespace) -> int:
    kind = MaterialKind(args.kind)
    materials = session.materials
    if args.cached:
        materials.select(kind)
        print(materials.api_state.output or "(not generated yet)")
    else:
        await materials.generate(kind, args.count)
        code = _finish(materials)
        if code:
            return code
    return _export(session, materials.artifact(kind), args.export)


async def cmd_bundle(session: EduSession, _args: argparse.Namespace) -> int:
    def progress(current: int, total: int) -> None:
        print(f"[{current}/{total}] preparing materials...", file=sys.stderr)

    result = await session.materials.export_bundle(on_progress=progress)
    if result.completed:
        print(f"Generated: {', '.join(kind.value for kind in result.completed)}")
    if result.file is None:
        print(result.error, file=sys.stderr)
        return 1
    return _save(session, result.file)


async def cmd_promo(session: EduSession, args: argparse.Namespace) -> int:
    await session.copywriter.generate(args.channel, args.benefit)
    code = _finish(session.copywriter)
    if code:
        return code
    return _export(session, session.copywriter.artifact(), args.export)


async def cmd_survey(session: EduSession, args: argparse.Namespace) -> int:
    feedback = session.feedback
    survey = await feedback.create_survey()
    if survey is None:
        if feedback.api_state.output:
            print(feedback.api_state.output)
        return _finish(feedback) or 1

    print(survey.title)
    if survey.description:
        print(survey.description)
    for number, question in enumerate(survey.questions, start=1):
        mark = " *" if question.required else ""
        print(f"{number}. {question.title}{mark} [{question.type.label}]")
        for option in question.options:
            print(f"   - {option}")

    if args.pdf:
        try:
            file = feedback.export_survey_pdf()
        except ExportError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        return _save(session, file)
    return 0


async def cmd_analyze(session: EduSession, args: argparse.Namespace) -> int:
    feedback = session.feedback
    if args.text:
        feedback.feedback_text += args.text
    if args.file:
        path = Path(args.file)
        try:
            content = path.read_bytes()
        except OSError as exc:
            print(f"Cannot read {path}: {exc}", file=sys.stderr)
            return 1
        if feedback.load_feedback_file(path.name, content) is None:
            return _finish(feedback)

    await feedback.analyze()
    code = _finish(feedback)
    if code:
        return code
    return _export(session, feedback.analysis_artifact(), args.export)


COMMANDS: dict[str, Handler] = {
    "status": cmd_status,
    "reset": cmd_reset,
    "plan": cmd_plan,
    "material": cmd_material,
    "bundle": cmd_bundle,
    "promo": cmd_promo,
    "survey": cmd_survey,
    "analyze": cmd_analyze,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edu-master", description="Educator content generator"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show the saved program")
    sub.add_parser("reset", help="Clear saved program and answers")

    # plan
    p = sub.add_parser("plan", help="Stage 1: design the curriculum")
    p.add_argument("--topic", required=True, help="Course topic")
    p.add_argument("--target", action="append", help="Target audience (repeatable)")
    p.add_argument("--target-custom", default="", help="Custom target when --target 기타")
    p.add_argument("--students", default="", help="Number of students")
    p.add_argument("--goal", default="", help="Learning goal")
    p.add_argument("--type", default=TRAINING_TYPE_OPTIONS[0], help="Training format")
    p.add_argument("--type-custom", default="", help="Custom format when --type 기타")
    p.add_argument("--duration", default=DURATION_OPTIONS[0], help="Duration label")
    p.add_argument("--duration-custom", default="", help="Custom duration when 기타")
    p.add_argument("--weeks", type=int, default=1, help="Total weeks")
    p.add_argument("--sessions", type=int, default=1, help="Sessions per week")
    p.add_argument("--hours", type=float, default=1.0, help="Hours per session")
    p.add_argument("--export", choices=["doc", "xlsx"], help="Export format")

    # material
    p = sub.add_parser("material", help="Stage 2: generate one material")
    p.add_argument("--kind", required=True, choices=[k.value for k in MaterialKind])
    p.add_argument("--count", default=None, help="Item count for quiz/worksheet (1-50)")
    p.add_argument("--cached", action="store_true", help="Show the cached version only")
    p.add_argument("--export", choices=[f.value for f in ExportFormat if f != ExportFormat.PDF])

    # bundle
    sub.add_parser("bundle", help="Stage 2: zip all six materials")

    # promo
    p = sub.add_parser("promo", help="Stage 3: promotional copy")
    p.add_argument("--channel", default=CHANNEL_OPTIONS[0], help="Target channel")
    p.add_argument("--benefit", default=None, help="Key benefit (defaults to goal)")
    p.add_argument("--export", choices=["doc", "xlsx"], help="Export format")

    # survey
    p = sub.add_parser("survey", help="Stage 4: survey draft")
    p.add_argument("--pdf", action="store_true", help="Save the survey as PDF")

    # analyze
    p = sub.add_parser("analyze", help="Stage 4: analyze feedback")
    p.add_argument("--file", help="Spreadsheet with feedback (.xlsx, .xls, .csv)")
    p.add_argument("--text", help="Raw feedback text")
    p.add_argument("--export", choices=["doc", "xlsx"], help="Export format")

    return parser


def run(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    """Parse ``argv``, run the command and return the exit code."""
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    configure_logging(environment=settings.environment, log_level=settings.log_level)

    session = EduSession(settings, on_change=StreamPrinter())
    session.load()
    try:
        return asyncio.run(COMMANDS[args.command](session, args))
    except ProviderNotConfiguredError as exc:
        print(str(exc), file=sys.stderr)
        return 2


def main() -> None:
    """Console entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
