"""Stage 2: teaching materials, per-kind cache and batch export."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable
from typing import NamedTuple

import structlog

from edu_master.errors import ExportError, GenerationError
from edu_master.export.archive import build_bundle
from edu_master.export.files import ExportedFile
from edu_master.export.slides import to_slide_deck
from edu_master.export.word import to_word_document
from edu_master.llm.client import GenerationClient
from edu_master.models.artifacts import MarkdownReport, SlideDeck
from edu_master.models.program import MaterialKind, ProgramState
from edu_master.parsing.slides import split_slides
from edu_master.stages.base import (
    PLAN_REQUIRED_MESSAGE,
    OnChange,
    PreparedPrompt,
    StageController,
    prepare_prompt,
)
from edu_master.stages.prompt_loader import load_stage_prompt
from edu_master.state.store import ProgramStore

logger = structlog.get_logger()

ITEM_COUNT_PRESETS: dict[MaterialKind, tuple[int, ...]] = {
    MaterialKind.QUIZ: (5, 10, 20),
    MaterialKind.WORKSHEET: (3, 5, 10),
}
DEFAULT_ITEM_COUNTS: dict[MaterialKind, int] = {
    MaterialKind.QUIZ: 10,
    MaterialKind.WORKSHEET: 5,
}
MIN_ITEM_COUNT = 1
MAX_ITEM_COUNT = 50
DEFAULT_STEP_DELAY = 0.5

_LEADING_INT_RE = re.compile(r"\s*[+-]?\d+")

ProgressFn = Callable[[int, int], None]


class BatchExportResult(NamedTuple):
    """Outcome of ``export_bundle``; never raised, always returned.

    ``completed`` lists the kinds generated and cached during this
    batch, including those finished before a failure.
    """

    file: ExportedFile | None
    error: str | None
    completed: list[MaterialKind]

    @property
    def ok(self) -> bool:
        return self.file is not None


def resolve_item_count(kind: MaterialKind, value: int | str | None = None) -> int | None:
    """Item count for quiz/worksheet; None for kinds without one.

    The leading integer of the input is used ("12문항" is 12, "3.5" is 3);
    input without one falls back to the kind's default. The result is
    clamped to [1, 50].
    """
    default = DEFAULT_ITEM_COUNTS.get(kind)
    if default is None:
        return None
    if value is None:
        return default
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return default
    count = int(match.group(0))
    return max(MIN_ITEM_COUNT, min(MAX_ITEM_COUNT, count))


def build_course_context(state: ProgramState) -> str:
    """Course summary used to scale the volume of generated material."""
    context = (
        f"Topic: {state.topic}, Target: {state.target_audience}, "
        f"Students: {state.student_count}, Goal: {state.learning_goal}"
    )
    if state.schedule is not None:
        schedule = state.schedule
        hours = schedule.total_hours
        hours_text = str(int(hours)) if float(hours).is_integer() else str(hours)
        context += (
            f", Duration: {schedule.duration_weeks}주, "
            f"Sessions: {schedule.total_sessions}회, TotalHours: {hours_text}시간"
        )
    else:
        context += f", Duration: {state.duration}"
    return context


class MaterialController(StageController):
    """Generates one material kind at a time and caches each result.

    Args:
        client: Generation client.
        store: Program state owner; holds the material cache.
        on_change: ApiState observer.
        step_delay: Pause between generation calls in a batch.
        sleep: Awaitable used for the batch pause (injectable for tests).
    """

    stage_name = "materials"

    def __init__(
        self,
        client: GenerationClient,
        store: ProgramStore,
        *,
        on_change: OnChange | None = None,
        step_delay: float = DEFAULT_STEP_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        super().__init__(client, store, on_change=on_change)
        self._step_delay = step_delay
        self._sleep = sleep
        self._selected = MaterialKind.LESSON_PLAN

    @property
    def selected(self) -> MaterialKind:
        return self._selected

    def title(self, kind: MaterialKind) -> str:
        return f"{self._store.state.topic} - {kind.short_name}"

    def select(self, kind: MaterialKind) -> None:
        """Show the cached entry for ``kind``, or an empty output."""
        self._selected = kind
        self._show(self._store.state.material_cache.get(kind, ""))

    def prepare(self, kind: MaterialKind, count: int | str | None = None) -> PreparedPrompt:
        item_count = resolve_item_count(kind, count)
        extra = f" [Question Count: {item_count}문항]" if item_count is not None else ""
        return prepare_prompt(
            load_stage_prompt("materials"),
            material_type=kind.display_name,
            context=build_course_context(self._store.state),
            extra=extra,
        )

    async def generate(self, kind: MaterialKind, count: int | str | None = None) -> str | None:
        """Stream one material and overwrite only that kind's cache entry."""
        self._selected = kind
        if not self._store.state.has_plan:
            self._fail(PLAN_REQUIRED_MESSAGE)
            return None

        text = await self._run_stream(self.prepare(kind, count), action=f"material_{kind}")
        if text is None:
            return None
        self._store.set_material(kind, text)
        logger.info("material_generated", kind=kind, chars=len(text))
        return text

    def artifact(self, kind: MaterialKind) -> MarkdownReport | SlideDeck | None:
        """Exportable artifact for a cached kind."""
        text = self._store.state.material_cache.get(kind)
        if not text:
            return None
        title = self.title(kind)
        if kind == MaterialKind.PPT_OUTLINE:
            return SlideDeck(title=title, blocks=split_slides(text), file_prefix=kind.short_name)
        return MarkdownReport(title=title, text=text, file_prefix=kind.short_name)

    def _export_kind(self, kind: MaterialKind, text: str) -> ExportedFile:
        title = self.title(kind)
        if kind == MaterialKind.PPT_OUTLINE:
            return to_slide_deck(title, split_slides(text), prefix=kind.short_name)
        return to_word_document(text, title, prefix=kind.short_name)

    async def export_bundle(self, *, on_progress: ProgressFn | None = None) -> BatchExportResult:
        """Generate missing kinds, export all six and zip them.

        Missing kinds are generated sequentially with default item
        counts and committed to the cache immediately. The first
        failure aborts the rest; already cached entries stay.
        """
        state = self._store.state
        if not state.has_plan:
            return BatchExportResult(file=None, error=PLAN_REQUIRED_MESSAGE, completed=[])

        kinds = list(MaterialKind)
        total = len(kinds)
        files: list[tuple[str, ExportedFile]] = []
        completed: list[MaterialKind] = []
        calls = 0

        for index, kind in enumerate(kinds, start=1):
            if on_progress is not None:
                on_progress(index, total)

            text = self._store.state.material_cache.get(kind)
            if not text:
                if calls:
                    await self._sleep(self._step_delay)
                prepared = self.prepare(kind)
                calls += 1
                try:
                    text = await self._client.generate(
                        prepared.system_prompt,
                        prepared.user_prompt,
                        action=f"material_batch_{kind}",
                    )
                except GenerationError as exc:
                    logger.warning(
                        "batch_export_aborted",
                        kind=kind,
                        step=index,
                        completed=[k.value for k in completed],
                        category=exc.category,
                    )
                    return BatchExportResult(file=None, error=exc.message, completed=completed)
                self._store.set_material(kind, text)
                completed.append(kind)

            try:
                files.append((kind.value, self._export_kind(kind, text)))
            except ExportError as exc:
                logger.warning("batch_export_aborted", kind=kind, step=index, error=str(exc))
                return BatchExportResult(file=None, error=str(exc), completed=completed)

        try:
            bundle = build_bundle(state.topic, files)
        except ExportError as exc:
            logger.warning("batch_export_aborted", step=total, error=str(exc))
            return BatchExportResult(file=None, error=str(exc), completed=completed)
        logger.info(
            "batch_export_completed",
            topic=state.topic,
            generated=len(completed),
            size=len(bundle.content),
        )
        return BatchExportResult(file=bundle, error=None, completed=completed)
