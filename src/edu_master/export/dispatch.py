"""Route an artifact to the exporter for the requested format."""

from __future__ import annotations

from enum import StrEnum

import structlog

from edu_master.errors import ExportError
from edu_master.export.files import ExportedFile
from edu_master.export.slides import to_slide_deck
from edu_master.export.spreadsheet import to_workbook
from edu_master.export.survey_pdf import to_survey_pdf
from edu_master.export.word import to_word_document
from edu_master.models.artifacts import (
    Artifact,
    MarkdownReport,
    SlideDeck,
    SurveyArtifact,
)

logger = structlog.get_logger()


class ExportFormat(StrEnum):
    DOC = "doc"
    XLSX = "xlsx"
    PPTX = "pptx"
    PDF = "pdf"


SUPPORTED_FORMATS: dict[str, frozenset[ExportFormat]] = {
    "markdown": frozenset({ExportFormat.DOC, ExportFormat.XLSX}),
    "slides": frozenset({ExportFormat.PPTX}),
    "survey": frozenset({ExportFormat.PDF}),
}


def export_artifact(artifact: Artifact, fmt: ExportFormat | str) -> ExportedFile:
    """Serialize ``artifact`` as ``fmt``.

    Raises:
        ExportError: The artifact kind does not support the format.
    """
    try:
        target = ExportFormat(fmt)
    except ValueError as exc:
        raise ExportError(f"Unknown export format: {fmt!r}") from exc

    if target not in SUPPORTED_FORMATS[artifact.kind]:
        raise ExportError(f"Cannot export {artifact.kind} artifact as {target}")

    if isinstance(artifact, MarkdownReport):
        if target == ExportFormat.DOC:
            file = to_word_document(artifact.text, artifact.title, prefix=artifact.file_prefix)
        else:
            file = to_workbook(artifact.text, artifact.title, prefix=artifact.file_prefix)
    elif isinstance(artifact, SlideDeck):
        file = to_slide_deck(artifact.title, artifact.blocks, prefix=artifact.file_prefix)
    elif isinstance(artifact, SurveyArtifact):
        file = to_survey_pdf(artifact.survey, artifact.answers)
    else:
        raise ExportError(f"Unsupported artifact: {type(artifact).__name__}")

    logger.info(
        "artifact_exported",
        kind=artifact.kind,
        format=target,
        filename=file.filename,
        size=len(file.content),
    )
    return file
