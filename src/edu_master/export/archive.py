"""Zip bundle of exported materials."""

from __future__ import annotations

import io
import re
import zipfile
from collections.abc import Sequence

import structlog

from edu_master.export.files import DEFAULT_TITLE, MEDIA_TYPES, ExportedFile, export_errors

logger = structlog.get_logger()

_WHITESPACE_RE = re.compile(r"\s+")
_PATH_SEPARATORS_RE = re.compile(r"[\\/]")


def bundle_folder(topic: str) -> str:
    """Top-level folder name with whitespace and path separators replaced."""
    safe_topic = _PATH_SEPARATORS_RE.sub("_", _WHITESPACE_RE.sub("_", topic.strip()))
    return f"{safe_topic or DEFAULT_TITLE}_수업자료"


def bundle_entry_name(index: int, kind: str, topic: str, extension: str) -> str:
    """``{index}_{kind}_{topic[:10]}.{ext}``, index is 1-based."""
    short_topic = _PATH_SEPARATORS_RE.sub("_", topic[:10])
    return f"{index}_{kind}_{short_topic}.{extension}"


def bundle_name(topic: str) -> str:
    safe_topic = _PATH_SEPARATORS_RE.sub("_", topic.strip()) or DEFAULT_TITLE
    return f"{safe_topic}_수업자료_패키지.zip"


def build_bundle(topic: str, files: Sequence[tuple[str, ExportedFile]]) -> ExportedFile:
    """Zip ``(kind, file)`` pairs into one folder, numbered in order."""
    folder = bundle_folder(topic)
    buffer = io.BytesIO()
    with export_errors("zip"), zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for index, (kind, file) in enumerate(files, start=1):
            entry = bundle_entry_name(index, kind, topic, file.extension)
            archive.writestr(f"{folder}/{entry}", file.content)

    logger.info("bundle_built", topic=topic, files=len(files))
    return ExportedFile(
        filename=bundle_name(topic),
        media_type=MEDIA_TYPES["zip"],
        content=buffer.getvalue(),
    )
