"""Exported file container, naming rules and the save side effect."""

from __future__ import annotations

import re
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog

from edu_master.errors import ExportError

logger = structlog.get_logger()

DEFAULT_TITLE = "문서"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9가-힣\s]")

MEDIA_TYPES: dict[str, str] = {
    "doc": "application/msword",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "pdf": "application/pdf",
    "zip": "application/zip",
}


@dataclass(frozen=True)
class ExportedFile:
    """In-memory result of an exporter."""

    filename: str
    media_type: str
    content: bytes

    @property
    def extension(self) -> str:
        return self.filename.rsplit(".", 1)[-1] if "." in self.filename else ""


def sanitize_title(title: str) -> str:
    """Keep latin letters, digits, Hangul and whitespace; fall back to 문서."""
    cleaned = _UNSAFE_CHARS_RE.sub("", title).strip()
    return cleaned or DEFAULT_TITLE


def file_name(prefix: str, title: str, extension: str) -> str:
    """``{prefix}_{sanitized title}.{ext}``; the prefix is optional."""
    safe = sanitize_title(title)
    stem = f"{prefix}_{safe}" if prefix else safe
    return f"{stem}.{extension}"


@contextmanager
def export_errors(extension: str) -> Iterator[None]:
    """Re-raise any failure while building a ``.{extension}`` file as ExportError."""
    try:
        yield
    except ExportError:
        raise
    except Exception as exc:
        logger.warning("export_failed", extension=extension, error=str(exc))
        raise ExportError(f"Failed to build .{extension} file: {exc}") from exc


def make_file(prefix: str, title: str, extension: str, content: bytes) -> ExportedFile:
    return ExportedFile(
        filename=file_name(prefix, title, extension),
        media_type=MEDIA_TYPES[extension],
        content=content,
    )


def save_file(file: ExportedFile, directory: Path | str) -> Path:
    """Write ``file`` into ``directory`` and return the written path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / file.filename
    path.write_bytes(file.content)
    logger.info("file_saved", path=str(path), size=len(file.content))
    return path
