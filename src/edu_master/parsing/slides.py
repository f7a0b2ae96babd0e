"""Split a generated PPT outline into slide blocks."""

from __future__ import annotations

import re

from edu_master.models.artifacts import (
    BulletElement,
    SlideBlock,
    SlideElement,
    TableElement,
    TextElement,
)
from edu_master.parsing.tables import (
    is_separator_row,
    is_table_line,
    split_cells,
    strip_bold,
)

DEFAULT_SLIDE_TITLE = "내용"
MIN_BLOCK_CHARS = 5

_SLIDE_SPLIT_RE = re.compile(
    r"^(?=#\s*Slide|#\s*슬라이드|Slide\s+\d+)", re.MULTILINE | re.IGNORECASE
)
_HASH_PREFIX_RE = re.compile(r"^#+\s*")
_SLIDE_PREFIX_RE = re.compile(r"^(?:Slide|슬라이드)\s*\d+\s*[:.]?", re.IGNORECASE)
_BULLET_RE = re.compile(r"^(?:[-*+]|\d+\.)\s+")


def split_slides(text: str) -> list[SlideBlock]:
    """Parse an outline into ordered slide blocks.

    Headers look like ``# Slide 3: Title``, ``# 슬라이드 3: Title`` or a
    bare ``Slide 3``. Text before the first header becomes
    its own block, like any other chunk of at least five characters.
    """
    blocks: list[SlideBlock] = []
    for chunk in _SLIDE_SPLIT_RE.split(text):
        trimmed = chunk.strip()
        if len(trimmed) < MIN_BLOCK_CHARS:
            continue
        blocks.append(_parse_block(trimmed))
    return blocks


def clean_title(line: str) -> str:
    title = _HASH_PREFIX_RE.sub("", line.strip())
    title = _SLIDE_PREFIX_RE.sub("", title)
    title = strip_bold(title).strip()
    return title or DEFAULT_SLIDE_TITLE


def _parse_block(chunk: str) -> SlideBlock:
    lines = chunk.splitlines()
    elements: list[SlideElement] = []
    table_rows: list[list[str]] = []

    def flush_table() -> None:
        if table_rows:
            elements.append(TableElement(rows=list(table_rows)))
            table_rows.clear()

    for raw_line in lines[1:]:
        line = strip_bold(raw_line.strip())
        if not line:
            continue
        if is_table_line(line):
            if not is_separator_row(line):
                table_rows.append(split_cells(line))
            continue

        flush_table()
        if _BULLET_RE.match(line):
            elements.append(BulletElement(text=_BULLET_RE.sub("", line, count=1)))
        else:
            elements.append(TextElement(text=line))
    flush_table()

    return SlideBlock(title=clean_title(lines[0]), elements=elements)
