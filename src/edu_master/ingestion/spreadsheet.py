"""Feedback upload reader: flatten a spreadsheet into analysis text.

Supports .xlsx (openpyxl), legacy .xls (xlrd) and .csv. Only the
first sheet is read. Every non-empty cell becomes one line, in
row-major order.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from pathlib import PurePath
from typing import Any

import structlog
import xlrd
from openpyxl import load_workbook

from edu_master.ingestion.base import ProcessingError, UnsupportedFormatError

logger = structlog.get_logger()

SUPPORTED_EXTENSIONS = frozenset({".xlsx", ".xls", ".csv"})
_CSV_ENCODINGS = ("utf-8-sig", "cp949")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _flatten(rows: Iterable[Iterable[Any]]) -> str:
    lines: list[str] = []
    for row in rows:
        for value in row:
            text = _cell_text(value)
            if text:
                lines.append(text + "\n")
    return "".join(lines)


def _read_xlsx(content: bytes) -> str:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return _flatten(sheet.iter_rows(values_only=True))
    finally:
        workbook.close()


def _read_xls(content: bytes) -> str:
    workbook = xlrd.open_workbook(file_contents=content)
    sheet = workbook.sheet_by_index(0)
    return _flatten(sheet.row_values(row_idx) for row_idx in range(sheet.nrows))


def _read_csv(content: bytes) -> str:
    for encoding in _CSV_ENCODINGS:
        try:
            decoded = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        return _flatten(csv.reader(io.StringIO(decoded)))
    raise ProcessingError("CSV file is neither UTF-8 nor CP949 encoded")


_READERS = {
    ".xlsx": _read_xlsx,
    ".xls": _read_xls,
    ".csv": _read_csv,
}


def read_feedback_file(filename: str, content: bytes) -> str:
    """Extract text from an uploaded feedback spreadsheet.

    Raises:
        UnsupportedFormatError: Extension is not xlsx, xls or csv.
        ProcessingError: The file is corrupt or unreadable.
    """
    extension = PurePath(filename).suffix.lower()
    reader = _READERS.get(extension)
    if reader is None:
        raise UnsupportedFormatError(
            f"Unsupported file type '{extension or filename}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    try:
        text = reader(content)
    except ProcessingError:
        raise
    except Exception as exc:
        logger.warning("feedback_file_unreadable", filename=filename, error=str(exc))
        raise ProcessingError(f"Failed to read {filename}: {exc}") from exc

    logger.info(
        "feedback_file_read",
        filename=filename,
        format=extension,
        lines=text.count("\n"),
    )
    return text
