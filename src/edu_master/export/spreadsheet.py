"""Spreadsheet export via openpyxl."""

import io

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from edu_master.export.files import ExportedFile, export_errors, make_file
from edu_master.parsing.tables import linearize_markdown

SHEET_NAME = "Result"
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 50


def column_widths(rows: list[list[str]]) -> list[float]:
    """Width per column: ``min(50, max(10, len * 1.5))`` of the widest cell."""
    widths: list[float] = []
    for row in rows:
        for index, cell in enumerate(row):
            width = min(MAX_COLUMN_WIDTH, max(MIN_COLUMN_WIDTH, len(cell) * 1.5))
            if index >= len(widths):
                widths.append(width)
            elif widths[index] < width:
                widths[index] = width
    return widths


def to_workbook(markdown_text: str, title: str, *, prefix: str = "") -> ExportedFile:
    rows = linearize_markdown(markdown_text, title)
    buffer = io.BytesIO()

    with export_errors("xlsx"):
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = SHEET_NAME
        for row_index, row in enumerate(rows, start=1):
            for col_index, value in enumerate(row, start=1):
                sheet.cell(row=row_index, column=col_index, value=value)

        for col_index, width in enumerate(column_widths(rows), start=1):
            sheet.column_dimensions[get_column_letter(col_index)].width = width

        workbook.save(buffer)
    return make_file(prefix, title, "xlsx", buffer.getvalue())
