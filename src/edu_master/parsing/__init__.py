"""Parsers that turn generated text into structured artifacts."""

from edu_master.parsing.report import (
    ReportSections,
    render_markdown,
    render_report_html,
    split_answer_key,
)
from edu_master.parsing.slides import split_slides
from edu_master.parsing.survey import parse_survey, strip_code_fences
from edu_master.parsing.tables import (
    is_separator_row,
    is_table_line,
    linearize_markdown,
    split_cells,
)

__all__ = [
    "ReportSections",
    "is_separator_row",
    "is_table_line",
    "linearize_markdown",
    "parse_survey",
    "render_markdown",
    "render_report_html",
    "split_answer_key",
    "split_cells",
    "split_slides",
    "strip_code_fences",
]
