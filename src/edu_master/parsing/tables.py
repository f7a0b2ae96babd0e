"""Pipe-table helpers shared by the slide parser and the spreadsheet exporter."""

import re

_HEADING_RE = re.compile(r"^#+\s*")
_BOLD = "**"


def is_table_line(line: str) -> bool:
    """True for a trimmed line that starts and ends with ``|``."""
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def is_separator_row(line: str) -> bool:
    """True for a table alignment row such as ``|---|:---:|``."""
    return "---" in line


def split_cells(line: str) -> list[str]:
    """Split a pipe-table line into trimmed cells without bold markers."""
    stripped = line.strip()
    if stripped.startswith("|"):
        stripped = stripped[1:]
    if stripped.endswith("|"):
        stripped = stripped[:-1]
    return [strip_bold(cell.strip()) for cell in stripped.split("|")]


def strip_bold(text: str) -> str:
    return text.replace(_BOLD, "")


def strip_heading(text: str) -> str:
    return _HEADING_RE.sub("", text, count=1)


def linearize_markdown(text: str, title: str) -> list[list[str]]:
    """Flatten markdown into spreadsheet rows.

    Layout: title row, blank row, then one single-cell row per text
    line and one multi-cell row per table row. A blank row follows
    every table. Separator rows and blank lines are skipped.
    """
    rows: list[list[str]] = [[title], []]
    in_table = False
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if is_table_line(line):
            in_table = True
            if not is_separator_row(line):
                rows.append(split_cells(line))
            continue

        if in_table:
            rows.append([])
            in_table = False
        if not line:
            continue
        rows.append([strip_bold(strip_heading(line))])

    if in_table:
        rows.append([])
    return rows
