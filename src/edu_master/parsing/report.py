"""Markdown reports: answer-key splitting and HTML rendering."""

from __future__ import annotations

import html
import re
from typing import NamedTuple

import markdown

DEFAULT_ANSWER_TITLE = "정답 및 해설"

_ANSWER_HEADING_RE = re.compile(r"^#+\s*(?:정답|해설|answer)", re.IGNORECASE | re.MULTILINE)
_MARKDOWN_EXTENSIONS = ["tables", "sane_lists"]


class ReportSections(NamedTuple):
    """Report split into the visible part and an optional answer key."""

    main: str
    answer_title: str | None = None
    answer_body: str | None = None

    @property
    def has_answer_key(self) -> bool:
        return self.answer_title is not None


def split_answer_key(text: str) -> ReportSections:
    """Split at the first heading starting with 정답, 해설 or Answer."""
    match = _ANSWER_HEADING_RE.search(text)
    if match is None:
        return ReportSections(main=text)

    heading_end = text.find("\n", match.start())
    if heading_end == -1:
        heading_line, body = text[match.start() :], ""
    else:
        heading_line, body = text[match.start() : heading_end], text[heading_end + 1 :]

    title = heading_line.replace("#", "").strip() or DEFAULT_ANSWER_TITLE
    return ReportSections(
        main=text[: match.start()].rstrip(),
        answer_title=title,
        answer_body=body.strip(),
    )


def render_markdown(text: str) -> str:
    """Convert markdown (with pipe tables) to an HTML fragment."""
    return markdown.markdown(text, extensions=_MARKDOWN_EXTENSIONS)


def render_report_html(text: str) -> str:
    """Render a report; an answer key becomes a collapsed ``<details>`` block."""
    sections = split_answer_key(text)
    body = render_markdown(sections.main)
    if not sections.has_answer_key:
        return body
    summary = html.escape(f"💡 {sections.answer_title} (클릭하여 확인)")
    answer_html = render_markdown(sections.answer_body or "")
    return (
        f'{body}\n<details class="answer-key">\n'
        f"<summary>{summary}</summary>\n{answer_html}\n</details>"
    )
