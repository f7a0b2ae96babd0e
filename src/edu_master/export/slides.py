"""Slide deck export via python-pptx.

Layout is planned first (``plan_slides``, pure) and rendered second,
so overflow handling can be tested without opening a presentation.

Overflow rules:
- a text line or table that would cross MAX_Y starts a
  "{title} (Continued)" slide first;
- a table taller than a whole slide is split across continuation
  slides with its header row repeated;
- nothing is ever dropped.
"""

from __future__ import annotations

import io
from typing import NamedTuple

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import PP_ALIGN
from pptx.slide import Slide
from pptx.text.text import _Paragraph
from pptx.util import Inches, Pt

from edu_master.export.files import ExportedFile, export_errors, make_file
from edu_master.models.artifacts import (
    BulletElement,
    SlideBlock,
    SlideElement,
    TableElement,
    TextElement,
)

SLIDE_WIDTH_IN = 13.333
SLIDE_HEIGHT_IN = 7.5
MARGIN_X = 0.5
TITLE_Y = 0.5
START_Y = 1.2
MAX_Y = 6.5
LINE_HEIGHT = 0.5
ROW_HEIGHT = 0.5
TABLE_GAP = 0.5
CONTINUED_SUFFIX = " (Continued)"
COVER_SUBTITLE = "수업 자료 (Generated by EduMaster.AI)"
FONT_FACE = "Malgun Gothic"

_BLANK_LAYOUT = 6
_CONTENT_WIDTH_IN = SLIDE_WIDTH_IN - 2 * MARGIN_X
_TITLE_COLOR = RGBColor(0x36, 0x36, 0x36)
_TEXT_COLOR = RGBColor(0x55, 0x55, 0x55)
_EPS = 1e-9


class PlacedElement(NamedTuple):
    y: float
    element: SlideElement


class PlannedSlide(NamedTuple):
    title: str
    items: list[PlacedElement]


def table_capacity() -> int:
    """Rows that fit on an empty slide."""
    return int((MAX_Y - START_Y) / ROW_HEIGHT + _EPS)


def pad_rows(rows: list[list[str]]) -> list[list[str]]:
    """Pad ragged rows with empty cells up to the widest row."""
    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


def _split_table(rows: list[list[str]], capacity: int) -> list[list[list[str]]]:
    """Split rows into slide-sized chunks, repeating the header row."""
    header, body = rows[0], rows[1:]
    per_chunk = max(1, capacity - 1)
    chunks = []
    for start in range(0, len(body), per_chunk):
        chunks.append([header, *body[start : start + per_chunk]])
    return chunks or [[header]]


def plan_block(block: SlideBlock) -> list[PlannedSlide]:
    """Place one block's elements on as many slides as needed."""
    slides = [PlannedSlide(block.title, [])]
    y = START_Y

    def new_slide() -> None:
        nonlocal y
        slides.append(PlannedSlide(block.title + CONTINUED_SUFFIX, []))
        y = START_Y

    for element in block.elements:
        if isinstance(element, TableElement):
            if not element.rows:
                continue
            rows = pad_rows(element.rows)
            height = len(rows) * ROW_HEIGHT
            if y + height > MAX_Y + _EPS and y > START_Y:
                new_slide()
            if START_Y + height <= MAX_Y + _EPS:
                slides[-1].items.append(PlacedElement(y, TableElement(rows=rows)))
                y += height + TABLE_GAP
                continue
            chunks = _split_table(rows, table_capacity())
            for index, chunk in enumerate(chunks):
                if index > 0:
                    new_slide()
                slides[-1].items.append(PlacedElement(y, TableElement(rows=chunk)))
                y += len(chunk) * ROW_HEIGHT + TABLE_GAP
        else:
            if y + LINE_HEIGHT > MAX_Y + _EPS:
                new_slide()
            slides[-1].items.append(PlacedElement(y, element))
            y += LINE_HEIGHT
    return slides


def plan_slides(blocks: list[SlideBlock]) -> list[PlannedSlide]:
    planned: list[PlannedSlide] = []
    for block in blocks:
        planned.extend(plan_block(block))
    return planned


# -- rendering ---------------------------------------------------------


def _style_runs(
    paragraph: _Paragraph,
    *,
    size: int,
    bold: bool = False,
    color: RGBColor = _TEXT_COLOR,
) -> None:
    for run in paragraph.runs:
        run.font.size = Pt(size)
        run.font.bold = bold
        run.font.name = FONT_FACE
        run.font.color.rgb = color


def _add_text(
    slide: Slide,
    text: str,
    *,
    y: float,
    height: float,
    size: int,
    bold: bool = False,
    color: RGBColor = _TEXT_COLOR,
    align: PP_ALIGN | None = None,
) -> None:
    box = slide.shapes.add_textbox(
        Inches(MARGIN_X), Inches(y), Inches(_CONTENT_WIDTH_IN), Inches(height)
    )
    frame = box.text_frame
    frame.word_wrap = True
    paragraph = frame.paragraphs[0]
    paragraph.text = text
    if align is not None:
        paragraph.alignment = align
    _style_runs(paragraph, size=size, bold=bold, color=color)


def _add_table(slide: Slide, rows: list[list[str]], *, y: float) -> None:
    n_rows, n_cols = len(rows), len(rows[0])
    shape = slide.shapes.add_table(
        n_rows,
        n_cols,
        Inches(MARGIN_X),
        Inches(y),
        Inches(_CONTENT_WIDTH_IN),
        Inches(n_rows * ROW_HEIGHT),
    )
    table = shape.table
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            cell = table.cell(r, c)
            cell.text = value
            for paragraph in cell.text_frame.paragraphs:
                _style_runs(paragraph, size=12, bold=(r == 0), color=_TITLE_COLOR)


def render_slides(title: str, planned: list[PlannedSlide]) -> bytes:
    """Render a cover slide plus the planned slides to .pptx bytes."""
    prs = Presentation()
    prs.slide_width = Inches(SLIDE_WIDTH_IN)
    prs.slide_height = Inches(SLIDE_HEIGHT_IN)
    layout = prs.slide_layouts[_BLANK_LAYOUT]

    cover = prs.slides.add_slide(layout)
    _add_text(
        cover, title, y=2.0, height=1.2, size=32, bold=True,
        color=_TITLE_COLOR, align=PP_ALIGN.CENTER,
    )
    _add_text(cover, COVER_SUBTITLE, y=3.5, height=0.8, size=18, align=PP_ALIGN.CENTER)

    for planned_slide in planned:
        slide = prs.slides.add_slide(layout)
        _add_text(
            slide, planned_slide.title, y=TITLE_Y, height=0.6, size=24,
            bold=True, color=_TITLE_COLOR,
        )
        for item in planned_slide.items:
            element = item.element
            if isinstance(element, TableElement):
                _add_table(slide, element.rows, y=item.y)
            elif isinstance(element, BulletElement):
                _add_text(slide, f"• {element.text}", y=item.y, height=LINE_HEIGHT, size=16)
            elif isinstance(element, TextElement):
                _add_text(slide, element.text, y=item.y, height=LINE_HEIGHT, size=16)

    buffer = io.BytesIO()
    prs.save(buffer)
    return buffer.getvalue()


def to_slide_deck(title: str, blocks: list[SlideBlock], *, prefix: str = "") -> ExportedFile:
    with export_errors("pptx"):
        content = render_slides(title, plan_slides(blocks))
    return make_file(prefix, title, "pptx", content)
