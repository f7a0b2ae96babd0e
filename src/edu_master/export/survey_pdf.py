"""Survey form export to PDF via reportlab."""

from __future__ import annotations

import io
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import Flowable, KeepTogether, Paragraph, SimpleDocTemplate, Spacer

from edu_master.export.files import ExportedFile, export_errors, make_file
from edu_master.models.survey import (
    AnswerValue,
    QuestionType,
    SurveyAnswers,
    SurveyQuestion,
    SurveySchema,
)

KOREAN_FONT = "HYGothic-Medium"
FILE_PREFIX = "설문지"
NO_ANSWER = "(미응답)"

_MUTED = HexColor("#6B7280")
_ACCENT_HEX = "#B91C1C"

_registered = False


def _ensure_font() -> None:
    global _registered
    if not _registered:
        pdfmetrics.registerFont(UnicodeCIDFont(KOREAN_FONT))
        _registered = True


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "SurveyTitle", parent=base["Title"], fontName=KOREAN_FONT, fontSize=20, leading=26
        ),
        "description": ParagraphStyle(
            "SurveyDescription", parent=base["Normal"], fontName=KOREAN_FONT,
            fontSize=10.5, leading=16, textColor=_MUTED,
        ),
        "question": ParagraphStyle(
            "Question", parent=base["Normal"], fontName=KOREAN_FONT,
            fontSize=12, leading=18, spaceBefore=6,
        ),
        "meta": ParagraphStyle(
            "QuestionType", parent=base["Normal"], fontName=KOREAN_FONT,
            fontSize=8.5, leading=12, textColor=_MUTED,
        ),
        "option": ParagraphStyle(
            "Option", parent=base["Normal"], fontName=KOREAN_FONT,
            fontSize=10.5, leading=16, leftIndent=8 * mm,
        ),
        "answer": ParagraphStyle(
            "Answer", parent=base["Normal"], fontName=KOREAN_FONT,
            fontSize=10.5, leading=16, leftIndent=8 * mm,
        ),
    }


def is_selected(question: SurveyQuestion, answer: AnswerValue | None, option: str) -> bool:
    if answer is None:
        return False
    if question.type == QuestionType.CHECKBOX:
        return isinstance(answer, list) and option in answer
    return str(answer) == option


def _format_answer(answer: AnswerValue | None) -> str:
    if answer is None or answer == "" or answer == []:
        return NO_ANSWER
    if isinstance(answer, list):
        return ", ".join(answer)
    return str(answer)


def _question_flowables(
    number: int,
    question: SurveyQuestion,
    answer: AnswerValue | None,
    styles: dict[str, ParagraphStyle],
) -> list[Flowable]:
    marker = f' <font color="{_ACCENT_HEX}">*</font>' if question.required else ""
    parts: list[Flowable] = [
        Paragraph(f"{number}. {escape(question.title)}{marker}", styles["question"]),
        Paragraph(escape(question.type.label), styles["meta"]),
    ]
    if question.type.has_options:
        for option in question.options:
            if question.type == QuestionType.CHECKBOX:
                box = "[v]" if is_selected(question, answer, option) else "[  ]"
            else:
                box = "(●)" if is_selected(question, answer, option) else "(  )"
            parts.append(Paragraph(f"{box} {escape(option)}", styles["option"]))
    else:
        parts.append(Paragraph(f"답변: {escape(_format_answer(answer))}", styles["answer"]))
    return [KeepTogether(parts), Spacer(1, 4 * mm)]


def render_survey_pdf(survey: SurveySchema, answers: SurveyAnswers) -> bytes:
    """Render the form with the current answers marked."""
    _ensure_font()
    styles = _styles()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=18 * mm,
        rightMargin=18 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=survey.title,
    )

    story: list[Flowable] = [Paragraph(escape(survey.title), styles["title"])]
    if survey.description:
        story.append(Paragraph(escape(survey.description), styles["description"]))
    story.append(Spacer(1, 8 * mm))
    for number, question in enumerate(survey.questions, start=1):
        story.extend(_question_flowables(number, question, answers.get(question.id), styles))

    doc.build(story)
    return buffer.getvalue()


def to_survey_pdf(survey: SurveySchema, answers: SurveyAnswers) -> ExportedFile:
    with export_errors("pdf"):
        content = render_survey_pdf(survey, answers)
    return make_file(FILE_PREFIX, survey.title, "pdf", content)
