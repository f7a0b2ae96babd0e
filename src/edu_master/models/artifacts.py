"""Exportable artifacts.

Every artifact carries a ``kind`` discriminator so export dispatch can
handle each variant explicitly.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from edu_master.models.survey import SurveyAnswers, SurveySchema


class TableElement(BaseModel):
    kind: Literal["table"] = "table"
    rows: list[list[str]]


class BulletElement(BaseModel):
    kind: Literal["bullet"] = "bullet"
    text: str


class TextElement(BaseModel):
    kind: Literal["text"] = "text"
    text: str


SlideElement = Annotated[
    TableElement | BulletElement | TextElement, Field(discriminator="kind")
]


class SlideBlock(BaseModel):
    """Content of one logical slide before layout."""

    title: str
    elements: list[SlideElement] = Field(default_factory=list)


class MarkdownReport(BaseModel):
    kind: Literal["markdown"] = "markdown"
    title: str
    text: str
    file_prefix: str = ""


class SlideDeck(BaseModel):
    kind: Literal["slides"] = "slides"
    title: str
    blocks: list[SlideBlock] = Field(default_factory=list)
    file_prefix: str = ""


class SurveyArtifact(BaseModel):
    kind: Literal["survey"] = "survey"
    survey: SurveySchema
    answers: SurveyAnswers = Field(default_factory=dict)


Artifact = Annotated[
    MarkdownReport | SlideDeck | SurveyArtifact, Field(discriminator="kind")
]
