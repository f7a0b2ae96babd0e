"""Export engine: serializes artifacts into downloadable files."""

from edu_master.export.archive import build_bundle
from edu_master.export.dispatch import ExportFormat, export_artifact
from edu_master.export.files import ExportedFile, file_name, sanitize_title, save_file
from edu_master.export.slides import plan_slides, to_slide_deck
from edu_master.export.spreadsheet import to_workbook
from edu_master.export.survey_pdf import to_survey_pdf
from edu_master.export.word import to_word_document

__all__ = [
    "ExportFormat",
    "ExportedFile",
    "build_bundle",
    "export_artifact",
    "file_name",
    "plan_slides",
    "sanitize_title",
    "save_file",
    "to_slide_deck",
    "to_survey_pdf",
    "to_word_document",
    "to_workbook",
]
