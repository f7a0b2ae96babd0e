from edu_master.ingestion.base import ProcessingError, UnsupportedFormatError
from edu_master.ingestion.spreadsheet import read_feedback_file

__all__ = ["ProcessingError", "UnsupportedFormatError", "read_feedback_file"]
