"""Ingestion exceptions."""


class ProcessingError(Exception):
    """Raised when an uploaded file cannot be read."""


class UnsupportedFormatError(ProcessingError):
    """Raised when the upload format is not supported."""
