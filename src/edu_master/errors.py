"""Domain-specific exceptions for edu-master."""

from __future__ import annotations

from enum import StrEnum


class FailureCategory(StrEnum):
    """Failure classes of a generation call."""

    RATE_LIMITED = "rate_limited"
    OVERLOADED = "overloaded"
    SAFETY_BLOCKED = "safety_blocked"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in (FailureCategory.RATE_LIMITED, FailureCategory.OVERLOADED)


class GenerationError(Exception):
    """Generation failed; ``message`` is ready to show to the user.

    Attributes:
        category: Detected failure class.
        attempts: How many calls were made before giving up.
    """

    def __init__(
        self,
        category: FailureCategory,
        message: str,
        *,
        attempts: int = 1,
    ) -> None:
        self.category = category
        self.message = message
        self.attempts = attempts
        super().__init__(message)


class ProviderNotConfiguredError(Exception):
    """Raised when the selected LLM provider has no API key."""


class MalformedOutputError(Exception):
    """Model output could not be parsed into the expected artifact.

    Attributes:
        raw_content: The text that failed to parse.
        schema_name: Name of the expected model.
    """

    def __init__(self, raw_content: str, schema_name: str, reason: str) -> None:
        self.raw_content = raw_content
        self.schema_name = schema_name
        super().__init__(f"failed to parse response as {schema_name}: {reason}")


class ExportError(Exception):
    """Raised when an artifact cannot be converted to the requested format."""
