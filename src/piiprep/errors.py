"""Exceptions raised by piiprep."""

from typing import Optional


class InvalidInputError(ValueError):
    """Raised when a value cannot be normalized, hashed or encoded.

    Every failure in the formatter is deterministic: calling again with the
    same input raises again, so callers should skip or report, not retry.
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field_name = field_name


class IngestFileError(ValueError):
    """Raised when a member or event file does not have the expected shape."""
