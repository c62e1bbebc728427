"""Exception types raised by the backend modules."""

from __future__ import annotations


class DataAlchemistError(Exception):
    """Base class for all application errors."""


class CSVParseError(DataAlchemistError):
    """Raised when an uploaded file cannot be parsed as CSV."""


class AIServiceError(DataAlchemistError):
    """Raised when the AI service cannot produce a usable answer.

    Covers transport failures, a missing API key, empty completions and
    completions that are not the JSON shape the caller asked for.
    """
