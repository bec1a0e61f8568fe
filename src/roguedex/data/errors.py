"""Exceptions raised while loading game content."""
from __future__ import annotations

from pathlib import Path


class DataError(Exception):
    """Base exception for species, card, event and map content."""


class DataLoadError(DataError):
    """A content file could not be read or parsed.

    ``path`` is the offending file when one is known.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class DataValidationError(DataError):
    """A content entry has the wrong shape (missing field, bad type, bad range)."""


class DataReferenceError(DataError):
    """A content entry names a species, card, passive or node that does not exist."""
