"""Exceptions raised or published by a LiveJSON document.

Structural differences between two trees are never errors. These only
cover candidates that are not documents at all and file I/O failures.
"""

from __future__ import annotations


class LiveJSONError(Exception):
    """Base class. ``original_error`` is the exception that caused it, if any."""

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class InvalidDocumentError(LiveJSONError, TypeError):
    """The candidate root is not a JSON object."""


class DocumentAccessError(LiveJSONError):
    """The file exists but cannot be read (or written, with autosave)."""


class DocumentReadError(LiveJSONError):
    """The file could not be read or is not valid JSON."""


class DocumentWriteError(LiveJSONError):
    """The document could not be written back to its file."""
