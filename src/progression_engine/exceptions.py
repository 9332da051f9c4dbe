"""Custom exception hierarchy for the progression engine.

The storage and catalog layers raise these; the Target Store and Rule Catalog
catch them and fall back to an empty state, so nothing here ever reaches a
``decide_next`` caller.
"""

from __future__ import annotations


class ProgressionEngineError(Exception):
    """Base exception for all progression_engine errors."""


class CatalogLoadError(ProgressionEngineError):
    """A rule file exists but could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class StorageError(ProgressionEngineError):
    """Base class for key-value storage failures."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class StorageReadError(StorageError):
    """The backend could not read a stored blob."""


class StorageWriteError(StorageError):
    """The backend could not write a blob."""


class StorageDecodeError(StorageError):
    """A stored blob was read but does not decode to the expected schema."""


class LegacyEntryError(ProgressionEngineError):
    """A single legacy (v1) target row could not be converted."""
