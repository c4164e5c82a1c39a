"""Exception hierarchy shared across the indexer."""

from __future__ import annotations


class FsIndexerError(Exception):
    """Base exception for all fsindexer errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(FsIndexerError):
    """Raised when the run configuration cannot be used."""


class ExtractionError(FsIndexerError):
    """Raised when a document cannot be converted to text."""


class UnsupportedFormatError(ExtractionError):
    """Raised when no converter handles the file's extension."""


class BackendError(FsIndexerError):
    """Raised when an index backend call fails."""

    def __init__(self, message: str, status: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status = status


class BackendOverloadedError(BackendError):
    """Raised when the backend asks the caller to slow down (HTTP 429)."""
