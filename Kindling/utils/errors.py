"""Exception hierarchy for the Kindling relevance layer.

Every failure a caller can act on derives from ``KindlingException`` and
carries a ``context`` dict (path, operation, offending value) for logs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class KindlingException(Exception):
    """Base exception for Kindling."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        text = f"[{type(self).__name__}] {self.message}"
        if self.context:
            details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
            text = f"{text} ({details})"
        return text


class ConfigurationError(KindlingException):
    """Config file is unreadable or not a JSON object."""


class StorageError(KindlingException):
    """A persisted document could not be locked, read or written."""


class ParseError(StorageError):
    """A persisted document is malformed. No partial recovery is attempted."""


class WriteError(StorageError):
    """A document write failed and the mutation was not applied."""


class NodeNotFoundError(KindlingException):
    pass


class ValidationError(KindlingException):
    """Invalid caller input: boost, confidence tier, sort mode, report kind, path."""


__all__ = [
    "KindlingException",
    "ConfigurationError",
    "StorageError",
    "ParseError",
    "WriteError",
    "NodeNotFoundError",
    "ValidationError",
]
