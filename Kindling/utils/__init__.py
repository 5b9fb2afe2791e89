from .errors import (
    KindlingException,
    ConfigurationError,
    StorageError,
    ParseError,
    WriteError,
    NodeNotFoundError,
    ValidationError,
)
from .timeutil import utcnow, ensure_utc, parse_timestamp

__all__ = [
    "KindlingException",
    "ConfigurationError",
    "StorageError",
    "ParseError",
    "WriteError",
    "NodeNotFoundError",
    "ValidationError",
    "utcnow",
    "ensure_utc",
    "parse_timestamp",
]
