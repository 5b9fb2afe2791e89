"""Storage backends for the JSON documents Kindling persists.

A backend holds exactly one document (the heat ledger, the archive metadata, a
report). Mutations are read-modify-write cycles performed inside ``lease()``.

- FileDocumentStorage: one JSON file, exclusive ``fcntl`` lock on a sibling
  ``.lock`` file, writes go to a temp file and are renamed into place.
- InMemoryDocumentStorage: keeps the serialized text in memory, for tests.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Protocol, Union

from ..utils.errors import ParseError, StorageError, WriteError

logger = getLogger(__name__)


class DocumentStorage(Protocol):
    """Read/write capability over a single JSON document."""

    def read(self) -> Optional[Dict[str, Any]]:
        """Return the parsed document, or None when it does not exist yet."""
        ...

    def write(self, document: Dict[str, Any]) -> None:
        ...

    def lease(self) -> Any:
        """Context manager holding exclusive access for a read-modify-write."""
        ...


def _decode(text: str, source: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Malformed JSON document: {e}", context={"source": source}) from e
    if not isinstance(data, dict):
        raise ParseError("Document root must be a JSON object", context={"source": source})
    return data


class FileDocumentStorage:
    """JSON document stored in one file with atomic replacement."""

    def __init__(self, path: Union[str, Path], lock_timeout_s: float = 10.0):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout_s = lock_timeout_s

    def __repr__(self) -> str:
        return f"FileDocumentStorage({str(self.path)!r})"

    def read(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}", context={"path": str(self.path)}) from e
        except UnicodeDecodeError as e:
            raise ParseError(f"Document is not valid UTF-8: {e}", context={"path": str(self.path)}) from e
        return _decode(text, str(self.path))

    def write(self, document: Dict[str, Any]) -> None:
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent),
                prefix="." + self.path.name + "-",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove temp file {tmp_path}")
            raise WriteError(f"Cannot write {self.path}: {e}", context={"path": str(self.path)}) from e
        logger.debug(f"Wrote {self.path} ({len(payload)} bytes)")

    @contextmanager
    def lease(self) -> Iterator[None]:
        """Hold an exclusive advisory lock on the document for the block."""
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(str(self.lock_path), os.O_CREAT | os.O_WRONLY, 0o644)
        except OSError as e:
            raise StorageError(f"Cannot open lock file: {e}", context={"path": str(self.lock_path)}) from e

        deadline = time.monotonic() + self.lock_timeout_s
        waited = False
        try:
            while True:
                try:
                    fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except (BlockingIOError, OSError):
                    if time.monotonic() >= deadline:
                        raise StorageError(
                            f"Timed out after {self.lock_timeout_s}s waiting for lock",
                            context={"path": str(self.lock_path)},
                        )
                    if not waited:
                        logger.warning(f"Waiting for lock on {self.path}")
                        waited = True
                    time.sleep(0.05)
            yield
        finally:
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            except OSError as e:
                logger.warning(f"Failed to unlock {self.lock_path}: {e}")
            os.close(fd)


class InMemoryDocumentStorage:
    """Document held as serialized JSON text. Serializing keeps the same
    round-trip behaviour as the file backend."""

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        self.text: Optional[str] = None
        self.writes = 0
        self._lock = threading.RLock()
        if document is not None:
            self.text = json.dumps(document)

    def read(self) -> Optional[Dict[str, Any]]:
        if self.text is None:
            return None
        return _decode(self.text, "memory")

    def write(self, document: Dict[str, Any]) -> None:
        try:
            self.text = json.dumps(document, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise WriteError(f"Document is not serializable: {e}") from e
        self.writes += 1

    @contextmanager
    def lease(self) -> Iterator[None]:
        with self._lock:
            yield


__all__ = [
    "DocumentStorage",
    "FileDocumentStorage",
    "InMemoryDocumentStorage",
]
