"""Node Store: the directory tree of Markdown notes.

Node keys are POSIX-style paths relative to the store root. Directories named in
``system_dirs`` (ledger, reports, logs) are never listed as nodes.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Union

from ..utils.errors import NodeNotFoundError, ParseError, StorageError, ValidationError, WriteError
from ..utils.timeutil import utcnow

logger = getLogger(__name__)

DEFAULT_SYSTEM_DIRS = ("99-SYSTEM", "40-EVOLUTION-LOG")


@dataclass(frozen=True)
class NodeInfo:
    """A content file found while walking the store."""
    path: str
    full_path: Path
    modified: datetime


class NodeStore:
    """Read/write primitives over the memory tree."""

    def __init__(
        self,
        root: Union[str, Path],
        system_dirs: Sequence[str] = DEFAULT_SYSTEM_DIRS,
        extensions: Sequence[str] = (".md",),
        notes_dir: str = "20-BRANCHES",
    ):
        self.root = Path(root)
        self.system_dirs = set(system_dirs)
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.notes_dir = notes_dir

    @classmethod
    def from_config(cls, store_config) -> NodeStore:
        return cls(
            store_config.root,
            system_dirs=store_config.system_dirs,
            extensions=store_config.extensions,
            notes_dir=store_config.notes_dir,
        )

    def _resolve(self, path: str) -> Path:
        rel = PurePosixPath(path.replace("\\", "/"))
        if rel.is_absolute() or ".." in rel.parts:
            raise ValidationError(f"Node path must be relative to the store: {path}", context={"path": path})
        return self.root.joinpath(*rel.parts)

    def relative(self, full_path: Path) -> str:
        return full_path.relative_to(self.root).as_posix()

    def iter_nodes(self) -> Iterator[NodeInfo]:
        """Walk the tree in a stable order, skipping system directories."""
        if not self.root.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.system_dirs)
            for name in sorted(filenames):
                if not name.lower().endswith(self.extensions):
                    continue
                full = Path(dirpath) / name
                try:
                    mtime = full.stat().st_mtime
                except OSError as e:
                    logger.warning(f"Skipping unreadable node {full}: {e}")
                    continue
                yield NodeInfo(
                    path=self.relative(full),
                    full_path=full,
                    modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
                )

    def list_nodes(self) -> List[str]:
        return [node.path for node in self.iter_nodes()]

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def read(self, path: str) -> str:
        full = self._resolve(path)
        if not full.is_file():
            raise NodeNotFoundError(f"Node not found: {path}", context={"path": path})
        try:
            return full.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read node {path}: {e}", context={"path": path}) from e
        except UnicodeDecodeError as e:
            raise ParseError(f"Node is not valid UTF-8: {path}", context={"path": path}) from e

    def read_or_none(self, node: NodeInfo) -> Optional[str]:
        """Content of a walked node, or None if it vanished or cannot be decoded."""
        try:
            return node.full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable node {node.path}: {e}")
            return None

    def modified(self, path: str) -> datetime:
        full = self._resolve(path)
        if not full.is_file():
            raise NodeNotFoundError(f"Node not found: {path}", context={"path": path})
        return datetime.fromtimestamp(full.stat().st_mtime, tz=timezone.utc)

    def write(self, path: str, content: str) -> None:
        """Write a node atomically (temp file in the same directory, then rename)."""
        full = self._resolve(path)
        tmp_path = None
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(full.parent), prefix="." + full.name + "-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, full)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise WriteError(f"Cannot write node {path}: {e}", context={"path": path}) from e
        logger.debug(f"Node written: {path}")

    def save_note(
        self,
        content: str,
        topic: str,
        tags: Iterable[str] = (),
        clock: Callable[[], datetime] = utcnow,
    ) -> str:
        """Create a new note under ``<notes_dir>/<topic>/`` and return its node path."""
        topic = topic.strip().strip("/")
        if not topic:
            raise ValidationError("A topic is required to save a note")

        now = clock()
        stamp = int(now.timestamp() * 1000)
        path = f"{self.notes_dir}/{topic}/memory-{stamp}.md"
        while self.exists(path):
            stamp += 1
            path = f"{self.notes_dir}/{topic}/memory-{stamp}.md"

        lines = [f"# Memory - {now.isoformat()}", ""]
        tag_list = [t.strip().lstrip("#") for t in tags if t.strip().lstrip("#")]
        if tag_list:
            lines += ["Tags: " + " ".join(f"#{t}" for t in tag_list), ""]
        lines.append(content)

        self.write(path, "\n".join(lines))
        logger.info(f"Saved note {path}")
        return path


__all__ = ["NodeInfo", "NodeStore", "DEFAULT_SYSTEM_DIRS"]
