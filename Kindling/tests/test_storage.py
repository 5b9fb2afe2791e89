"""Tests for document storage and the node store."""

import fcntl
import os

import pytest

from Kindling.memory.node_store import NodeStore
from Kindling.memory.storage_backend import FileDocumentStorage, InMemoryDocumentStorage
from Kindling.tests.conftest import FakeClock, write_note
from Kindling.utils.errors import NodeNotFoundError, ParseError, StorageError, ValidationError, WriteError


class TestFileDocumentStorage:
    """Test the file-backed JSON document."""

    def test_missing_document_reads_none(self, tmp_path):
        assert FileDocumentStorage(tmp_path / "doc.json").read() is None

    def test_write_then_read(self, tmp_path):
        storage = FileDocumentStorage(tmp_path / "sub" / "doc.json")
        storage.write({"nodes": {"笔记.md": {"heat": 1.5}}})
        assert storage.read() == {"nodes": {"笔记.md": {"heat": 1.5}}}

    def test_no_temp_files_left(self, tmp_path):
        storage = FileDocumentStorage(tmp_path / "doc.json")
        storage.write({"a": 1})
        storage.write({"a": 2})
        assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.json"]

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text("[1, 2", encoding="utf-8")
        with pytest.raises(ParseError):
            FileDocumentStorage(path).read()

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_bytes(b'{"a": "\xff\xfe"}')
        with pytest.raises(ParseError):
            FileDocumentStorage(path).read()

    def test_non_object_root(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ParseError):
            FileDocumentStorage(path).read()

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(WriteError):
            FileDocumentStorage(blocker / "doc.json").write({"a": 1})

    def test_failed_write_keeps_previous_document(self, tmp_path, monkeypatch):
        storage = FileDocumentStorage(tmp_path / "doc.json")
        storage.write({"version": 1})

        def broken_replace(src, dst):
            raise OSError("simulated crash")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(WriteError):
            storage.write({"version": 2})
        monkeypatch.undo()

        assert storage.read() == {"version": 1}
        assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.json"]

    def test_sequential_leases(self, tmp_path):
        path = tmp_path / "doc.json"
        with FileDocumentStorage(path).lease():
            pass
        with FileDocumentStorage(path).lease():
            pass

    def test_lease_times_out_when_held(self, tmp_path):
        storage = FileDocumentStorage(tmp_path / "doc.json", lock_timeout_s=0.2)
        fd = os.open(str(storage.lock_path), os.O_CREAT | os.O_WRONLY)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            with pytest.raises(StorageError):
                with storage.lease():
                    pass
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)


class TestInMemoryDocumentStorage:
    """Test the in-memory backend."""

    def test_round_trip_and_write_count(self):
        storage = InMemoryDocumentStorage()
        assert storage.read() is None
        storage.write({"a": [1, 2]})
        assert storage.read() == {"a": [1, 2]}
        assert storage.writes == 1

    def test_reads_are_copies(self):
        storage = InMemoryDocumentStorage({"a": 1})
        storage.read()["a"] = 2
        assert storage.read() == {"a": 1}

    def test_corrupt_text(self):
        storage = InMemoryDocumentStorage()
        storage.text = "{oops"
        with pytest.raises(ParseError):
            storage.read()


class TestNodeStore:
    """Test node store primitives."""

    def test_lists_notes_excluding_system_dirs(self, tmp_path):
        write_note(tmp_path, "20-BRANCHES/tech/a.md", "a")
        write_note(tmp_path, "00-ROOT/b.MD", "b")
        write_note(tmp_path, "99-SYSTEM/heat.md", "x")
        write_note(tmp_path, "20-BRANCHES/40-EVOLUTION-LOG/log.md", "x")
        write_note(tmp_path, "20-BRANCHES/tech/c.json", "{}")
        assert NodeStore(tmp_path).list_nodes() == ["00-ROOT/b.MD", "20-BRANCHES/tech/a.md"]

    def test_read_write(self, tmp_path):
        store = NodeStore(tmp_path)
        store.write("topic/note.md", "hello")
        assert store.exists("topic/note.md")
        assert store.read("topic/note.md") == "hello"
        assert store.modified("topic/note.md").tzinfo is not None

    def test_read_missing(self, tmp_path):
        with pytest.raises(NodeNotFoundError):
            NodeStore(tmp_path).read("nope.md")

    def test_read_undecodable_note(self, tmp_path):
        path = tmp_path / "topic" / "bin.md"
        path.parent.mkdir()
        path.write_bytes(b"\xff\xfe\x00binary")
        with pytest.raises(ParseError):
            NodeStore(tmp_path).read("topic/bin.md")

    @pytest.mark.parametrize("path", ["../escape.md", "/etc/passwd"])
    def test_paths_must_stay_inside_root(self, tmp_path, path):
        with pytest.raises(ValidationError):
            NodeStore(tmp_path).read(path)

    def test_save_note(self, tmp_path):
        clock = FakeClock()
        store = NodeStore(tmp_path)
        path = store.save_note("Remember the kiln schedule", "pottery", tags=["kiln", "#glaze"], clock=clock)

        assert path == f"20-BRANCHES/pottery/memory-{int(clock().timestamp() * 1000)}.md"
        content = store.read(path)
        assert content.startswith(f"# Memory - {clock().isoformat()}")
        assert "Tags: #kiln #glaze" in content
        assert content.endswith("Remember the kiln schedule")

    def test_save_note_unique_paths(self, tmp_path):
        clock = FakeClock()
        store = NodeStore(tmp_path)
        first = store.save_note("one", "t", clock=clock)
        second = store.save_note("two", "t", clock=clock)
        assert first != second

    def test_save_note_requires_topic(self, tmp_path):
        with pytest.raises(ValidationError):
            NodeStore(tmp_path).save_note("content", "  ")
