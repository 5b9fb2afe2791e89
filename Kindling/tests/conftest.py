"""Shared fixtures for Kindling tests."""

import os
from datetime import datetime, timedelta, timezone

import pytest

from Kindling.config.settings import HeatConfig
from Kindling.heat.ledger import HeatLedger
from Kindling.memory.schemas import HeatLedgerDocument, NodeRecord
from Kindling.memory.storage_backend import InMemoryDocumentStorage


class FakeClock:
    """Controllable UTC clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


def ledger_document(clock, nodes, logs=None):
    """Ledger document dict built from {path: (heat, days_idle)}."""
    doc = HeatLedgerDocument(
        nodes={
            path: NodeRecord(
                heat=heat,
                last_accessed=clock() - timedelta(days=days_idle),
                access_count=1,
            )
            for path, (heat, days_idle) in nodes.items()
        },
        last_decay=clock(),
        logs=logs or [],
    )
    return doc.to_document()


def write_note(root, rel_path, content, modified=None):
    """Create a note under root; optionally pin its mtime."""
    full = root.joinpath(*rel_path.split("/"))
    full.parent.mkdir(parents=True, exist_ok=True)
    full.write_text(content, encoding="utf-8")
    if modified is not None:
        ts = modified.timestamp()
        os.utime(full, (ts, ts))
    return full


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return InMemoryDocumentStorage()


@pytest.fixture
def ledger(storage, clock):
    return HeatLedger(storage, HeatConfig(), clock=clock)
