"""Tests for the MemoryTree facade."""

import pytest

from Kindling.config.settings import KindlingConfig
from Kindling.core.memory_tree import MemoryTree
from Kindling.tests.conftest import FakeClock, write_note


@pytest.fixture
def tree(tmp_path):
    config = KindlingConfig()
    config.store.root = str(tmp_path)
    return MemoryTree(config, clock=FakeClock())


class TestMemoryTree:
    """Test component wiring over one directory."""

    def test_touch_classifies_note_content(self, tree, tmp_path):
        write_note(tmp_path, "20-BRANCHES/ops/keys.md", "Where the private key for prod lives")
        record = tree.touch("20-BRANCHES/ops/keys.md", boost=50)
        assert record.risk_flag is True
        assert record.heat == 30.0

    def test_touch_unknown_note(self, tree):
        record = tree.touch("not/yet/written.md")
        assert record.heat == 10.0
        assert record.risk_flag is False

    def test_save_note_then_search(self, tree):
        path = tree.save_note("Glaze recipe with cobalt", "pottery", tags=["glaze"])
        assert tree.ledger.get_heat(path) == 10.0

        engine = tree.search_engine(with_heat=True)
        assert [r.path for r in engine.advanced_search(query="cobalt", tags=["glaze"], sort="heat")] == [path]

    def test_documents_live_under_system_dir(self, tree, tmp_path):
        tree.touch("a.md")
        assert (tmp_path / "99-SYSTEM" / "heat-log.json").is_file()
        assert tree.nodes.list_nodes() == []

    def test_resurrect_from_archive(self, tree):
        text = "cobalt glaze firing temperature notes cobalt"
        tree.archive.add("old/cobalt.md", text, heat=15.0)
        assert [c.path for c in tree.resurrect(text)] == ["old/cobalt.md"]
