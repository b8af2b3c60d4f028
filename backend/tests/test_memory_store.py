"""Tests specific to the in-memory repository backend."""

import pytest

from grimoire.exceptions import FolderNotFoundError
from grimoire.repositories import InMemoryStore
from tests.conftest import make_spell


class TestAtomicity:

    def test_failed_batch_leaves_store_untouched(self):
        folders, spells, _ = InMemoryStore().repositories()
        rows = [
            dict(make_spell(name="Good"), id="s1"),
            dict(make_spell(name="Bad", folder_id=999), id="s2"),
        ]
        with pytest.raises(FolderNotFoundError):
            spells.create_many(rows)
        assert spells.count() == 0

    def test_records_are_copies(self):
        folders, _, _ = InMemoryStore().repositories()
        folder_id = folders.create("A", 1)
        record = folders.find_by_id(folder_id)
        record.name = "Changed"
        assert folders.find_by_id(folder_id).name == "A"

    def test_root_seeded(self):
        folders, _, _ = InMemoryStore().repositories()
        root = folders.find_by_id(1)
        assert root.parent_id is None
        assert root.name == ""

    def test_unseeded_store_is_empty(self):
        folders, _, _ = InMemoryStore(seed_root=False).repositories()
        assert folders.count() == 0
