"""
Unit tests for the ARC loot table.
"""

import json
import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_chatbot.app.adapters.loot_store import DEFAULT_DATA_FILE, LootDrop, LootStore


class TestLootStore:
    """Test cases for LootStore."""

    @pytest.fixture
    def loot_file(self, tmp_path):
        path = tmp_path / "arc_loot.json"
        path.write_text(json.dumps({
            "bison": {"loot": [
                {"item": "Leaper Pulse Unit", "rarity": "Epic"},
                {"item": "ARC Alloy", "rarity": "Uncommon"},
            ]},
            "wasp": {"loot": [
                {"item": "ARC Alloy", "rarity": "Uncommon"},
                {"rarity": "Rare"},
            ]},
            "broken": "not-an-object",
        }), encoding="utf-8")
        return path

    def test_loads_records(self, loot_file):
        store = LootStore(loot_file)

        assert len(store) == 3
        assert "bison" in store
        assert store.path == loot_file
        assert store.get("bison").loot[0] == LootDrop(item="Leaper Pulse Unit", rarity="Epic")

    def test_notable_drops(self, loot_file):
        store = LootStore(loot_file)

        assert [drop.item for drop in store.get("bison").notable()] == ["Leaper Pulse Unit"]
        assert store.get("wasp").notable() == []

    def test_entries_without_item_are_skipped(self, loot_file):
        store = LootStore(str(loot_file))
        assert len(store.get("wasp").loot) == 1
        assert store.get("broken").loot == ()

    def test_unknown_or_missing_id(self, loot_file):
        store = LootStore(loot_file)
        assert store.get("queen") is None
        assert store.get(None) is None

    def test_missing_file_yields_empty_table(self, tmp_path):
        store = LootStore(tmp_path / "absent.json")
        assert len(store) == 0
        assert store.get("bison") is None

    def test_malformed_file_yields_empty_table(self, tmp_path):
        path = tmp_path / "arc_loot.json"
        path.write_text("{not json", encoding="utf-8")
        assert len(LootStore(path)) == 0

    def test_non_object_payload_yields_empty_table(self, tmp_path):
        path = tmp_path / "arc_loot.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert len(LootStore(path)) == 0

    def test_bundled_data_file(self):
        store = LootStore()

        assert store.path == DEFAULT_DATA_FILE
        assert "bison" in store
        assert "queen" in store
        assert [drop.item for drop in store.get("queen").notable()] == ["Queen Reactor", "ARC Powercell"]
