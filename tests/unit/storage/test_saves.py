"""Tests for SQLite save slots."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from tileforge.core.exceptions import PersistenceError, SaveSlotNotFoundError
from tileforge.models.game_state import EntityInstance, GameState, PlayerState, StatusEffect
from tileforge.storage.saves import SaveStore


@pytest.fixture
def store(tmp_path: Path) -> SaveStore:
    """Save store in a temporary directory."""
    return SaveStore(tmp_path / "saves" / "test.db")


@pytest.fixture
def sample_state() -> GameState:
    """A mid-game state touching every persisted field."""
    player = PlayerState(
        x=4,
        y=2,
        health=60,
        inventory=["Potion"],
        equipment={"Weapon": "Sword"},
        active_effects=[StatusEffect(type="poison", remaining_steps=3, damage_per_step=1)],
    )
    return GameState(
        player=player,
        entities={"rat1": EntityInstance(id="rat1", definition_name="Rat", x=6, y=2, properties={"health": "1"})},
        flags={"met_elder", "entity_inactive:door01"},
        variables={"kills": "2"},
        item_property_cache={"Sword": {"equip_attack": "3"}},
        current_map_id="town",
    )


class TestSaveStore:
    """Tests for SaveStore."""

    def test_creates_database(self, tmp_path: Path) -> None:
        """Test the database and its parent directory are created."""
        SaveStore(tmp_path / "nested" / "saves.db")
        assert (tmp_path / "nested" / "saves.db").is_file()

    def test_save_and_load(self, store: SaveStore, sample_state: GameState) -> None:
        """Test a saved state loads back equal."""
        record = store.save(sample_state, "slot1")
        loaded = store.load("slot1")

        assert record.slot == "slot1"
        assert record.map_id == "town"
        assert loaded == sample_state
        assert loaded.player.active_effects[0].type == "poison"

    def test_overwrite_keeps_created_at(self, store: SaveStore, sample_state: GameState) -> None:
        """Test re-saving a slot replaces its state but keeps its creation time."""
        first = store.save(sample_state, "slot1")
        sample_state.current_map_id = "cave"
        second = store.save(sample_state, "slot1")

        assert second.created_at == first.created_at
        assert second.updated_at >= first.updated_at
        assert store.load("slot1").current_map_id == "cave"
        assert len(store.list_slots()) == 1

    def test_missing_slot(self, store: SaveStore) -> None:
        """Test loading an empty slot raises SaveSlotNotFoundError."""
        with pytest.raises(SaveSlotNotFoundError) as exc_info:
            store.load("nope")

        assert exc_info.value.details["slot"] == "nope"

    def test_corrupt_slot(self, store: SaveStore) -> None:
        """Test unparsable state JSON raises PersistenceError."""
        with sqlite3.connect(store.db_path) as conn:
            conn.execute(
                "INSERT INTO saves (slot, map_id, state_json, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                ("bad", None, "{broken", "2026-01-01T00:00:00", "2026-01-01T00:00:00"),
            )
        conn.close()

        with pytest.raises(PersistenceError):
            store.load("bad")

    def test_list_and_delete(self, store: SaveStore, sample_state: GameState) -> None:
        """Test slots are listed newest first and can be deleted."""
        store.save(sample_state, "old")
        store.save(sample_state, "new")

        assert [record.slot for record in store.list_slots()] == ["new", "old"]
        assert store.slot_exists("old")

        assert store.delete("old") is True
        assert store.delete("old") is False
        assert not store.slot_exists("old")

    def test_default_path_from_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the store falls back to the configured saves path."""
        monkeypatch.setenv("TILEFORGE_STORAGE_SAVES_PATH", str(tmp_path / "cfg" / "saves.db"))

        store = SaveStore()

        assert store.db_path == tmp_path / "cfg" / "saves.db"
        assert store.db_path.is_file()
