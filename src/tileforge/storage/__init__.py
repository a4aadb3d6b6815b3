"""Storage module for TileForge play sessions.

Provides:
- JSON loaders for exported maps, quests, dialogues and the world layout
- SQLite save slots holding full GameState snapshots
"""

from tileforge.storage.loaders import (
    DialogueLoader,
    MapRepository,
    load_dialogue_from_json,
    load_map,
    load_map_from_json,
    load_quests,
    load_quests_from_json,
    load_world_layout,
    load_world_layout_from_json,
)
from tileforge.storage.saves import SaveRecord, SaveStore

__all__ = [
    "DialogueLoader",
    "MapRepository",
    "SaveRecord",
    "SaveStore",
    "load_dialogue_from_json",
    "load_map",
    "load_map_from_json",
    "load_quests",
    "load_quests_from_json",
    "load_world_layout",
    "load_world_layout_from_json",
]
