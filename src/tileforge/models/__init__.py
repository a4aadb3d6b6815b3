"""Pydantic models for maps, session state, quests, dialogue and world layout."""

from __future__ import annotations

from tileforge.models.dialogue import DialogueChoice, DialogueData, DialogueNode
from tileforge.models.enums import (
    Behavior,
    DamageType,
    Direction,
    EntityActionType,
    EntityType,
    EquipmentSlot,
    GameAction,
    MessageKind,
    ObjectiveType,
    QuestEventType,
    QuestStatus,
    ScreenRequest,
    TurnPhase,
)
from tileforge.models.game_state import (
    EntityInstance,
    GameState,
    MapTransitionRequest,
    PlayerState,
    StatusEffect,
)
from tileforge.models.map_data import EntityPlacement, LoadedMap, MapLayer, TileGroup
from tileforge.models.quest import QuestDefinition, QuestObjective, QuestRewards
from tileforge.models.world import EdgeSpawn, MapPlacement, WorldLayout


__all__ = [
    # Enums
    "Behavior",
    "DamageType",
    "Direction",
    "EntityActionType",
    "EntityType",
    "EquipmentSlot",
    "GameAction",
    "MessageKind",
    "ObjectiveType",
    "QuestEventType",
    "QuestStatus",
    "ScreenRequest",
    "TurnPhase",
    # Map data
    "EntityPlacement",
    "LoadedMap",
    "MapLayer",
    "TileGroup",
    # Session state
    "EntityInstance",
    "GameState",
    "MapTransitionRequest",
    "PlayerState",
    "StatusEffect",
    # Quests
    "QuestDefinition",
    "QuestObjective",
    "QuestRewards",
    # Dialogue
    "DialogueChoice",
    "DialogueData",
    "DialogueNode",
    # World layout
    "EdgeSpawn",
    "MapPlacement",
    "WorldLayout",
]
