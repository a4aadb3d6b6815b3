"""Fixtures for integration tests: a small project written to disk.

The project has two maps side by side on the world grid:

- town (6x5): the player starts at (1, 2), the Elder stands at (1, 1)
  and a rat lurks at (4, 2).
- cave (4x4): empty, east of town.

Talking to the Elder and accepting starts the "Rat Problem" quest,
which completes once one rat is killed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from tileforge.core.config import GameplaySettings
from tileforge.engine.orchestrator import TurnOrchestrator
from tileforge.engine.quests import QuestManager
from tileforge.engine.state_manager import GameStateManager
from tileforge.engine.transitions import EdgeTransitionResolver
from tileforge.storage.loaders import (
    DialogueLoader,
    MapRepository,
    load_quests,
    load_world_layout,
)


def _map_json(width: int, height: int, entities: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "width": width,
        "height": height,
        "layers": [{"name": "ground", "cells": ["grass"] * (width * height)}],
        "groups": [
            {"name": "grass", "type": "Tile"},
            {"name": "hero", "type": "Entity", "isPlayer": True},
            {
                "name": "Elder",
                "type": "Entity",
                "isSolid": True,
                "entityType": "NPC",
                "defaultProperties": {"hostile": "false"},
            },
            {
                "name": "Rat",
                "type": "Entity",
                "isSolid": True,
                "entityType": "NPC",
                "defaultProperties": {"health": "3", "attack": "3", "behavior": "chase"},
            },
        ],
        "entities": entities,
    }


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Write the test project and return its directory."""
    project = tmp_path / "project"
    (project / "maps").mkdir(parents=True)
    (project / "dialogues").mkdir()

    town = _map_json(
        6,
        5,
        [
            {"id": "start", "groupName": "hero", "x": 1, "y": 2},
            {"id": "elder", "groupName": "Elder", "x": 1, "y": 1, "properties": {"dialogue": "elder"}},
            {"id": "rat1", "groupName": "Rat", "x": 4, "y": 2, "properties": {"on_kill_increment": "rats_killed"}},
        ],
    )
    cave = _map_json(4, 4, [])
    (project / "maps" / "town.json").write_text(json.dumps(town), encoding="utf-8")
    (project / "maps" / "cave.json").write_text(json.dumps(cave), encoding="utf-8")

    dialogue = {
        "nodes": [
            {
                "id": "ask",
                "speaker": "Elder",
                "text": "Rats everywhere!",
                "choices": [
                    {"text": "I'll help", "nextNodeId": "thanks", "setsFlag": "quest_rats"},
                    {"text": "Not my problem"},
                ],
            },
            {"id": "thanks", "speaker": "Elder", "text": "Bless you."},
        ]
    }
    (project / "dialogues" / "elder.json").write_text(json.dumps(dialogue), encoding="utf-8")

    quests = {
        "quests": [
            {
                "id": "rats",
                "name": "Rat Problem",
                "startFlag": "quest_rats",
                "completionFlag": "rats_done",
                "objectives": [
                    {"description": "Slay a rat", "type": "variable_gte", "variable": "rats_killed", "value": 1}
                ],
                "rewards": {"setFlags": ["town_hero"]},
            }
        ]
    }
    (project / "quests.json").write_text(json.dumps(quests), encoding="utf-8")

    world = {"maps": {"town": {"gridX": 0, "gridY": 0}, "cave": {"gridX": 1, "gridY": 0}}}
    (project / "world.json").write_text(json.dumps(world), encoding="utf-8")

    return project


@pytest.fixture
def repository(project_dir: Path) -> MapRepository:
    """Map repository over the test project."""
    return MapRepository(project_dir)


@pytest.fixture
def new_orchestrator(
    project_dir: Path,
    repository: MapRepository,
    gameplay_settings: GameplaySettings,
) -> TurnOrchestrator:
    """An orchestrator on a fresh session in town, wired like a real game."""
    town = repository.get("town")
    assert town is not None

    manager = GameStateManager(settings=gameplay_settings)
    manager.initialize(town)
    return TurnOrchestrator(
        manager,
        town,
        quest_manager=QuestManager(load_quests(project_dir / "quests.json")),
        dialogue_source=DialogueLoader(project_dir),
        edge_resolver=EdgeTransitionResolver(
            load_world_layout(project_dir / "world.json"),
            repository.load_many(["town", "cave"]),
        ),
        settings=gameplay_settings,
    )
