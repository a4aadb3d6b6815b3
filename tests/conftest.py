"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the TileForge Play test suite. Maps are built in memory through the
``map_builder`` and ``layer_builder`` factories so each test states
exactly the tiles and entities it relies on.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import pytest

from tileforge.core.config import GameplaySettings
from tileforge.engine.state_manager import GameStateManager
from tileforge.models.enums import EntityType
from tileforge.models.map_data import EntityPlacement, LoadedMap, MapLayer, TileGroup


if TYPE_CHECKING:
    from collections.abc import Generator


MapBuilder = Callable[..., LoadedMap]
LayerBuilder = Callable[..., MapLayer]


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from tileforge.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "TILEFORGE_DEBUG": "true",
        "TILEFORGE_LOG_LEVEL": "DEBUG",
        "TILEFORGE_GAMEPLAY_MOVE_DURATION": "0.25",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def gameplay_settings() -> GameplaySettings:
    """Gameplay settings with the documented defaults."""
    return GameplaySettings(
        move_duration=0.15,
        flash_duration=0.3,
        message_duration=1.0,
        player_max_health=100,
        player_attack=5,
        player_defense=2,
        player_max_ap=2,
        dialogue_chars_per_second=40.0,
    )


# =============================================================================
# Map Fixtures
# =============================================================================


def _build_layer(
    width: int,
    height: int,
    cells: dict[tuple[int, int], str] | None = None,
    name: str = "ground",
) -> MapLayer:
    grid: list[str | None] = [None] * (width * height)
    for (x, y), group_name in (cells or {}).items():
        grid[x + y * width] = group_name
    return MapLayer(name=name, cells=grid)


def _build_map(
    *,
    width: int = 10,
    height: int = 10,
    player: tuple[int, int] | None = (1, 1),
    groups: Iterable[TileGroup] = (),
    entities: Iterable[EntityPlacement] = (),
    layers: Iterable[MapLayer] = (),
    map_id: str = "test_map",
) -> LoadedMap:
    all_groups = [TileGroup(name="player", group_type="Entity", is_player=True), *groups]
    placements: list[EntityPlacement] = []
    if player is not None:
        placements.append(
            EntityPlacement(id="player_start", group_name="player", x=player[0], y=player[1])
        )
    placements.extend(entities)
    return LoadedMap(
        id=map_id,
        width=width,
        height=height,
        layers=list(layers),
        groups=all_groups,
        entities=placements,
    )


@pytest.fixture
def map_builder() -> MapBuilder:
    """Factory building an in-memory map with a player start at (1, 1)."""
    return _build_map


@pytest.fixture
def layer_builder() -> LayerBuilder:
    """Factory building a layer from a {(x, y): group_name} mapping."""
    return _build_layer


@pytest.fixture
def wall_group() -> TileGroup:
    """Solid wall tile."""
    return TileGroup(name="wall", is_solid=True)


@pytest.fixture
def rat_group() -> TileGroup:
    """Hostile NPC group with chase AI."""
    return TileGroup(
        name="Rat",
        group_type="Entity",
        entity_type=EntityType.NPC,
        default_properties={
            "health": "4",
            "max_health": "4",
            "attack": "3",
            "defense": "2",
        },
    )


@pytest.fixture
def sword_group() -> TileGroup:
    """Equippable weapon item."""
    return TileGroup(
        name="Sword",
        group_type="Entity",
        entity_type=EntityType.ITEM,
        default_properties={"equip_slot": "weapon", "equip_attack": "3"},
    )


@pytest.fixture
def open_map(map_builder: MapBuilder) -> LoadedMap:
    """An empty 10x10 map with only the player start."""
    return map_builder()


# =============================================================================
# Manager Fixtures
# =============================================================================


@pytest.fixture
def manager_for(gameplay_settings: GameplaySettings) -> Callable[[LoadedMap], GameStateManager]:
    """Factory returning a manager initialized on a given map."""

    def _create(loaded_map: LoadedMap) -> GameStateManager:
        manager = GameStateManager(settings=gameplay_settings)
        manager.initialize(loaded_map)
        return manager

    return _create


@pytest.fixture
def manager(
    open_map: LoadedMap,
    manager_for: Callable[[LoadedMap], GameStateManager],
) -> GameStateManager:
    """A manager initialized on the empty map."""
    return manager_for(open_map)


def placement(entity_id: str, group_name: str, x: int, y: int, **properties: Any) -> EntityPlacement:
    """Entity placement with stringified property overrides."""
    return EntityPlacement(
        id=entity_id,
        group_name=group_name,
        x=x,
        y=y,
        properties={key: str(value) for key, value in properties.items()},
    )


@pytest.fixture
def place() -> Callable[..., EntityPlacement]:
    """Factory building entity placements: place("rat1", "Rat", 3, 1, health=4)."""
    return placement
