"""TileForge Play - turn-based runtime for TileForge maps.

Plays maps exported from the TileForge editor: the player moves one tile
per turn, entities take their turns in response, and quests, dialogue
and map transitions are driven by shared flags and variables.

- GameState is the single source of truth and is only mutated through
  GameStateManager.
- The TurnOrchestrator resolves at most one player action per frame.
- Presentation (drawing, input mapping, screens) stays outside this
  package and talks to it through UpdateResult.

Example:
    >>> from tileforge import GameStateManager, MapRepository, TurnOrchestrator
    >>>
    >>> maps = MapRepository("my_project")
    >>> start = maps.get("town")
    >>> manager = GameStateManager()
    >>> manager.initialize(start)
    >>> orchestrator = TurnOrchestrator(manager, start)
    >>> result = orchestrator.update(0.016, [GameAction.MOVE_RIGHT])

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic schemas for maps, state, quests, dialogue and world.
    engine: State mutation, AI, quests, dialogue, transitions and turns.
    storage: JSON loaders and SQLite save slots.
"""

from __future__ import annotations

# Core
from tileforge.core.config import Settings, get_settings
from tileforge.core.exceptions import TileForgeError
from tileforge.core.logging import configure_logging, get_logger

# Models
from tileforge.models import (
    GameAction,
    GameState,
    LoadedMap,
    MapTransitionRequest,
    ScreenRequest,
)

# Engine
from tileforge.engine import (
    EdgeTransitionResolver,
    GameStateManager,
    QuestManager,
    TurnOrchestrator,
    UpdateResult,
)

# Storage
from tileforge.storage import (
    DialogueLoader,
    MapRepository,
    SaveStore,
    load_quests,
    load_world_layout,
)


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "Settings",
    "TileForgeError",
    "configure_logging",
    "get_logger",
    "get_settings",
    # Models
    "GameAction",
    "GameState",
    "LoadedMap",
    "MapTransitionRequest",
    "ScreenRequest",
    # Engine
    "EdgeTransitionResolver",
    "GameStateManager",
    "QuestManager",
    "TurnOrchestrator",
    "UpdateResult",
    # Storage
    "DialogueLoader",
    "MapRepository",
    "SaveStore",
    "load_quests",
    "load_world_layout",
]
