"""Integration tests for saving a session and resuming it later."""

from __future__ import annotations

from pathlib import Path

import pytest

from tileforge.core.config import GameplaySettings
from tileforge.core.exceptions import SaveSlotNotFoundError
from tileforge.engine.orchestrator import TurnOrchestrator
from tileforge.engine.quests import QuestManager
from tileforge.engine.state_manager import GameStateManager
from tileforge.engine.transitions import EdgeTransitionResolver
from tileforge.models.enums import GameAction
from tileforge.storage.loaders import MapRepository, load_quests, load_world_layout
from tileforge.storage.saves import SaveStore


def _play_to_cave(orchestrator: TurnOrchestrator, repository: MapRepository) -> None:
    """Accept the quest, kill the rat and walk east into the cave."""
    orchestrator.update(0.0, [GameAction.MOVE_UP])
    for _ in range(4):
        orchestrator.update(0.0, [GameAction.INTERACT])
    for _ in range(5):
        orchestrator.update(0.0, [GameAction.MOVE_RIGHT])
        orchestrator.update(1.0)
    orchestrator.update(0.0, [GameAction.MOVE_RIGHT])
    assert orchestrator.execute_pending_transition(repository.get)


class TestSaveResume:
    """Save a session mid-play and resume it in a fresh runtime."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> SaveStore:
        return SaveStore(tmp_path / "saves.db")

    def test_resume_in_fresh_runtime(
        self,
        new_orchestrator: TurnOrchestrator,
        repository: MapRepository,
        project_dir: Path,
        store: SaveStore,
        gameplay_settings: GameplaySettings,
    ) -> None:
        """A resumed session keeps progress and remembers the dead rat."""
        _play_to_cave(new_orchestrator, repository)
        saved_health = new_orchestrator.state.player.health
        record = store.save(new_orchestrator.state, "quick")
        assert record.map_id == "cave"

        # A separate runtime with its own caches
        fresh_repository = MapRepository(project_dir)
        state = store.load("quick")
        cave = fresh_repository.get(state.current_map_id)
        manager = GameStateManager(settings=gameplay_settings)
        manager.initialize(fresh_repository.get("town"))
        orchestrator = TurnOrchestrator(
            manager,
            fresh_repository.get("town"),
            quest_manager=QuestManager(load_quests(project_dir / "quests.json")),
            edge_resolver=EdgeTransitionResolver(
                load_world_layout(project_dir / "world.json"),
                fresh_repository.load_many(["town", "cave"]),
            ),
            settings=gameplay_settings,
        )

        orchestrator.load_state(state, cave)

        assert orchestrator.loaded_map is cave
        assert orchestrator.state.player.position == (0, 2)
        assert orchestrator.state.player.health == saved_health
        assert orchestrator.manager.has_flag("rats_done")

        result = orchestrator.update(0.0, [GameAction.MOVE_LEFT])
        assert result.transition is not None
        assert orchestrator.execute_pending_transition(fresh_repository.get)

        assert orchestrator.state.current_map_id == "town"
        assert orchestrator.state.player.position == (5, 2)
        assert orchestrator.state.get_entity("rat1").is_active is False
        assert orchestrator.state.get_entity("elder").is_active is True

    def test_completed_quest_not_reported_again(
        self,
        new_orchestrator: TurnOrchestrator,
        repository: MapRepository,
        project_dir: Path,
        store: SaveStore,
    ) -> None:
        """Completed quests stay quiet after loading a save."""
        _play_to_cave(new_orchestrator, repository)
        store.save(new_orchestrator.state, "quick")

        new_orchestrator.quest_manager = QuestManager(load_quests(project_dir / "quests.json"))
        new_orchestrator.load_state(store.load("quick"), repository.get("cave"))

        new_orchestrator.update(0.0, [GameAction.MOVE_DOWN])
        result = new_orchestrator.update(1.0)

        assert result.messages == []

    def test_missing_slot(self, store: SaveStore) -> None:
        """Loading an unknown slot fails cleanly."""
        with pytest.raises(SaveSlotNotFoundError):
            store.load("never-saved")
