"""Tests for entity AI decisions."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from tileforge.engine.ai import AIProfile, EntityAI, decide_action
from tileforge.engine.pathfinder import SimplePathfinder
from tileforge.models.enums import Behavior, EntityActionType
from tileforge.models.game_state import EntityInstance, GameState, PlayerState
from tileforge.models.map_data import LoadedMap, MapLayer, TileGroup


def _entity(x: int = 5, y: int = 5, **properties: str) -> EntityInstance:
    return EntityInstance(id="e1", definition_name="Rat", x=x, y=y, properties=properties)


def _world(
    entity: EntityInstance,
    player: tuple[int, int],
    loaded_map: LoadedMap,
) -> tuple[GameState, SimplePathfinder]:
    state = GameState(
        player=PlayerState(x=player[0], y=player[1]),
        entities={entity.id: entity},
    )
    return state, SimplePathfinder(loaded_map, state)


class TestAIProfile:
    """Tests for AIProfile parsing."""

    def test_defaults(self) -> None:
        """Test an empty bag yields idle with default ranges."""
        profile = AIProfile.from_properties({})

        assert profile.behavior is Behavior.IDLE
        assert profile.aggro_range == 5
        assert profile.patrol_range == 3
        assert profile.patrol_on_x is True
        assert profile.patrol_origin is None

    def test_parsed_values(self) -> None:
        """Test authored values and bad numbers."""
        profile = AIProfile.from_properties(
            {
                "behavior": "patrol",
                "aggro_range": "oops",
                "patrol_axis": "y",
                "patrol_range": "2",
                "patrol_origin": "4",
                "patrol_dir": "-1",
            }
        )

        assert profile.behavior is Behavior.PATROL
        assert profile.aggro_range == 5
        assert profile.patrol_on_x is False
        assert profile.patrol_range == 2
        assert profile.patrol_origin == 4
        assert profile.patrol_dir == -1


class TestChase:
    """Tests for chase behavior."""

    def test_steps_toward_player(self, open_map: LoadedMap) -> None:
        """Test a chaser in range moves one step closer."""
        entity = _entity(behavior="chase")
        state, pathfinder = _world(entity, (8, 5), open_map)

        action = decide_action(entity, state, pathfinder)

        assert action.type is EntityActionType.MOVE
        assert (action.target_x, action.target_y) == (6, 5)

    def test_attacks_when_adjacent(self, open_map: LoadedMap) -> None:
        """Test an adjacent chaser attacks."""
        entity = _entity(behavior="chase")
        state, pathfinder = _world(entity, (5, 6), open_map)

        assert decide_action(entity, state, pathfinder).type is EntityActionType.ATTACK

    def test_non_hostile_never_attacks(self, open_map: LoadedMap) -> None:
        """Test a friendly chaser idles instead of attacking."""
        entity = _entity(behavior="chase")
        state, pathfinder = _world(entity, (5, 6), open_map)

        action = decide_action(entity, state, pathfinder, hostile=False)

        assert action.type is EntityActionType.IDLE

    def test_idle_out_of_range(self, open_map: LoadedMap) -> None:
        """Test a chaser ignores a player beyond its aggro range."""
        entity = _entity(behavior="chase", aggro_range="2")
        state, pathfinder = _world(entity, (8, 5), open_map)

        assert decide_action(entity, state, pathfinder).type is EntityActionType.IDLE

    def test_idle_without_behavior(self, open_map: LoadedMap) -> None:
        """Test entities without a behavior property never act."""
        entity = _entity()
        state, pathfinder = _world(entity, (5, 6), open_map)

        assert decide_action(entity, state, pathfinder).type is EntityActionType.IDLE

    def test_unknown_behavior_is_idle(self, open_map: LoadedMap) -> None:
        """Test an unknown behavior tag degrades to idle."""
        entity = _entity(behavior="dance")
        state, pathfinder = _world(entity, (5, 6), open_map)

        assert decide_action(entity, state, pathfinder).type is EntityActionType.IDLE


class TestPatrol:
    """Tests for patrol behavior."""

    def test_walks_and_turns_at_range(self, open_map: LoadedMap) -> None:
        """Test a patroller turns around when leaving its range."""
        entity = _entity(behavior="patrol", patrol_range="1")
        state, pathfinder = _world(entity, (0, 9), open_map)
        ai = EntityAI()

        first = ai.decide(entity, state, pathfinder)
        assert (first.target_x, first.target_y) == (6, 5)
        assert entity.properties["patrol_origin"] == "5"
        assert entity.properties["patrol_dir"] == "1"

        entity.x = 6
        second = ai.decide(entity, state, pathfinder)
        assert (second.target_x, second.target_y) == (5, 5)
        assert entity.properties["patrol_dir"] == "-1"

    def test_vertical_axis(self, open_map: LoadedMap) -> None:
        """Test patrol_axis y walks along rows."""
        entity = _entity(behavior="patrol", patrol_axis="y")
        state, pathfinder = _world(entity, (0, 9), open_map)

        action = decide_action(entity, state, pathfinder)

        assert (action.target_x, action.target_y) == (5, 6)
        assert entity.properties["patrol_origin"] == "5"

    def test_boxed_in_idles(
        self,
        map_builder: Callable[..., LoadedMap],
        layer_builder: Callable[..., MapLayer],
        wall_group: TileGroup,
    ) -> None:
        """Test a patroller blocked both ways stays put."""
        layer = layer_builder(10, 10, {(4, 5): "wall", (6, 5): "wall"})
        loaded = map_builder(groups=[wall_group], layers=[layer])
        entity = _entity(behavior="patrol")
        state, pathfinder = _world(entity, (0, 9), loaded)

        assert decide_action(entity, state, pathfinder).type is EntityActionType.IDLE

    def test_chase_patrol_switches(self, open_map: LoadedMap) -> None:
        """Test chase_patrol chases in range and patrols outside it."""
        entity = _entity(behavior="chase_patrol", aggro_range="3")

        state, pathfinder = _world(entity, (5, 7), open_map)
        chase = decide_action(entity, state, pathfinder)
        assert (chase.target_x, chase.target_y) == (5, 6)

        state.player.x, state.player.y = 0, 9
        patrol = decide_action(entity, state, pathfinder)
        assert (patrol.target_x, patrol.target_y) == (6, 5)


class TestEntityAI:
    """Tests for the profile cache."""

    def test_profiles_cached_until_reset(self) -> None:
        """Test profiles are parsed once per entity id."""
        ai = EntityAI()
        entity = _entity(behavior="chase")

        profile = ai.profile_for(entity)
        entity.properties["behavior"] = "patrol"

        assert ai.profile_for(entity) is profile
        ai.reset()
        assert ai.profile_for(entity).behavior is Behavior.PATROL

    @pytest.mark.parametrize("hostile", [True, False])
    def test_decide_passes_hostility(self, open_map: LoadedMap, hostile: bool) -> None:
        """Test EntityAI.decide respects the hostility argument."""
        entity = _entity(behavior="chase")
        state, pathfinder = _world(entity, (5, 4), open_map)

        action = EntityAI().decide(entity, state, pathfinder, hostile=hostile)

        expected = EntityActionType.ATTACK if hostile else EntityActionType.IDLE
        assert action.type is expected
