"""Tests for enum parsing and fallbacks."""

from __future__ import annotations

import pytest

from tileforge.models.enums import (
    Behavior,
    DamageType,
    Direction,
    EntityType,
    EquipmentSlot,
    GameAction,
    ObjectiveType,
)


class TestDirection:
    """Tests for Direction offsets."""

    @pytest.mark.parametrize(
        ("direction", "offset"),
        [
            (Direction.UP, (0, -1)),
            (Direction.DOWN, (0, 1)),
            (Direction.LEFT, (-1, 0)),
            (Direction.RIGHT, (1, 0)),
        ],
    )
    def test_offset(self, direction: Direction, offset: tuple[int, int]) -> None:
        """Test each direction's grid offset, y growing downward."""
        assert direction.offset == offset

    def test_from_delta_prefers_horizontal(self) -> None:
        """Test diagonal deltas resolve to the horizontal direction."""
        assert Direction.from_delta(1, 1) is Direction.RIGHT
        assert Direction.from_delta(0, -3) is Direction.UP
        assert Direction.from_delta(0, 0) is None


class TestParsing:
    """Tests for authored-string parsing with fallbacks."""

    def test_entity_type_case_insensitive(self) -> None:
        """Test entity types parse regardless of case."""
        assert EntityType.parse("npc") is EntityType.NPC
        assert EntityType.parse("ITEM") is EntityType.ITEM

    def test_entity_type_unknown_is_interactable(self) -> None:
        """Test unknown entity types fall back to Interactable."""
        assert EntityType.parse("Chest") is EntityType.INTERACTABLE
        assert EntityType.parse(None) is EntityType.INTERACTABLE

    def test_behavior_unknown_is_idle(self) -> None:
        """Test unknown behaviors degrade to idle."""
        assert Behavior.parse("chase") is Behavior.CHASE
        assert Behavior.parse("dance") is Behavior.IDLE
        assert Behavior.parse(None) is Behavior.IDLE

    def test_damage_type_unknown_is_other(self) -> None:
        """Test damage types without lingering effects parse to OTHER."""
        assert DamageType.parse("ice") is DamageType.ICE
        assert DamageType.parse("spikes") is DamageType.OTHER
        assert DamageType.parse(None) is DamageType.OTHER

    def test_equipment_slot(self) -> None:
        """Test slots parse case-insensitively and reject unknown names."""
        assert EquipmentSlot.parse("weapon") is EquipmentSlot.WEAPON
        assert EquipmentSlot.parse(" Armor ") is EquipmentSlot.ARMOR
        assert EquipmentSlot.parse("ring") is None
        assert EquipmentSlot.parse("") is None

    def test_objective_type_unknown_is_none(self) -> None:
        """Test unknown objective types parse to None."""
        assert ObjectiveType.parse("variable_gte") is ObjectiveType.VARIABLE_GTE
        assert ObjectiveType.parse("kill_count") is None


class TestGameAction:
    """Tests for GameAction directions."""

    def test_movement_actions_have_directions(self) -> None:
        """Test only movement actions map to a direction."""
        assert GameAction.MOVE_LEFT.direction is Direction.LEFT
        assert GameAction.INTERACT.direction is None
        assert GameAction.PAUSE.direction is None
