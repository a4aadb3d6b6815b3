"""Enumeration types for the TileForge play-mode runtime.

Authored data stores behaviors, entity types and damage types as free
strings. The engine converts them into the closed enums below at the
point of use; every ``parse`` helper has an explicit fallback member or
returns ``None`` so that unknown values degrade to the least active
behavior instead of raising.
"""

from __future__ import annotations

from enum import StrEnum


class Direction(StrEnum):
    """Cardinal facing / movement direction on the tile grid."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def offset(self) -> tuple[int, int]:
        """Grid offset of one step in this direction.

        Returns:
            (dx, dy) with y growing downward.
        """
        return _DIRECTION_OFFSETS[self]

    @classmethod
    def from_delta(cls, dx: int, dy: int) -> Direction | None:
        """Get the direction of a unit step, horizontal taking precedence."""
        if dx < 0:
            return cls.LEFT
        if dx > 0:
            return cls.RIGHT
        if dy < 0:
            return cls.UP
        if dy > 0:
            return cls.DOWN
        return None


_DIRECTION_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class EntityType(StrEnum):
    """Interaction category of an entity group."""

    NPC = "NPC"
    ITEM = "Item"
    TRAP = "Trap"
    TRIGGER = "Trigger"
    INTERACTABLE = "Interactable"

    @classmethod
    def parse(cls, value: str | None) -> EntityType:
        """Parse an authored entity type; unknown values become INTERACTABLE."""
        if value:
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.INTERACTABLE


class Behavior(StrEnum):
    """Autonomous behavior declared by an entity's ``behavior`` property."""

    IDLE = "idle"
    CHASE = "chase"
    PATROL = "patrol"
    CHASE_PATROL = "chase_patrol"

    @classmethod
    def parse(cls, value: str | None) -> Behavior:
        """Parse a behavior tag; missing or unknown tags become IDLE."""
        try:
            return cls(value) if value is not None else cls.IDLE
        except ValueError:
            return cls.IDLE


class DamageType(StrEnum):
    """Hazard damage categories with lingering effects.

    OTHER covers authored types such as "spikes" that only deal
    instant damage.
    """

    FIRE = "fire"
    POISON = "poison"
    ICE = "ice"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str | None) -> DamageType:
        """Parse a damage type tag; missing or unknown tags become OTHER."""
        try:
            return cls(value) if value is not None else cls.OTHER
        except ValueError:
            return cls.OTHER


class EquipmentSlot(StrEnum):
    """Player equipment slots."""

    WEAPON = "Weapon"
    ARMOR = "Armor"
    ACCESSORY = "Accessory"

    @classmethod
    def parse(cls, value: str | None) -> EquipmentSlot | None:
        """Parse a slot name case-insensitively, or None when not a slot."""
        if not value:
            return None
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        return None


class ObjectiveType(StrEnum):
    """Kinds of quest objective condition."""

    FLAG = "flag"
    VARIABLE_GTE = "variable_gte"
    VARIABLE_EQ = "variable_eq"

    @classmethod
    def parse(cls, value: str | None) -> ObjectiveType | None:
        """Parse an objective type, or None when unknown."""
        try:
            return cls(value) if value is not None else None
        except ValueError:
            return None


class QuestStatus(StrEnum):
    """Lifecycle of a quest, derived from flags."""

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"


class QuestEventType(StrEnum):
    """Quest state changes reported by the quest evaluator."""

    QUEST_STARTED = "quest_started"
    OBJECTIVE_COMPLETED = "objective_completed"
    QUEST_COMPLETED = "quest_completed"


class EntityActionType(StrEnum):
    """Outcome of one AI decision."""

    IDLE = "idle"
    MOVE = "move"
    ATTACK = "attack"


class TurnPhase(StrEnum):
    """Turn lock of the orchestrator.

    IDLE accepts input. RESOLVING means a move is in flight; directional
    input is dropped until the move lands and its consequences resolve.
    """

    IDLE = "idle"
    RESOLVING = "resolving"


class GameAction(StrEnum):
    """Abstract player inputs consumed by the orchestrator and dialogue walker."""

    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    INTERACT = "interact"
    CANCEL = "cancel"
    PAUSE = "pause"
    OPEN_INVENTORY = "open_inventory"
    OPEN_QUEST_LOG = "open_quest_log"

    @property
    def direction(self) -> Direction | None:
        """Direction for movement actions, None for everything else."""
        return _ACTION_DIRECTIONS.get(self)


_ACTION_DIRECTIONS: dict[GameAction, Direction] = {
    GameAction.MOVE_UP: Direction.UP,
    GameAction.MOVE_DOWN: Direction.DOWN,
    GameAction.MOVE_LEFT: Direction.LEFT,
    GameAction.MOVE_RIGHT: Direction.RIGHT,
}


class ScreenRequest(StrEnum):
    """Hand-off requested by the orchestrator to the presentation layer."""

    DIALOGUE = "dialogue"
    PAUSE = "pause"
    INVENTORY = "inventory"
    QUEST_LOG = "quest_log"
    GAME_OVER = "game_over"


class MessageKind(StrEnum):
    """Category of a floating message, used by presentation for coloring."""

    INFO = "info"
    DAMAGE = "damage"
    LOOT = "loot"
    COMBAT = "combat"
    QUEST = "quest"


__all__ = [
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
]
