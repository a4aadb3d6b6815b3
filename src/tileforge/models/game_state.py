"""Mutable session state for the TileForge play-mode runtime.

GameState is the single source of truth for a play session. It is owned
by one GameStateManager, which performs every mutation so that health
clamping, inventory/equipment exclusivity and persistence flags stay
consistent. The whole model is serialized verbatim into save slots.

Models:
    StatusEffect: A timed, type-tagged modifier on the player.
    PlayerState: Position, stats, inventory, equipment and effects.
    EntityInstance: A live placed entity with its property bag.
    GameState: Player, entity arena, flags, variables and item cache.
    MapTransitionRequest: One-shot instruction to change maps.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from tileforge.core.constants import (
    DEFAULT_PLAYER_ATTACK,
    DEFAULT_PLAYER_DEFENSE,
    DEFAULT_PLAYER_HEALTH,
    DEFAULT_PLAYER_MAX_AP,
)
from tileforge.models.enums import Direction


# =============================================================================
# Player
# =============================================================================


class StatusEffect(BaseModel):
    """A lingering effect on the player, ticked once per completed move.

    Attributes:
        type: Effect tag ("fire", "poison", "ice", ...). One effect per tag.
        remaining_steps: Moves left before the effect wears off.
        damage_per_step: Damage dealt on each tick.
        movement_multiplier: Factor applied to move duration (2.0 = half speed).
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    type: str
    remaining_steps: int = 0
    damage_per_step: int = Field(default=0, ge=0)
    movement_multiplier: float = Field(default=1.0, gt=0.0)


class PlayerState(BaseModel):
    """The player's grid position, stats and belongings.

    Inventory is a multiset kept as a list of item names. Equipment maps
    an EquipmentSlot value to the name of the item in that slot; an
    equipped item is not also present in the inventory.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    x: int = 0
    y: int = 0
    facing: Direction = Direction.DOWN
    health: int = Field(default=DEFAULT_PLAYER_HEALTH, ge=0)
    max_health: int = Field(default=DEFAULT_PLAYER_HEALTH, ge=0)
    attack: int = DEFAULT_PLAYER_ATTACK
    defense: int = DEFAULT_PLAYER_DEFENSE
    max_ap: int = DEFAULT_PLAYER_MAX_AP
    inventory: list[str] = Field(default_factory=list)
    equipment: dict[str, str] = Field(default_factory=dict)
    active_effects: list[StatusEffect] = Field(default_factory=list)

    @computed_field(description="Whether the player still has health")
    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def position(self) -> tuple[int, int]:
        """Current (x, y) tile."""
        return (self.x, self.y)


# =============================================================================
# Entities
# =============================================================================


class EntityInstance(BaseModel):
    """A live entity on the current map.

    The property bag is the merge of the group's default properties and
    the placement's overrides. AI memory (patrol origin and direction)
    and combat health are written back into it, so an instance is fully
    described by its fields.

    Attributes:
        id: Stable placement id, unique within a map.
        definition_name: Group name; also the display name in messages.
        x: Tile column.
        y: Tile row.
        properties: String-keyed property bag.
        is_active: False once killed or collected; inactive entities are
            skipped by AI, collision and interaction.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: str
    definition_name: str
    x: int
    y: int
    properties: dict[str, str] = Field(default_factory=dict)
    is_active: bool = True

    @property
    def position(self) -> tuple[int, int]:
        """Current (x, y) tile."""
        return (self.x, self.y)


# =============================================================================
# Game State
# =============================================================================


class GameState(BaseModel):
    """The complete state of one play session.

    Entities are held in an insertion-ordered arena keyed by their stable
    id. The arena is rebuilt on every map switch; flags, variables and
    the item-property cache persist across switches.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",
    )

    player: PlayerState | None = None
    entities: dict[str, EntityInstance] = Field(default_factory=dict)
    flags: set[str] = Field(default_factory=set)
    variables: dict[str, str] = Field(default_factory=dict)
    item_property_cache: dict[str, dict[str, str]] = Field(default_factory=dict)
    current_map_id: str | None = None

    @field_serializer("flags")
    def _serialize_flags(self, flags: set[str]) -> list[str]:
        return sorted(flags)

    def get_entity(self, entity_id: str) -> EntityInstance | None:
        """Get an entity by id, active or not."""
        return self.entities.get(entity_id)

    def iter_active(self) -> list[EntityInstance]:
        """Snapshot of the currently active entities in arena order."""
        return [entity for entity in self.entities.values() if entity.is_active]

    def entity_at(self, x: int, y: int) -> EntityInstance | None:
        """First active entity standing on (x, y), if any."""
        for entity in self.entities.values():
            if entity.is_active and entity.x == x and entity.y == y:
                return entity
        return None


class MapTransitionRequest(BaseModel):
    """A pending move of the player to another map.

    Produced by trigger entities, portal exits and edge crossings; consumed
    exactly once by the orchestrator's transition step.
    """

    model_config = ConfigDict(frozen=True)

    target_map: str
    target_x: int = 0
    target_y: int = 0


__all__ = [
    "EntityInstance",
    "GameState",
    "MapTransitionRequest",
    "PlayerState",
    "StatusEffect",
]
