"""Per-entity AI decisions.

Each active entity with a ``behavior`` property gets one decision per
resolved player turn. Behaviors:

- idle: never acts.
- chase: within ``aggro_range`` (Manhattan, default 5) it steps toward
  the player, and melee-attacks when adjacent.
- patrol: walks back and forth along ``patrol_axis`` ("x" by default,
  "y" for vertical) within ``patrol_range`` (default 3) of the tile it
  first patrolled from.
- chase_patrol: chases inside aggro range, patrols outside it.

Authored configuration is converted once into an AIProfile. Patrol
memory (origin and direction) is written back into the entity's own
property bag so entities stay self-describing in save files.

Example:
    >>> ai = EntityAI()
    >>> action = ai.decide(entity, state, pathfinder)
    >>> action.type
    <EntityActionType.MOVE: 'move'>
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tileforge.core.constants import (
    DEFAULT_AGGRO_RANGE,
    DEFAULT_PATROL_RANGE,
    PROP_AGGRO_RANGE,
    PROP_BEHAVIOR,
    PROP_PATROL_AXIS,
    PROP_PATROL_DIR,
    PROP_PATROL_ORIGIN,
    PROP_PATROL_RANGE,
)
from tileforge.core.logging import get_logger
from tileforge.engine.properties import get_int
from tileforge.models.enums import Behavior, EntityActionType


if TYPE_CHECKING:
    from tileforge.engine.pathfinder import Pathfinder
    from tileforge.models.game_state import EntityInstance, GameState, PlayerState

logger = get_logger(__name__)


# =============================================================================
# Actions and Profiles
# =============================================================================


@dataclass(frozen=True)
class EntityAction:
    """What an entity does with its turn.

    Attributes:
        type: Idle, move or attack.
        target_x: Destination column for moves.
        target_y: Destination row for moves.
    """

    type: EntityActionType
    target_x: int = 0
    target_y: int = 0

    @classmethod
    def idle(cls) -> EntityAction:
        return cls(EntityActionType.IDLE)

    @classmethod
    def move_to(cls, x: int, y: int) -> EntityAction:
        return cls(EntityActionType.MOVE, x, y)

    @classmethod
    def melee_attack(cls) -> EntityAction:
        return cls(EntityActionType.ATTACK)


@dataclass
class AIProfile:
    """Typed view of an entity's AI properties.

    Attributes:
        behavior: Parsed behavior; unknown tags are IDLE.
        aggro_range: Chase radius in Manhattan distance.
        patrol_on_x: True to patrol horizontally, False for vertically.
        patrol_range: Maximum distance from the patrol origin.
        patrol_origin: Axis coordinate patrol is anchored to, once known.
        patrol_dir: Current patrol direction (+1 or -1), once known.
    """

    behavior: Behavior = Behavior.IDLE
    aggro_range: int = DEFAULT_AGGRO_RANGE
    patrol_on_x: bool = True
    patrol_range: int = DEFAULT_PATROL_RANGE
    patrol_origin: int | None = None
    patrol_dir: int | None = None

    @classmethod
    def from_properties(cls, properties: dict[str, str]) -> AIProfile:
        """Build a profile from a property bag, using defaults for bad values."""
        origin = properties.get(PROP_PATROL_ORIGIN)
        direction = properties.get(PROP_PATROL_DIR)
        return cls(
            behavior=Behavior.parse(properties.get(PROP_BEHAVIOR)),
            aggro_range=get_int(properties, PROP_AGGRO_RANGE, DEFAULT_AGGRO_RANGE),
            patrol_on_x=properties.get(PROP_PATROL_AXIS) != "y",
            patrol_range=get_int(properties, PROP_PATROL_RANGE, DEFAULT_PATROL_RANGE),
            patrol_origin=_parse_optional_int(origin),
            patrol_dir=_parse_optional_int(direction),
        )


def _parse_optional_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


# =============================================================================
# Decisions
# =============================================================================


def decide_action(
    entity: EntityInstance,
    state: GameState,
    pathfinder: Pathfinder,
    *,
    profile: AIProfile | None = None,
    hostile: bool = True,
) -> EntityAction:
    """Decide one action for an entity.

    Args:
        entity: The acting entity.
        state: Current session state; only the player position is read.
        pathfinder: Movement queries against the current map.
        profile: Pre-parsed AI configuration; parsed from the entity's
            properties when omitted.
        hostile: Non-hostile entities never attack; an attack decision
            becomes idle.

    Returns:
        The chosen action.
    """
    player = state.player
    if player is None or PROP_BEHAVIOR not in entity.properties:
        return EntityAction.idle()

    profile = profile if profile is not None else AIProfile.from_properties(entity.properties)

    if profile.behavior is Behavior.CHASE:
        action = _decide_chase(entity, player, pathfinder, profile)
    elif profile.behavior is Behavior.PATROL:
        action = _decide_patrol(entity, pathfinder, profile)
    elif profile.behavior is Behavior.CHASE_PATROL:
        if _distance(entity, player) <= profile.aggro_range:
            action = _decide_chase(entity, player, pathfinder, profile)
        else:
            action = _decide_patrol(entity, pathfinder, profile)
    else:
        action = EntityAction.idle()

    if action.type is EntityActionType.ATTACK and not hostile:
        return EntityAction.idle()
    return action


def _distance(entity: EntityInstance, player: PlayerState) -> int:
    return abs(player.x - entity.x) + abs(player.y - entity.y)


def _decide_chase(
    entity: EntityInstance,
    player: PlayerState,
    pathfinder: Pathfinder,
    profile: AIProfile,
) -> EntityAction:
    distance = _distance(entity, player)
    if distance > profile.aggro_range:
        return EntityAction.idle()
    if distance == 1:
        return EntityAction.melee_attack()

    step = pathfinder.next_step(entity.x, entity.y, player.x, player.y)
    if step is None:
        return EntityAction.idle()
    return EntityAction.move_to(*step)


def _decide_patrol(
    entity: EntityInstance,
    pathfinder: Pathfinder,
    profile: AIProfile,
) -> EntityAction:
    if profile.patrol_origin is None:
        profile.patrol_origin = entity.x if profile.patrol_on_x else entity.y
        entity.properties[PROP_PATROL_ORIGIN] = str(profile.patrol_origin)
    if profile.patrol_dir is None:
        profile.patrol_dir = 1
        entity.properties[PROP_PATROL_DIR] = "1"

    origin = profile.patrol_origin
    target = _patrol_target(entity, pathfinder, profile, origin, profile.patrol_dir)
    if target is None:
        # Reverse once; idle if the other way is also closed
        profile.patrol_dir = -profile.patrol_dir
        entity.properties[PROP_PATROL_DIR] = str(profile.patrol_dir)
        target = _patrol_target(entity, pathfinder, profile, origin, profile.patrol_dir)
        if target is None:
            return EntityAction.idle()

    return EntityAction.move_to(*target)


def _patrol_target(
    entity: EntityInstance,
    pathfinder: Pathfinder,
    profile: AIProfile,
    origin: int,
    direction: int,
) -> tuple[int, int] | None:
    """Next patrol cell in ``direction``, or None if out of range or blocked."""
    if profile.patrol_on_x:
        target = (entity.x + direction, entity.y)
        along_axis = target[0]
    else:
        target = (entity.x, entity.y + direction)
        along_axis = target[1]

    if abs(along_axis - origin) > profile.patrol_range:
        return None
    if pathfinder.next_step(entity.x, entity.y, *target) != target:
        return None
    return target


# =============================================================================
# Profile Cache
# =============================================================================


class EntityAI:
    """Decides entity actions, caching each entity's parsed AIProfile.

    The cache is keyed by entity id and must be reset whenever the entity
    arena is rebuilt (map switch or save load).
    """

    def __init__(self) -> None:
        self._profiles: dict[str, AIProfile] = {}

    def reset(self) -> None:
        """Forget all cached profiles."""
        self._profiles.clear()

    def profile_for(self, entity: EntityInstance) -> AIProfile:
        """Cached profile for an entity, parsed on first use."""
        profile = self._profiles.get(entity.id)
        if profile is None:
            profile = AIProfile.from_properties(entity.properties)
            self._profiles[entity.id] = profile
        return profile

    def decide(
        self,
        entity: EntityInstance,
        state: GameState,
        pathfinder: Pathfinder,
        *,
        hostile: bool = True,
    ) -> EntityAction:
        """Decide one action for an entity using its cached profile."""
        action = decide_action(
            entity,
            state,
            pathfinder,
            profile=self.profile_for(entity),
            hostile=hostile,
        )
        logger.debug(
            "Entity decided",
            entity_id=entity.id,
            action=action.type,
            x=action.target_x,
            y=action.target_y,
        )
        return action


__all__ = [
    "AIProfile",
    "EntityAI",
    "EntityAction",
    "decide_action",
]
