"""Runtime-wide constants for the TileForge play-mode runtime.

This module defines flag prefixes, well-known entity property keys and
the fallback values used when authored numbers are missing or unparsable.
"""

from __future__ import annotations

# =============================================================================
# Flag Conventions
# =============================================================================

ENTITY_INACTIVE_PREFIX = "entity_inactive:"
"""Flag prefix marking an entity as permanently deactivated across map visits."""

VISITED_MAP_PREFIX = "visited_map:"
"""Flag prefix recorded every time the player enters a map."""

# =============================================================================
# Player Defaults
# =============================================================================

DEFAULT_PLAYER_HEALTH = 100
DEFAULT_PLAYER_ATTACK = 5
DEFAULT_PLAYER_DEFENSE = 2

DEFAULT_PLAYER_MAX_AP = 2
"""Action points given to new players and back-filled into old saves."""

# =============================================================================
# Entity Defaults
# =============================================================================

DEFAULT_ENTITY_ATTACK = 3
"""Attack used by an entity that declares no ``attack`` property."""

DEFAULT_AGGRO_RANGE = 5
"""Manhattan distance within which chasing entities notice the player."""

DEFAULT_PATROL_RANGE = 3
"""Maximum distance a patrolling entity strays from its origin."""

MIN_DAMAGE = 1
"""Every successful hit deals at least this much damage."""

# =============================================================================
# Entity Property Keys
# =============================================================================

PROP_BEHAVIOR = "behavior"
PROP_HEALTH = "health"
PROP_MAX_HEALTH = "max_health"
PROP_ATTACK = "attack"
PROP_DEFENSE = "defense"
PROP_XP = "xp"
PROP_DAMAGE = "damage"
PROP_HOSTILE = "hostile"
PROP_HOSTILE_FLAG = "hostile_flag"
PROP_FRIENDLY_FLAG = "friendly_flag"
PROP_AGGRO_RANGE = "aggro_range"
PROP_PATROL_AXIS = "patrol_axis"
PROP_PATROL_RANGE = "patrol_range"
PROP_PATROL_ORIGIN = "patrol_origin"
PROP_PATROL_DIR = "patrol_dir"
PROP_DIALOGUE = "dialogue"
PROP_DIALOGUE_ID = "dialogue_id"
PROP_TARGET_MAP = "target_map"
PROP_TARGET_X = "target_x"
PROP_TARGET_Y = "target_y"
PROP_EQUIP_SLOT = "equip_slot"
PROP_ON_KILL_SET_FLAG = "on_kill_set_flag"
PROP_ON_KILL_INCREMENT = "on_kill_increment"
PROP_ON_COLLECT_SET_FLAG = "on_collect_set_flag"
PROP_ON_COLLECT_INCREMENT = "on_collect_increment"

# Equipment bonus properties, read from the item-property cache
EQUIP_ATTACK = "equip_attack"
EQUIP_DEFENSE = "equip_defense"
EQUIP_AP = "equip_ap"

# =============================================================================
# Dialogue
# =============================================================================

INLINE_PAGE_SEPARATOR = "|"
"""Separator splitting an inline dialogue string into sequential pages."""


__all__ = [
    # Flags
    "ENTITY_INACTIVE_PREFIX",
    "VISITED_MAP_PREFIX",
    # Player
    "DEFAULT_PLAYER_HEALTH",
    "DEFAULT_PLAYER_ATTACK",
    "DEFAULT_PLAYER_DEFENSE",
    "DEFAULT_PLAYER_MAX_AP",
    # Entities
    "DEFAULT_ENTITY_ATTACK",
    "DEFAULT_AGGRO_RANGE",
    "DEFAULT_PATROL_RANGE",
    "MIN_DAMAGE",
    # Property Keys
    "PROP_BEHAVIOR",
    "PROP_HEALTH",
    "PROP_MAX_HEALTH",
    "PROP_ATTACK",
    "PROP_DEFENSE",
    "PROP_XP",
    "PROP_DAMAGE",
    "PROP_HOSTILE",
    "PROP_HOSTILE_FLAG",
    "PROP_FRIENDLY_FLAG",
    "PROP_AGGRO_RANGE",
    "PROP_PATROL_AXIS",
    "PROP_PATROL_RANGE",
    "PROP_PATROL_ORIGIN",
    "PROP_PATROL_DIR",
    "PROP_DIALOGUE",
    "PROP_DIALOGUE_ID",
    "PROP_TARGET_MAP",
    "PROP_TARGET_X",
    "PROP_TARGET_Y",
    "PROP_EQUIP_SLOT",
    "PROP_ON_KILL_SET_FLAG",
    "PROP_ON_KILL_INCREMENT",
    "PROP_ON_COLLECT_SET_FLAG",
    "PROP_ON_COLLECT_INCREMENT",
    "EQUIP_ATTACK",
    "EQUIP_DEFENSE",
    "EQUIP_AP",
    # Dialogue
    "INLINE_PAGE_SEPARATOR",
]
