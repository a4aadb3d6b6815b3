"""Game state mutator for the TileForge play-mode runtime.

GameStateManager owns the session's GameState and is the only code that
mutates it. Keeping every write behind these methods preserves the state
invariants:

- player health stays within [0, max_health];
- an item is either in the inventory or in exactly one equipment slot;
- deactivated entities are remembered through ``entity_inactive:<id>``
  flags so they stay gone when their map is revisited;
- flags are only ever added.

Example:
    >>> manager = GameStateManager()
    >>> manager.initialize(loaded_map)
    >>> manager.apply_status_effect("poison", 6, 1, 1.0)
    >>> manager.process_status_effects()
    ['poison dealt 1 damage!']
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tileforge.core.config import GameplaySettings, get_settings
from tileforge.core.constants import (
    DEFAULT_PLAYER_MAX_AP,
    ENTITY_INACTIVE_PREFIX,
    EQUIP_AP,
    EQUIP_ATTACK,
    EQUIP_DEFENSE,
    PROP_DEFENSE,
    PROP_EQUIP_SLOT,
    PROP_FRIENDLY_FLAG,
    PROP_HEALTH,
    PROP_HOSTILE,
    PROP_HOSTILE_FLAG,
    PROP_MAX_HEALTH,
    PROP_ON_COLLECT_INCREMENT,
    PROP_ON_COLLECT_SET_FLAG,
    PROP_ON_KILL_INCREMENT,
    PROP_ON_KILL_SET_FLAG,
    PROP_XP,
    VISITED_MAP_PREFIX,
)
from tileforge.core.exceptions import InvalidGameStateError
from tileforge.core.logging import get_logger
from tileforge.engine.combat import calculate_damage
from tileforge.engine.properties import get_int, get_str, parse_int
from tileforge.models.enums import Direction, EntityType, EquipmentSlot
from tileforge.models.game_state import (
    EntityInstance,
    GameState,
    PlayerState,
    StatusEffect,
)


if TYPE_CHECKING:
    from tileforge.models.map_data import LoadedMap, TileGroup

logger = get_logger(__name__)


@dataclass
class AttackResult:
    """Outcome of the player attacking an entity.

    Attributes:
        damage_dealt: Damage applied to the target.
        remaining_health: Target health after the hit.
        killed: Whether the hit brought the target to zero health.
        target_name: Display name of the target.
        message: Formatted floating-message text.
    """

    damage_dealt: int
    remaining_health: int
    killed: bool
    target_name: str
    message: str


class GameStateManager:
    """Owns a GameState and performs every mutation on it.

    Attributes:
        state: The current session state. Replaced wholesale by
            ``initialize`` and ``load_state``.
    """

    def __init__(
        self,
        state: GameState | None = None,
        *,
        settings: GameplaySettings | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            state: Existing state to manage; a blank state by default.
            settings: Gameplay tunables; the global settings by default.
        """
        self.state = state if state is not None else GameState()
        self._settings = settings if settings is not None else get_settings().gameplay

    @property
    def player(self) -> PlayerState:
        """The player, which must exist once a map is initialized.

        Raises:
            InvalidGameStateError: If no player has been placed yet.
        """
        if self.state.player is None:
            raise InvalidGameStateError(
                "Game state has no player",
                current_state="uninitialized",
                expected_states=["initialized"],
            )
        return self.state.player

    # =========================================================================
    # Session Lifecycle
    # =========================================================================

    def load_state(self, state: GameState) -> None:
        """Replace the current state with a loaded one.

        Saves from before action points existed carry ``max_ap <= 0``;
        those are back-filled to the default.
        """
        self.state = state
        if self.state.player is not None and self.state.player.max_ap <= 0:
            self.state.player.max_ap = DEFAULT_PLAYER_MAX_AP
        logger.info(
            "Game state loaded",
            map_id=state.current_map_id,
            flags=len(state.flags),
        )

    def initialize(self, loaded_map: LoadedMap) -> None:
        """Start a fresh session on a map.

        The first placement of a player group becomes the player start.
        Every other placement becomes an active entity.

        Args:
            loaded_map: The starting map.
        """
        groups = loaded_map.groups_by_name
        self.state = GameState(current_map_id=loaded_map.id)

        for placement in loaded_map.entities:
            group = groups.get(placement.group_name)
            if group is not None and group.is_player:
                self.state.player = PlayerState(
                    x=placement.x,
                    y=placement.y,
                    facing=Direction.DOWN,
                    health=self._settings.player_max_health,
                    max_health=self._settings.player_max_health,
                    attack=self._settings.player_attack,
                    defense=self._settings.player_defense,
                    max_ap=self._settings.player_max_ap,
                )
                break

        if self.state.player is None:
            logger.warning("Map has no player start", map_id=loaded_map.id)

        self.state.entities = self._build_entities(loaded_map, apply_persistence=False)
        logger.info(
            "Game state initialized",
            map_id=loaded_map.id,
            entities=len(self.state.entities),
        )

    def switch_map(self, loaded_map: LoadedMap, target_x: int, target_y: int) -> None:
        """Move the player to another map.

        Health, inventory, equipment, effects, flags and variables carry
        over. The entity arena is rebuilt from the new map and entities
        whose ``entity_inactive:<id>`` flag is set come back inactive.

        Args:
            loaded_map: Destination map.
            target_x: Spawn column.
            target_y: Spawn row.
        """
        player = self.player
        player.x = target_x
        player.y = target_y

        self.state.current_map_id = loaded_map.id
        self.set_flag(f"{VISITED_MAP_PREFIX}{loaded_map.id}")
        self.state.entities = self._build_entities(loaded_map, apply_persistence=True)

        logger.info(
            "Switched map",
            map_id=loaded_map.id,
            x=target_x,
            y=target_y,
            entities=len(self.state.entities),
        )

    def _build_entities(
        self,
        loaded_map: LoadedMap,
        *,
        apply_persistence: bool,
    ) -> dict[str, EntityInstance]:
        """Instantiate every non-player placement with merged properties."""
        groups = loaded_map.groups_by_name
        entities: dict[str, EntityInstance] = {}

        for placement in loaded_map.entities:
            group = groups.get(placement.group_name)
            if group is not None and group.is_player:
                continue

            properties: dict[str, str] = {}
            if group is not None:
                properties.update(group.default_properties)
            properties.update(placement.properties)

            is_active = True
            if apply_persistence:
                is_active = f"{ENTITY_INACTIVE_PREFIX}{placement.id}" not in self.state.flags

            entities[placement.id] = EntityInstance(
                id=placement.id,
                definition_name=placement.group_name,
                x=placement.x,
                y=placement.y,
                properties=properties,
                is_active=is_active,
            )

        return entities

    def deactivate_entity(self, entity: EntityInstance) -> None:
        """Deactivate an entity and remember it across map visits."""
        entity.is_active = False
        self.set_flag(f"{ENTITY_INACTIVE_PREFIX}{entity.id}")

    # =========================================================================
    # Flags and Variables
    # =========================================================================

    def set_flag(self, flag: str) -> None:
        self.state.flags.add(flag)

    def has_flag(self, flag: str) -> bool:
        return flag in self.state.flags

    def set_variable(self, key: str, value: str) -> None:
        self.state.variables[key] = value

    def get_variable(self, key: str) -> str | None:
        return self.state.variables.get(key)

    def increment_variable(self, key: str) -> None:
        """Add one to an integer variable; missing or unparsable counts as 0."""
        current = parse_int(self.state.variables.get(key), 0)
        self.state.variables[key] = str(current + 1)

    # =========================================================================
    # Health and Status Effects
    # =========================================================================

    def damage_player(self, amount: int) -> None:
        player = self.player
        player.health = max(0, player.health - amount)

    def heal_player(self, amount: int) -> None:
        player = self.player
        player.health = min(player.max_health, player.health + amount)

    def is_player_alive(self) -> bool:
        return self.state.player is not None and self.state.player.health > 0

    def apply_status_effect(
        self,
        effect_type: str,
        remaining_steps: int,
        damage_per_step: int,
        movement_multiplier: float,
    ) -> None:
        """Attach a status effect, replacing any effect of the same type.

        Args:
            effect_type: Effect tag; at most one effect per tag is active.
            remaining_steps: Number of moves the effect lasts.
            damage_per_step: Damage dealt on each processed move.
            movement_multiplier: Factor on move duration while active.
        """
        effects = self.player.active_effects
        effects[:] = [effect for effect in effects if effect.type != effect_type]
        effects.append(
            StatusEffect(
                type=effect_type,
                remaining_steps=remaining_steps,
                damage_per_step=damage_per_step,
                movement_multiplier=movement_multiplier,
            )
        )
        logger.debug("Status effect applied", effect=effect_type, steps=remaining_steps)

    def process_status_effects(self) -> list[str]:
        """Tick every active effect once.

        Each effect deals its damage, loses one remaining step and is
        removed when no steps are left. Called once per completed move.

        Returns:
            One message per damage tick and per expired effect.
        """
        messages: list[str] = []
        effects = self.player.active_effects

        for index in range(len(effects) - 1, -1, -1):
            effect = effects[index]
            if effect.damage_per_step > 0:
                self.damage_player(effect.damage_per_step)
                messages.append(f"{effect.type} dealt {effect.damage_per_step} damage!")

            effect.remaining_steps -= 1
            if effect.remaining_steps <= 0:
                del effects[index]
                messages.append(f"{effect.type} effect wore off.")

        return messages

    def effective_movement_multiplier(self) -> float:
        """Product of all active effects' movement multipliers (1.0 if none)."""
        multiplier = 1.0
        for effect in self.player.active_effects:
            multiplier *= effect.movement_multiplier
        return multiplier

    # =========================================================================
    # Inventory and Equipment
    # =========================================================================

    def add_to_inventory(self, item_name: str) -> None:
        self.player.inventory.append(item_name)

    def has_item(self, item_name: str) -> bool:
        return item_name in self.player.inventory

    def remove_from_inventory(self, item_name: str) -> bool:
        """Remove one instance of an item; False if none was held."""
        try:
            self.player.inventory.remove(item_name)
        except ValueError:
            return False
        return True

    def collect_item(self, entity: EntityInstance) -> None:
        """Pick up an item entity.

        The item's properties are cached under its definition name the
        first time that item type is collected, so equipment bonuses keep
        working after the source entity is gone. The entity is deactivated
        and its collect hooks fire.
        """
        name = entity.definition_name
        self.add_to_inventory(name)
        if entity.properties and name not in self.state.item_property_cache:
            self.state.item_property_cache[name] = dict(entity.properties)
        self.deactivate_entity(entity)

        if flag := get_str(entity.properties, PROP_ON_COLLECT_SET_FLAG):
            self.set_flag(flag)
        if variable := get_str(entity.properties, PROP_ON_COLLECT_INCREMENT):
            self.increment_variable(variable)

        logger.debug("Item collected", item=name, entity_id=entity.id)

    def equip_item(self, item_name: str, slot: EquipmentSlot | None = None) -> bool:
        """Move an item from the inventory into an equipment slot.

        Any item already in the slot goes back to the inventory first.

        Args:
            item_name: Item to equip; must be in the inventory.
            slot: Target slot; defaults to the item's cached ``equip_slot``.

        Returns:
            True if the item was equipped.
        """
        target = slot if slot is not None else self.item_equip_slot(item_name)
        if target is None or not self.has_item(item_name):
            logger.debug("Cannot equip item", item=item_name, slot=target)
            return False

        equipment = self.player.equipment
        previous = equipment.pop(target.value, None)
        if previous is not None:
            self.add_to_inventory(previous)

        self.remove_from_inventory(item_name)
        equipment[target.value] = item_name
        return True

    def unequip_item(self, slot: EquipmentSlot) -> None:
        """Return the item in a slot to the inventory; no-op for an empty slot."""
        item_name = self.player.equipment.pop(slot.value, None)
        if item_name is not None:
            self.add_to_inventory(item_name)

    def is_equipped(self, item_name: str) -> bool:
        return item_name in self.player.equipment.values()

    def equipped_item(self, slot: EquipmentSlot) -> str | None:
        return self.player.equipment.get(slot.value)

    def item_equip_slot(self, item_name: str) -> EquipmentSlot | None:
        """Slot declared by an item's cached ``equip_slot`` property, if any."""
        properties = self.state.item_property_cache.get(item_name)
        if properties is None:
            return None
        return EquipmentSlot.parse(properties.get(PROP_EQUIP_SLOT))

    def effective_attack(self) -> int:
        return self.player.attack + self._equipment_bonus(EQUIP_ATTACK)

    def effective_defense(self) -> int:
        return self.player.defense + self._equipment_bonus(EQUIP_DEFENSE)

    def effective_max_ap(self) -> int:
        return self.player.max_ap + self._equipment_bonus(EQUIP_AP)

    def _equipment_bonus(self, key: str) -> int:
        total = 0
        for item_name in self.player.equipment.values():
            properties = self.state.item_property_cache.get(item_name)
            if properties is not None:
                total += get_int(properties, key, 0)
        return total

    # =========================================================================
    # Entities and Combat
    # =========================================================================

    def get_entity(self, entity_id: str) -> EntityInstance | None:
        return self.state.get_entity(entity_id)

    def entity_at(self, x: int, y: int) -> EntityInstance | None:
        return self.state.entity_at(x, y)

    def entity_int_property(self, entity: EntityInstance, key: str, default: int = 0) -> int:
        return get_int(entity.properties, key, default)

    def set_entity_int_property(self, entity: EntityInstance, key: str, value: int) -> None:
        entity.properties[key] = str(value)

    def is_entity_hostile(self, entity: EntityInstance) -> bool:
        """Whether an entity is currently hostile.

        A set ``friendly_flag`` makes it friendly; otherwise a set
        ``hostile_flag`` makes it hostile; otherwise the ``hostile``
        property decides, where anything but "false" means hostile.
        Entities are hostile by default.
        """
        friendly_flag = get_str(entity.properties, PROP_FRIENDLY_FLAG)
        if friendly_flag and self.has_flag(friendly_flag):
            return False
        hostile_flag = get_str(entity.properties, PROP_HOSTILE_FLAG)
        if hostile_flag and self.has_flag(hostile_flag):
            return True
        hostile = entity.properties.get(PROP_HOSTILE)
        if hostile is not None:
            return hostile.lower() != "false"
        return True

    def is_attackable(
        self,
        entity: EntityInstance,
        groups_by_name: dict[str, TileGroup],
    ) -> bool:
        """Whether the player may attack an entity.

        It must be active, hostile, alive, and of a group whose entity
        type is NPC or Trap.
        """
        if not entity.is_active or not self.is_entity_hostile(entity):
            return False
        if self.entity_int_property(entity, PROP_HEALTH, 0) <= 0:
            return False
        group = groups_by_name.get(entity.definition_name)
        if group is None:
            return False
        return group.entity_type in (EntityType.NPC, EntityType.TRAP)

    def attack_entity(self, entity: EntityInstance, attacker_attack: int) -> AttackResult:
        """Resolve one player hit on an entity.

        Reduces the entity's ``health`` property. On a kill the entity is
        deactivated and its kill hooks fire.

        Args:
            entity: The target.
            attacker_attack: The player's effective attack.

        Returns:
            The attack outcome with a formatted message.
        """
        defense = self.entity_int_property(entity, PROP_DEFENSE, 0)
        damage = calculate_damage(attacker_attack, defense)

        current_health = self.entity_int_property(entity, PROP_HEALTH, 0)
        new_health = max(0, current_health - damage)
        self.set_entity_int_property(entity, PROP_HEALTH, new_health)

        killed = new_health <= 0
        name = entity.definition_name
        if killed:
            self.deactivate_entity(entity)
            if flag := get_str(entity.properties, PROP_ON_KILL_SET_FLAG):
                self.set_flag(flag)
            if variable := get_str(entity.properties, PROP_ON_KILL_INCREMENT):
                self.increment_variable(variable)

            xp = self.entity_int_property(entity, PROP_XP, 0)
            xp_text = f" (+{xp} XP)" if xp > 0 else ""
            message = f"{name} defeated!{xp_text}"
            logger.info("Entity defeated", entity_id=entity.id, name=name, damage=damage)
        else:
            max_health = self.entity_int_property(entity, PROP_MAX_HEALTH, current_health)
            message = f"Hit {name} for {damage}! ({new_health}/{max_health} HP)"
            logger.debug("Entity hit", entity_id=entity.id, damage=damage, health=new_health)

        return AttackResult(
            damage_dealt=damage,
            remaining_health=new_health,
            killed=killed,
            target_name=name,
            message=message,
        )


__all__ = [
    "AttackResult",
    "GameStateManager",
]
