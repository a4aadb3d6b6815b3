"""Turn orchestrator for the play-mode runtime.

The TurnOrchestrator is called once per rendered frame with the elapsed
time and the actions pressed during that frame. One call resolves at most
one player action and all of its consequences:

- ticking floating messages and hit flashes;
- finishing a move in progress (hazards, interactions, status effects,
  entity turns, quests);
- accepting one new input when no move is in progress.

A move in progress is the only lock: while the turn phase is RESOLVING,
new input is ignored, not queued. Dialogue, screen requests, transitions
and game over are handed to the caller through UpdateResult.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from tileforge.core.config import GameplaySettings, get_settings
from tileforge.core.constants import (
    DEFAULT_ENTITY_ATTACK,
    PROP_ATTACK,
    PROP_BEHAVIOR,
    PROP_DAMAGE,
    PROP_DIALOGUE,
    PROP_DIALOGUE_ID,
    PROP_TARGET_MAP,
    PROP_TARGET_X,
    PROP_TARGET_Y,
)
from tileforge.core.logging import bind_context, get_logger
from tileforge.engine.ai import EntityAI
from tileforge.engine.combat import calculate_damage
from tileforge.engine.dialogue import DialogueWalker, create_inline_dialogue
from tileforge.engine.pathfinder import SimplePathfinder
from tileforge.engine.properties import get_int, get_str
from tileforge.models.enums import (
    DamageType,
    Direction,
    EntityActionType,
    EntityType,
    GameAction,
    MessageKind,
    ScreenRequest,
    TurnPhase,
)
from tileforge.models.game_state import MapTransitionRequest


if TYPE_CHECKING:
    from tileforge.engine.quests import QuestManager
    from tileforge.engine.state_manager import GameStateManager
    from tileforge.engine.transitions import EdgeTransitionResolver
    from tileforge.models.dialogue import DialogueData
    from tileforge.models.game_state import EntityInstance, GameState
    from tileforge.models.map_data import LoadedMap

logger = get_logger(__name__)


# =============================================================================
# Hazard Effects
# =============================================================================


@dataclass(frozen=True)
class HazardEffect:
    """Lingering status effect attached by a hazard damage type."""

    steps: int
    damage_per_step: int
    movement_multiplier: float


# Other damage types deal instant damage only
HAZARD_EFFECTS: dict[DamageType, HazardEffect] = {
    DamageType.FIRE: HazardEffect(steps=3, damage_per_step=1, movement_multiplier=1.0),
    DamageType.POISON: HazardEffect(steps=6, damage_per_step=1, movement_multiplier=1.0),
    DamageType.ICE: HazardEffect(steps=3, damage_per_step=0, movement_multiplier=2.0),
}


# =============================================================================
# Play State
# =============================================================================


class DialogueSource(Protocol):
    """Anything that can resolve a dialogue reference to a graph."""

    def load(self, dialogue_ref: str) -> DialogueData | None: ...


@dataclass
class FloatingMessage:
    """A short-lived message shown above a tile.

    Attributes:
        text: Message text.
        kind: Category used by the presentation layer for styling.
        tile_x: Column the message floats above.
        tile_y: Row the message floats above.
        timer: Seconds left before the message expires.
    """

    text: str
    kind: MessageKind
    tile_x: int
    tile_y: int
    timer: float


@dataclass
class PlayState:
    """Transient per-map presentation and turn state.

    Attributes:
        phase: IDLE while waiting for input, RESOLVING during a move.
        move_from: Cell the current move started from.
        move_to: Cell the current move ends on.
        move_progress: Fraction of the current move completed, 0 to 1.
        move_duration: Seconds the current move takes.
        player_flash_timer: Seconds left on the player hit flash.
        entity_flash_timer: Seconds left on the entity hit flash.
        flashed_entity_id: Entity currently flashing, if any.
        floating_messages: Messages currently on screen.
        entity_facings: Horizontal facing of entities that have moved.
    """

    move_from: tuple[int, int]
    move_to: tuple[int, int]
    phase: TurnPhase = TurnPhase.IDLE
    move_progress: float = 0.0
    move_duration: float = 0.0
    player_flash_timer: float = 0.0
    entity_flash_timer: float = 0.0
    flashed_entity_id: str | None = None
    floating_messages: list[FloatingMessage] = field(default_factory=list)
    entity_facings: dict[str, Direction] = field(default_factory=dict)

    @classmethod
    def at(cls, x: int, y: int) -> PlayState:
        """Fresh play state with the player standing still at (x, y)."""
        return cls(move_from=(x, y), move_to=(x, y))

    @property
    def is_moving(self) -> bool:
        return self.phase is TurnPhase.RESOLVING

    @property
    def render_position(self) -> tuple[float, float]:
        """Interpolated player position for drawing."""
        (fx, fy), (tx, ty) = self.move_from, self.move_to
        t = self.move_progress if self.is_moving else 1.0
        return fx + (tx - fx) * t, fy + (ty - fy) * t


@dataclass
class UpdateResult:
    """What one update asks of the caller.

    Attributes:
        screen_request: Screen to push, if any.
        transition: Transition requested during this update, if any.
        messages: Texts of the floating messages added during this update.
    """

    screen_request: ScreenRequest | None = None
    transition: MapTransitionRequest | None = None
    messages: list[str] = field(default_factory=list)


# =============================================================================
# Orchestrator
# =============================================================================


_OVERLAY_SCREENS: dict[GameAction, ScreenRequest] = {
    GameAction.PAUSE: ScreenRequest.PAUSE,
    GameAction.OPEN_INVENTORY: ScreenRequest.INVENTORY,
    GameAction.OPEN_QUEST_LOG: ScreenRequest.QUEST_LOG,
}


class TurnOrchestrator:
    """Drives one play session on the current map.

    Attributes:
        manager: Owner of the session GameState.
        loaded_map: The map being played.
        quest_manager: Quest evaluator, if the project has quests.
        play: Transient play state for the current map.
        active_dialogue: Conversation in progress, if any.
        pending_transition: One-shot transition waiting to be executed.
    """

    def __init__(
        self,
        manager: GameStateManager,
        loaded_map: LoadedMap,
        *,
        quest_manager: QuestManager | None = None,
        dialogue_source: DialogueSource | None = None,
        edge_resolver: EdgeTransitionResolver | None = None,
        settings: GameplaySettings | None = None,
        entity_ai: EntityAI | None = None,
    ) -> None:
        """Initialize the orchestrator on an already initialized state.

        Args:
            manager: State manager whose state holds the player.
            loaded_map: Map the player is on.
            quest_manager: Quest evaluator run after every turn.
            dialogue_source: Resolver for dialogue file references.
            edge_resolver: World-layout transition resolver.
            settings: Gameplay tunables; the global settings by default.
            entity_ai: AI decider; a fresh one by default.
        """
        self.manager = manager
        self.quest_manager = quest_manager
        self._dialogue_source = dialogue_source
        self._edge_resolver = edge_resolver
        self._settings = settings if settings is not None else get_settings().gameplay
        self._ai = entity_ai if entity_ai is not None else EntityAI()

        self.active_dialogue: DialogueWalker | None = None
        self.pending_transition: MapTransitionRequest | None = None
        self._game_over = False
        self._result = UpdateResult()

        self._enter_map(loaded_map)

    @property
    def state(self) -> GameState:
        return self.manager.state

    @property
    def is_game_over(self) -> bool:
        return self._game_over

    def _enter_map(self, loaded_map: LoadedMap) -> None:
        self.loaded_map = loaded_map
        self._groups = loaded_map.groups_by_name
        self._pathfinder = SimplePathfinder(loaded_map, self.manager.state)
        self._ai.reset()
        self.reset_play_state()
        bind_context(map_id=loaded_map.id)

    def reset_play_state(self) -> None:
        """Drop any move in progress and stand the player on their cell."""
        player = self.manager.player
        self.play = PlayState.at(player.x, player.y)

    def load_state(self, state: GameState, loaded_map: LoadedMap) -> None:
        """Resume play from a saved state on its map.

        Args:
            state: The loaded session state.
            loaded_map: The map named by ``state.current_map_id``.
        """
        self.manager.load_state(state)
        self.active_dialogue = None
        self.pending_transition = None
        self._game_over = False
        self._enter_map(loaded_map)
        logger.info("Play resumed from save", map_id=loaded_map.id)

    # =========================================================================
    # Frame Update
    # =========================================================================

    def update(self, dt: float, actions: Sequence[GameAction] = ()) -> UpdateResult:
        """Advance play by one frame.

        Args:
            dt: Seconds elapsed since the previous update.
            actions: Actions pressed during this frame, in priority order.

        Returns:
            Requests for the caller raised during this update.
        """
        self._result = UpdateResult()
        self._tick_timers(dt)

        if self._game_over:
            return self._result

        if self.active_dialogue is not None:
            self._update_dialogue(dt, actions)
            return self._result

        if self.play.is_moving:
            self._advance_move(dt)

        # A landed move may hand control to a dialogue or a map transition
        if self.active_dialogue is not None or self.pending_transition is not None:
            return self._result

        if not self.play.is_moving and self.manager.is_player_alive() and not self._game_over:
            self._handle_input(actions)

        return self._result

    def _tick_timers(self, dt: float) -> None:
        messages = self.play.floating_messages
        for index in range(len(messages) - 1, -1, -1):
            messages[index].timer -= dt
            if messages[index].timer <= 0:
                del messages[index]

        if self.play.player_flash_timer > 0:
            self.play.player_flash_timer -= dt
        if self.play.entity_flash_timer > 0:
            self.play.entity_flash_timer -= dt

    def _update_dialogue(self, dt: float, actions: Sequence[GameAction]) -> None:
        walker = self.active_dialogue
        if walker is None:
            return
        walker.update(dt)
        for action in actions:
            walker.handle_action(action)
            if walker.is_finished:
                break
        if walker.is_finished:
            self.close_dialogue()

    def close_dialogue(self) -> None:
        """End the active conversation and re-check quests it may have advanced."""
        if self.active_dialogue is None:
            return
        logger.debug("Dialogue closed", dialogue_id=self.active_dialogue.dialogue.id)
        self.active_dialogue = None
        self._process_quest_updates()

    def _handle_input(self, actions: Sequence[GameAction]) -> None:
        for action in actions:
            if action in _OVERLAY_SCREENS:
                if action is GameAction.OPEN_QUEST_LOG and self.quest_manager is None:
                    continue
                self._push_screen(_OVERLAY_SCREENS[action])
                return

        for action in actions:
            if action is GameAction.INTERACT:
                self._interact_facing()
                return
            if action.direction is not None:
                self._handle_direction(action.direction)
                return

    # =========================================================================
    # Player Actions
    # =========================================================================

    def _interact_facing(self) -> None:
        player = self.manager.player
        dx, dy = player.facing.offset
        x, y = player.x + dx, player.y + dy
        if not self.loaded_map.in_bounds(x, y):
            return
        if self._try_bump_attack(x, y):
            self._after_player_action()
        else:
            self._interact_at(x, y)

    def _handle_direction(self, direction: Direction) -> None:
        player = self.manager.player
        player.facing = direction
        dx, dy = direction.offset
        target_x, target_y = player.x + dx, player.y + dy

        if self._edge_resolver is not None:
            request = self._edge_resolver.resolve_exit_point(
                self.state.current_map_id, target_x, target_y
            )
            if request is not None:
                self._request_transition(request, player.x, player.y)
                return

        if self.can_move_to(target_x, target_y):
            self._start_move(target_x, target_y)
        elif self.loaded_map.in_bounds(target_x, target_y):
            if self._try_bump_attack(target_x, target_y):
                self._after_player_action()
            else:
                self._interact_at(target_x, target_y)
        elif self._edge_resolver is not None:
            request = self._edge_resolver.resolve(
                self.state.current_map_id,
                target_x,
                target_y,
                player.x,
                player.y,
                self.loaded_map.width,
                self.loaded_map.height,
            )
            if request is not None:
                self._request_transition(request, player.x, player.y)

    def can_move_to(self, x: int, y: int) -> bool:
        """Whether the player may step onto a cell.

        The cell must be in bounds, hold no solid tile on any layer and
        hold no active entity whose group is solid.
        """
        if not self.loaded_map.in_bounds(x, y):
            return False
        if any(group.is_solid for group in self.loaded_map.groups_at(x, y, self._groups)):
            return False
        for entity in self.state.iter_active():
            if entity.x == x and entity.y == y:
                group = self._groups.get(entity.definition_name)
                if group is not None and group.is_solid:
                    return False
        return True

    def movement_cost_at(self, x: int, y: int) -> float:
        """Highest movement cost across the layers at a cell, at least 1.0."""
        cost = 1.0
        for group in self.loaded_map.groups_at(x, y, self._groups):
            cost = max(cost, group.movement_cost)
        return cost

    def _start_move(self, x: int, y: int) -> None:
        player = self.manager.player
        self.play.move_from = (player.x, player.y)
        self.play.move_to = (x, y)
        self.play.move_progress = 0.0
        self.play.move_duration = (
            self._settings.move_duration
            * self.movement_cost_at(x, y)
            * self.manager.effective_movement_multiplier()
        )
        self.play.phase = TurnPhase.RESOLVING

    def _advance_move(self, dt: float) -> None:
        self.play.move_progress += dt / self.play.move_duration
        if self.play.move_progress < 1.0:
            return

        self.play.move_progress = 1.0
        self.play.phase = TurnPhase.IDLE
        x, y = self.play.move_to

        player = self.manager.player
        player.x = x
        player.y = y

        self._apply_hazard_at(x, y)
        if self.manager.is_player_alive():
            self._interact_at(x, y)

        if self.manager.is_player_alive():
            effect_messages = self.manager.process_status_effects()
            for text in effect_messages:
                self._add_message(text, MessageKind.DAMAGE, player.x, player.y)
            if any("damage" in text for text in effect_messages):
                self._flash_player()
            self._check_player_death()

        self._after_player_action()

    def _after_player_action(self) -> None:
        """Let entities act and re-evaluate quests after a full player action."""
        if not self.manager.is_player_alive():
            return
        self._run_entity_turn()
        if self.manager.is_player_alive():
            self._process_quest_updates()

    def _request_transition(self, request: MapTransitionRequest, x: int, y: int) -> None:
        self.pending_transition = request
        self._result.transition = request
        self._add_message(f"Transitioning to {request.target_map}...", MessageKind.INFO, x, y)
        logger.info(
            "Transition requested",
            target_map=request.target_map,
            x=request.target_x,
            y=request.target_y,
        )

    # =========================================================================
    # Combat
    # =========================================================================

    def _try_bump_attack(self, x: int, y: int) -> bool:
        for entity in self.state.iter_active():
            if entity.x != x or entity.y != y:
                continue
            if self.manager.is_attackable(entity, self._groups):
                result = self.manager.attack_entity(entity, self.manager.effective_attack())
                self._add_message(result.message, MessageKind.COMBAT, entity.x, entity.y)
                self.play.entity_flash_timer = self._settings.flash_duration
                self.play.flashed_entity_id = entity.id
                return True
        return False

    def _run_entity_turn(self) -> None:
        """Give every active entity with a behavior one decision."""
        for entity in self.state.iter_active():
            if not entity.is_active or PROP_BEHAVIOR not in entity.properties:
                continue

            hostile = self.manager.is_entity_hostile(entity)
            action = self._ai.decide(entity, self.state, self._pathfinder, hostile=hostile)

            if action.type is EntityActionType.MOVE:
                facing = Direction.from_delta(action.target_x - entity.x, 0)
                if facing is not None:
                    self.play.entity_facings[entity.id] = facing
                entity.x = action.target_x
                entity.y = action.target_y
            elif action.type is EntityActionType.ATTACK:
                self._entity_melee(entity)
                if self._check_player_death():
                    return

    def _entity_melee(self, entity: EntityInstance) -> None:
        attack = get_int(entity.properties, PROP_ATTACK, DEFAULT_ENTITY_ATTACK)
        damage = calculate_damage(attack, self.manager.effective_defense())
        self.manager.damage_player(damage)
        self._flash_player()
        player = self.manager.player
        self._add_message(
            f"{entity.definition_name} hit you for {damage} damage!",
            MessageKind.DAMAGE,
            player.x,
            player.y,
        )

    # =========================================================================
    # Cell Effects
    # =========================================================================

    def _apply_hazard_at(self, x: int, y: int) -> None:
        """Apply the first hazardous tile group found at a cell."""
        group = next(
            (g for g in self.loaded_map.groups_at(x, y, self._groups) if g.is_hazardous),
            None,
        )
        if group is None:
            return

        if group.damage_per_tick > 0:
            self.manager.damage_player(group.damage_per_tick)
            self._flash_player()
            label = group.damage_type or "damage"
            self._add_message(
                f"Took {group.damage_per_tick} {label} damage!", MessageKind.DAMAGE, x, y
            )

        damage_type = DamageType.parse(group.damage_type)
        effect = HAZARD_EFFECTS.get(damage_type)
        if effect is not None:
            self.manager.apply_status_effect(
                damage_type.value,
                effect.steps,
                effect.damage_per_step,
                effect.movement_multiplier,
            )

        self._check_player_death()

    def _interact_at(self, x: int, y: int) -> None:
        """Dispatch on the first active entity of a known group at a cell."""
        for entity in self.state.iter_active():
            if entity.x != x or entity.y != y:
                continue
            group = self._groups.get(entity.definition_name)
            if group is None:
                continue

            name = entity.definition_name
            entity_type = group.entity_type
            if entity_type is EntityType.NPC:
                if not self._try_show_dialogue(entity):
                    self._add_message(f"Talked to {name}", MessageKind.INFO, entity.x, entity.y)
            elif entity_type is EntityType.ITEM:
                self.manager.collect_item(entity)
                self._add_message(f"Collected {name}", MessageKind.LOOT, entity.x, entity.y)
            elif entity_type is EntityType.TRAP:
                self._trigger_trap(entity)
            elif entity_type is EntityType.TRIGGER:
                target_map = get_str(entity.properties, PROP_TARGET_MAP)
                if target_map:
                    request = MapTransitionRequest(
                        target_map=target_map,
                        target_x=get_int(entity.properties, PROP_TARGET_X, 0),
                        target_y=get_int(entity.properties, PROP_TARGET_Y, 0),
                    )
                    self._request_transition(request, entity.x, entity.y)
                else:
                    self._add_message(f"Triggered {name}", MessageKind.INFO, entity.x, entity.y)
            elif not self._try_show_dialogue(entity):
                self._add_message(f"Interacted with {name}", MessageKind.INFO, entity.x, entity.y)
            return

    def _trigger_trap(self, entity: EntityInstance) -> None:
        damage = get_int(entity.properties, PROP_DAMAGE, 0)
        name = entity.definition_name
        if damage > 0:
            self.manager.damage_player(damage)
            self._flash_player()
            player = self.manager.player
            self._add_message(f"{name} dealt {damage} damage!", MessageKind.DAMAGE, player.x, player.y)
        else:
            self._add_message(f"Triggered {name}", MessageKind.INFO, entity.x, entity.y)
        self._check_player_death()

    def _try_show_dialogue(self, entity: EntityInstance) -> bool:
        dialogue_ref = get_str(entity.properties, PROP_DIALOGUE) or get_str(
            entity.properties, PROP_DIALOGUE_ID
        )
        if not dialogue_ref:
            return False

        dialogue = None
        if self._dialogue_source is not None:
            dialogue = self._dialogue_source.load(dialogue_ref)
        if dialogue is None:
            dialogue = create_inline_dialogue(entity.definition_name, dialogue_ref)

        walker = DialogueWalker(
            dialogue,
            self.manager,
            chars_per_second=self._settings.dialogue_chars_per_second,
        )
        walker.start()
        self.active_dialogue = walker
        self.play.floating_messages.clear()
        self._push_screen(ScreenRequest.DIALOGUE)
        logger.debug("Dialogue opened", dialogue_id=dialogue.id, entity_id=entity.id)
        return True

    # =========================================================================
    # Quests and Transitions
    # =========================================================================

    def _process_quest_updates(self) -> None:
        if self.quest_manager is None:
            return
        player = self.manager.player
        for event in self.quest_manager.check_for_updates(self.manager):
            self._add_message(event.message, MessageKind.QUEST, player.x, player.y)

    def execute_pending_transition(
        self, map_source: Callable[[str], LoadedMap | None]
    ) -> bool:
        """Carry out the pending transition, if any.

        Args:
            map_source: Looks up a map by name, returning None if unknown.

        Returns:
            True if the player switched maps.
        """
        request = self.pending_transition
        if request is None:
            return False
        self.pending_transition = None

        target = map_source(request.target_map)
        if target is None:
            player = self.manager.player
            self._add_message(
                f"Map not found: {request.target_map}", MessageKind.INFO, player.x, player.y
            )
            logger.warning("Transition target map not found", target_map=request.target_map)
            return False

        self.manager.switch_map(target, request.target_x, request.target_y)
        self.active_dialogue = None
        self._enter_map(target)
        self._process_quest_updates()
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _add_message(self, text: str, kind: MessageKind, x: int, y: int) -> None:
        self.play.floating_messages.append(
            FloatingMessage(
                text=text,
                kind=kind,
                tile_x=x,
                tile_y=y,
                timer=self._settings.message_duration,
            )
        )
        self._result.messages.append(text)

    def _flash_player(self) -> None:
        self.play.player_flash_timer = self._settings.flash_duration

    def _push_screen(self, request: ScreenRequest) -> None:
        if self._result.screen_request is not ScreenRequest.GAME_OVER:
            self._result.screen_request = request

    def _check_player_death(self) -> bool:
        """Enter game over once the player has died; True if dead."""
        if self.manager.is_player_alive():
            return False
        if not self._game_over:
            self._game_over = True
            self.active_dialogue = None
            logger.info("Player died", map_id=self.state.current_map_id)
        self._push_screen(ScreenRequest.GAME_OVER)
        return True


__all__ = [
    "HAZARD_EFFECTS",
    "DialogueSource",
    "FloatingMessage",
    "HazardEffect",
    "PlayState",
    "TurnOrchestrator",
    "UpdateResult",
]
