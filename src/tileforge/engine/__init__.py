"""Play-mode engine for TileForge maps.

This module provides the turn-based runtime that plays an exported
map: state mutation, combat arithmetic, entity AI, quests, dialogue,
map transitions and the per-frame turn orchestrator.

Submodules:
    combat: Damage arithmetic
    state_manager: The only mutator of GameState
    pathfinder: Greedy stepping and line of sight
    ai: Per-entity behavior decisions
    quests: Quest evaluation and progress events
    dialogue: Branching dialogue graph walker
    transitions: World-layout edge and portal transitions
    orchestrator: Per-frame turn resolution

Example:
    >>> from tileforge.engine import GameStateManager, TurnOrchestrator
    >>>
    >>> manager = GameStateManager()
    >>> manager.initialize(loaded_map)
    >>> orchestrator = TurnOrchestrator(manager, loaded_map)
    >>> result = orchestrator.update(0.016, [GameAction.MOVE_RIGHT])
"""

from __future__ import annotations

# =============================================================================
# Rules and State
# =============================================================================
from tileforge.engine.combat import calculate_damage
from tileforge.engine.state_manager import AttackResult, GameStateManager

# =============================================================================
# AI and Movement
# =============================================================================
from tileforge.engine.ai import AIProfile, EntityAction, EntityAI, decide_action
from tileforge.engine.pathfinder import Pathfinder, SimplePathfinder

# =============================================================================
# Quests and Dialogue
# =============================================================================
from tileforge.engine.dialogue import DialogueWalker, create_inline_dialogue
from tileforge.engine.quests import QuestEvent, QuestManager, evaluate_objective

# =============================================================================
# Transitions and Orchestration
# =============================================================================
from tileforge.engine.orchestrator import (
    HAZARD_EFFECTS,
    FloatingMessage,
    PlayState,
    TurnOrchestrator,
    UpdateResult,
)
from tileforge.engine.transitions import EdgeTransitionResolver, compute_spawn_position


__all__ = [
    # Rules and state
    "AttackResult",
    "GameStateManager",
    "calculate_damage",
    # AI and movement
    "AIProfile",
    "EntityAI",
    "EntityAction",
    "Pathfinder",
    "SimplePathfinder",
    "decide_action",
    # Quests and dialogue
    "DialogueWalker",
    "QuestEvent",
    "QuestManager",
    "create_inline_dialogue",
    "evaluate_objective",
    # Transitions and orchestration
    "HAZARD_EFFECTS",
    "EdgeTransitionResolver",
    "FloatingMessage",
    "PlayState",
    "TurnOrchestrator",
    "UpdateResult",
    "compute_spawn_position",
]
