"""Quest evaluation against flags and variables.

QuestManager re-derives every quest's progress from GameState after each
turn and reports what changed since it last looked. It keeps two
in-memory sets of already reported starts and objectives. These are not
saved: after a save is loaded the sets are empty, so starts and met
objectives of still-active quests are reported once more.

Example:
    >>> manager = QuestManager(load_quests(path))
    >>> for event in manager.check_for_updates(state_manager):
    ...     print(event.message)
    Quest started: Rat Problem
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from tileforge.core.logging import get_logger
from tileforge.engine.properties import parse_int
from tileforge.models.enums import ObjectiveType, QuestEventType, QuestStatus


if TYPE_CHECKING:
    from tileforge.engine.state_manager import GameStateManager
    from tileforge.models.quest import QuestDefinition, QuestObjective

logger = get_logger(__name__)


@dataclass(frozen=True)
class QuestEvent:
    """A quest change detected during evaluation.

    Attributes:
        type: Started, objective completed or quest completed.
        quest_id: Id of the quest.
        quest_name: Display name of the quest.
        objective_description: Objective text for objective events.
    """

    type: QuestEventType
    quest_id: str
    quest_name: str
    objective_description: str | None = None

    @property
    def message(self) -> str:
        """Player-facing notification text."""
        if self.type is QuestEventType.QUEST_STARTED:
            return f"Quest started: {self.quest_name}"
        if self.type is QuestEventType.OBJECTIVE_COMPLETED:
            return f"Objective complete: {self.objective_description}"
        return f"Quest complete: {self.quest_name}!"


def evaluate_objective(objective: QuestObjective, state_manager: GameStateManager) -> bool:
    """Whether an objective currently holds.

    Variables are compared as integers; missing or unparsable values
    count as 0. Unknown objective types never hold.
    """
    objective_type = ObjectiveType.parse(objective.type)
    if objective_type is ObjectiveType.FLAG:
        return bool(objective.flag) and state_manager.has_flag(objective.flag)

    if objective_type in (ObjectiveType.VARIABLE_GTE, ObjectiveType.VARIABLE_EQ):
        raw = state_manager.get_variable(objective.variable) if objective.variable else None
        current = parse_int(raw, 0) if raw else 0
        if objective_type is ObjectiveType.VARIABLE_GTE:
            return current >= objective.value
        return current == objective.value

    return False


class QuestManager:
    """Evaluates quest definitions and reports progress events.

    Attributes:
        quests: The loaded quest definitions, in authored order.
    """

    def __init__(self, quests: list[QuestDefinition] | None = None) -> None:
        self.quests: list[QuestDefinition] = list(quests or [])
        self._reported_starts: set[str] = set()
        self._reported_objectives: set[str] = set()

    def check_for_updates(self, state_manager: GameStateManager) -> list[QuestEvent]:
        """Evaluate every quest and return the new events, in order.

        Completed quests (completion flag set) and quests whose start flag
        is unset are skipped. An active quest reports its start once and
        each met objective once. When it has objectives and all of them
        hold, its completion flag and rewards are applied and a completion
        event is reported.

        Args:
            state_manager: Manager of the state to evaluate and reward.

        Returns:
            Newly detected events.
        """
        events: list[QuestEvent] = []

        for quest in self.quests:
            if quest.completion_flag and state_manager.has_flag(quest.completion_flag):
                continue
            if quest.start_flag and not state_manager.has_flag(quest.start_flag):
                continue

            if quest.id not in self._reported_starts:
                self._reported_starts.add(quest.id)
                events.append(QuestEvent(QuestEventType.QUEST_STARTED, quest.id, quest.name))

            all_complete = True
            for index, objective in enumerate(quest.objectives):
                if not evaluate_objective(objective, state_manager):
                    all_complete = False
                    continue
                key = f"{quest.id}:{index}"
                if key not in self._reported_objectives:
                    self._reported_objectives.add(key)
                    events.append(
                        QuestEvent(
                            QuestEventType.OBJECTIVE_COMPLETED,
                            quest.id,
                            quest.name,
                            objective.description,
                        )
                    )

            if all_complete and quest.objectives:
                self._complete_quest(quest, state_manager)
                events.append(QuestEvent(QuestEventType.QUEST_COMPLETED, quest.id, quest.name))

        return events

    def quest_status(self, quest: QuestDefinition, state_manager: GameStateManager) -> QuestStatus:
        """Lifecycle state of a quest, derived from its flags."""
        if quest.completion_flag and state_manager.has_flag(quest.completion_flag):
            return QuestStatus.COMPLETED
        if quest.start_flag and not state_manager.has_flag(quest.start_flag):
            return QuestStatus.NOT_STARTED
        return QuestStatus.ACTIVE

    def _complete_quest(self, quest: QuestDefinition, state_manager: GameStateManager) -> None:
        if quest.completion_flag:
            state_manager.set_flag(quest.completion_flag)
        if quest.rewards is not None:
            for flag in quest.rewards.set_flags:
                state_manager.set_flag(flag)
            for key, value in quest.rewards.set_variables.items():
                state_manager.set_variable(key, value)
        logger.info("Quest completed", quest_id=quest.id, name=quest.name)


__all__ = [
    "QuestEvent",
    "QuestManager",
    "evaluate_objective",
]
