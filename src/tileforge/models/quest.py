"""Quest definition models.

Quest definitions are immutable once loaded. A quest's lifecycle state is
never stored: it is derived from the start and completion flags in
GameState by the quest evaluator.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class QuestObjective(BaseModel):
    """A single condition of a quest.

    Attributes:
        description: Text shown when the objective completes.
        type: "flag", "variable_gte" or "variable_eq"; other values never
            evaluate true.
        flag: Flag checked by "flag" objectives.
        variable: Variable compared by the variable objectives.
        value: Threshold for the variable comparison.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    description: str = ""
    type: str = ""
    flag: str | None = None
    variable: str | None = None
    value: int = 0


class QuestRewards(BaseModel):
    """Flags and variables applied when a quest completes."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    set_flags: list[str] = Field(default_factory=list)
    set_variables: dict[str, str] = Field(default_factory=dict)


class QuestDefinition(BaseModel):
    """An authored quest.

    Attributes:
        id: Unique quest id.
        name: Display name.
        description: Quest log text.
        start_flag: Flag that activates the quest; None means active
            from the start.
        objectives: Conditions that must all hold to complete the quest.
            A quest without objectives never completes.
        completion_flag: Flag set on completion; its presence marks the
            quest completed.
        rewards: Applied once on completion.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""
    description: str = ""
    start_flag: str | None = None
    objectives: list[QuestObjective] = Field(default_factory=list)
    completion_flag: str | None = None
    rewards: QuestRewards | None = None


__all__ = [
    "QuestDefinition",
    "QuestObjective",
    "QuestRewards",
]
