"""Branching dialogue graph models.

A DialogueData is an immutable description of a conversation. Walking it
(current node, typewriter progress, selected choice) is the job of
tileforge.engine.dialogue.DialogueWalker.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DialogueChoice(BaseModel):
    """A selectable reply.

    Attributes:
        text: Label shown to the player.
        next_node_id: Node to continue at; None ends the conversation.
        requires_flag: Choice is hidden unless this flag is set.
        sets_flag: Flag set when the choice is picked.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    text: str = ""
    next_node_id: str | None = None
    requires_flag: str | None = None
    sets_flag: str | None = None


class DialogueNode(BaseModel):
    """One page of a conversation.

    Attributes:
        id: Node id, unique within the dialogue.
        speaker: Name shown above the text.
        text: Body text.
        choices: Replies; None or empty means the node advances linearly.
        next_node_id: Successor for linear nodes and skipped conditional nodes.
        requires_flag: Node is skipped unless this flag is set.
        sets_flag: Flag set when the node is shown.
        sets_variable: "key=value" assignment applied when the node is shown.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    speaker: str | None = None
    text: str | None = None
    choices: list[DialogueChoice] | None = None
    next_node_id: str | None = None
    requires_flag: str | None = None
    sets_flag: str | None = None
    sets_variable: str | None = None


class DialogueData(BaseModel):
    """A named dialogue graph; the first node is the entry point."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str | None = None
    nodes: list[DialogueNode] = Field(default_factory=list)

    @property
    def start_node_id(self) -> str | None:
        """Id of the entry node, or None for an empty dialogue."""
        return self.nodes[0].id if self.nodes else None

    def get_node(self, node_id: str) -> DialogueNode | None:
        """Find a node by id; the first match wins."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


__all__ = [
    "DialogueChoice",
    "DialogueData",
    "DialogueNode",
]
