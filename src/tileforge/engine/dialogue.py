"""Branching dialogue graph walker.

DialogueWalker drives one conversation over a DialogueData graph:

- Entering a node whose ``requires_flag`` is unset skips straight to its
  ``next_node_id``. Skipped nodes have no side effects.
- Landing on a node applies its ``sets_flag`` and ``sets_variable``
  ("key=value") immediately.
- Choices whose ``requires_flag`` is unset are hidden.
- A missing or unknown next node ends the conversation.

Text is revealed typewriter-style; pressing interact while text is
still revealing shows it all at once instead of advancing.

Example:
    >>> walker = DialogueWalker(dialogue, state_manager)
    >>> walker.start()
    >>> walker.current_node.text
    'Welcome, traveller.'
    >>> walker.interact()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tileforge.core.config import get_settings
from tileforge.core.constants import INLINE_PAGE_SEPARATOR
from tileforge.core.logging import get_logger
from tileforge.models.dialogue import DialogueData, DialogueNode
from tileforge.models.enums import GameAction


if TYPE_CHECKING:
    from tileforge.engine.state_manager import GameStateManager
    from tileforge.models.dialogue import DialogueChoice

logger = get_logger(__name__)


def create_inline_dialogue(entity_name: str, text: str) -> DialogueData:
    """Build a linear dialogue from a ``|``-separated string.

    Each segment becomes a page node ``page_<i>`` spoken by the entity and
    chained to the next page.

    Args:
        entity_name: Speaker for every page.
        text: Page texts joined by ``|``.

    Returns:
        A dialogue with id ``inline_<entity_name>``.
    """
    pages = text.split(INLINE_PAGE_SEPARATOR)
    nodes = [
        DialogueNode(
            id=f"page_{index}",
            speaker=entity_name,
            text=page.strip(),
            next_node_id=f"page_{index + 1}" if index < len(pages) - 1 else None,
        )
        for index, page in enumerate(pages)
    ]
    return DialogueData(id=f"inline_{entity_name}", nodes=nodes)


class DialogueWalker:
    """Session-scoped state of one conversation.

    Attributes:
        dialogue: The graph being walked.
        current_node: Node on screen, or None once the conversation ended.
        visible_choices: Choices of the current node that pass their
            flag checks; empty for linear nodes.
        selected_index: Highlighted index into visible_choices.
        revealed_chars: Characters of the current text already shown.
    """

    def __init__(
        self,
        dialogue: DialogueData,
        state_manager: GameStateManager,
        *,
        chars_per_second: float | None = None,
    ) -> None:
        self.dialogue = dialogue
        self._state_manager = state_manager
        if chars_per_second is None:
            chars_per_second = get_settings().gameplay.dialogue_chars_per_second
        self._chars_per_second = chars_per_second
        self.current_node: DialogueNode | None = None
        self.visible_choices: list[DialogueChoice] = []
        self.selected_index = 0
        self.revealed_chars = 0
        self._reveal_timer = 0.0

    @property
    def is_finished(self) -> bool:
        """Whether the conversation has ended."""
        return self.current_node is None

    @property
    def current_node_id(self) -> str | None:
        return self.current_node.id if self.current_node is not None else None

    @property
    def text_length(self) -> int:
        if self.current_node is None or not self.current_node.text:
            return 0
        return len(self.current_node.text)

    @property
    def is_text_revealed(self) -> bool:
        return self.revealed_chars >= self.text_length

    @property
    def visible_text(self) -> str:
        """The part of the current text revealed so far."""
        if self.current_node is None or not self.current_node.text:
            return ""
        return self.current_node.text[: self.revealed_chars]

    def start(self) -> None:
        """Enter the dialogue at its first node."""
        self.advance(self.dialogue.start_node_id)

    def advance(self, node_id: str | None) -> None:
        """Move to a node, skipping conditional nodes whose flag is unset.

        A cycle of skipped nodes ends the conversation.

        Args:
            node_id: Node to enter; None ends the conversation.
        """
        visited: set[str] = set()
        node: DialogueNode | None = None

        while node_id:
            if node_id in visited:
                logger.warning(
                    "Dialogue skip chain loops",
                    dialogue_id=self.dialogue.id,
                    node_id=node_id,
                )
                node_id = None
                break
            visited.add(node_id)

            node = self.dialogue.get_node(node_id)
            if node is None:
                break
            if node.requires_flag and not self._state_manager.has_flag(node.requires_flag):
                node_id = node.next_node_id
                node = None
                continue
            break

        if not node_id or node is None:
            self._end()
            return

        self._enter(node)

    def _enter(self, node: DialogueNode) -> None:
        self.current_node = node
        self.revealed_chars = 0
        self._reveal_timer = 0.0
        self.selected_index = 0

        if node.sets_flag:
            self._state_manager.set_flag(node.sets_flag)
        if node.sets_variable:
            key, separator, value = node.sets_variable.partition("=")
            if separator and key:
                self._state_manager.set_variable(key, value)

        self.visible_choices = [
            choice
            for choice in node.choices or []
            if not choice.requires_flag or self._state_manager.has_flag(choice.requires_flag)
        ]

    def _end(self) -> None:
        self.current_node = None
        self.visible_choices = []
        self.selected_index = 0

    def update(self, dt: float) -> None:
        """Advance the typewriter reveal by ``dt`` seconds."""
        if self.current_node is None or self.is_text_revealed:
            return
        self._reveal_timer += dt
        chars = int(self._reveal_timer * self._chars_per_second)
        if chars > self.revealed_chars:
            self.revealed_chars = min(chars, self.text_length)

    def move_selection(self, delta: int) -> None:
        """Move the highlighted choice, wrapping around."""
        if not self.visible_choices:
            return
        self.selected_index = (self.selected_index + delta) % len(self.visible_choices)

    def interact(self) -> None:
        """Confirm: finish the reveal, pick the highlighted choice, or advance."""
        if self.current_node is None:
            return
        if not self.is_text_revealed:
            self.revealed_chars = self.text_length
            return

        if self.visible_choices:
            self.select_choice(self.selected_index)
        else:
            self.advance(self.current_node.next_node_id)

    def select_choice(self, index: int) -> None:
        """Pick a visible choice: set its flag and follow it.

        Indices outside the visible choices are ignored.
        """
        if not 0 <= index < len(self.visible_choices):
            logger.debug("Choice index out of range", index=index, choices=len(self.visible_choices))
            return
        choice = self.visible_choices[index]
        if choice.sets_flag:
            self._state_manager.set_flag(choice.sets_flag)
        self.advance(choice.next_node_id)

    def handle_action(self, action: GameAction) -> None:
        """Route a player input to the walker.

        Up/down move the selection once text is revealed, interact
        confirms and cancel abandons the conversation.
        """
        if action is GameAction.CANCEL:
            self._end()
        elif action is GameAction.INTERACT:
            self.interact()
        elif self.is_text_revealed and action is GameAction.MOVE_UP:
            self.move_selection(-1)
        elif self.is_text_revealed and action is GameAction.MOVE_DOWN:
            self.move_selection(1)


__all__ = [
    "DialogueWalker",
    "create_inline_dialogue",
]
