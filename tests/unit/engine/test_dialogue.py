"""Tests for the dialogue walker."""

from __future__ import annotations

import pytest

from tileforge.core.config import clear_settings_cache
from tileforge.engine.dialogue import DialogueWalker, create_inline_dialogue
from tileforge.engine.state_manager import GameStateManager
from tileforge.models.dialogue import DialogueChoice, DialogueData, DialogueNode
from tileforge.models.enums import GameAction


@pytest.fixture
def elder() -> DialogueData:
    """Branching dialogue with a conditional middle node."""
    return DialogueData(
        id="elder",
        nodes=[
            DialogueNode(id="n1", speaker="Elder", text="Hello.", next_node_id="n2", sets_flag="met_elder"),
            DialogueNode(
                id="n2",
                text="You carry the key!",
                next_node_id="n3",
                requires_flag="has_key",
                sets_flag="elder_saw_key",
                sets_variable="trust=5",
            ),
            DialogueNode(
                id="n3",
                text="Will you help?",
                choices=[
                    DialogueChoice(text="Yes", next_node_id="yes", sets_flag="agreed"),
                    DialogueChoice(text="Secret", next_node_id="secret", requires_flag="knows_secret"),
                    DialogueChoice(text="No"),
                ],
            ),
            DialogueNode(id="yes", text="Thank you."),
            DialogueNode(id="secret", text="Hush."),
        ],
    )


class TestDialogueWalker:
    """Tests for walking a dialogue graph."""

    def test_start_applies_node_flag(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test the first node is entered and its flag set."""
        walker = DialogueWalker(elder, manager)
        walker.start()

        assert walker.current_node_id == "n1"
        assert walker.current_node.speaker == "Elder"
        assert manager.has_flag("met_elder")

    def test_skipped_node_has_no_effects(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test a node with an unset required flag is skipped silently."""
        walker = DialogueWalker(elder, manager)
        walker.start()

        walker.advance("n2")

        assert walker.current_node_id == "n3"
        assert not manager.has_flag("elder_saw_key")
        assert manager.get_variable("trust") is None

    def test_required_flag_present(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test a satisfied node is shown and applies its effects."""
        manager.set_flag("has_key")
        walker = DialogueWalker(elder, manager)

        walker.advance("n2")

        assert walker.current_node_id == "n2"
        assert manager.has_flag("elder_saw_key")
        assert manager.get_variable("trust") == "5"

    def test_hidden_choices(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test choices with an unset flag are not offered."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")

        assert [choice.text for choice in walker.visible_choices] == ["Yes", "No"]

    def test_select_choice(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test picking a choice sets its flag and follows it."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")

        walker.select_choice(0)

        assert manager.has_flag("agreed")
        assert walker.current_node_id == "yes"

    def test_choice_without_next_ends(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test a choice with no next node ends the conversation."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")

        walker.select_choice(1)

        assert walker.is_finished

    def test_out_of_range_choice_ignored(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test an index past the visible choices leaves the node unchanged."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")

        walker.select_choice(2)
        walker.select_choice(-1)

        assert walker.current_node_id == "n3"
        assert not manager.has_flag("agreed")

    def test_unknown_node_ends(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test advancing to a missing node ends the conversation."""
        walker = DialogueWalker(elder, manager)
        walker.advance("nowhere")

        assert walker.is_finished
        assert walker.visible_text == ""

    def test_skip_cycle_ends(self, manager: GameStateManager) -> None:
        """Test a loop of skipped nodes ends instead of spinning."""
        dialogue = DialogueData(
            nodes=[
                DialogueNode(id="a", requires_flag="x", next_node_id="b"),
                DialogueNode(id="b", requires_flag="x", next_node_id="a"),
            ]
        )
        walker = DialogueWalker(dialogue, manager)

        walker.start()

        assert walker.is_finished

    def test_malformed_variable_ignored(self, manager: GameStateManager) -> None:
        """Test sets_variable without a key or separator is ignored."""
        dialogue = DialogueData(
            nodes=[
                DialogueNode(id="a", sets_variable="novalue", next_node_id="b"),
                DialogueNode(id="b", sets_variable="=3"),
            ]
        )
        walker = DialogueWalker(dialogue, manager)
        walker.start()
        walker.advance("b")

        assert manager.state.variables == {}

    def test_empty_dialogue_finished(self, manager: GameStateManager) -> None:
        """Test a dialogue without nodes ends immediately."""
        walker = DialogueWalker(DialogueData(), manager)
        walker.start()

        assert walker.is_finished


class TestTypewriter:
    """Tests for text reveal and input handling."""

    def test_reveal_over_time(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test text is revealed at the configured rate."""
        walker = DialogueWalker(elder, manager, chars_per_second=10.0)
        walker.start()

        walker.update(0.25)
        assert walker.visible_text == "He"

        walker.update(10.0)
        assert walker.is_text_revealed
        assert walker.visible_text == "Hello."

    def test_reveal_speed_from_settings(
        self,
        manager: GameStateManager,
        elder: DialogueData,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test the default reveal speed comes from gameplay settings."""
        monkeypatch.setenv("TILEFORGE_GAMEPLAY_DIALOGUE_CHARS_PER_SECOND", "4")
        clear_settings_cache()
        walker = DialogueWalker(elder, manager)
        walker.start()

        walker.update(0.5)

        assert walker.visible_text == "He"

    def test_interact_reveals_then_advances(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test the first interact completes the text, the second advances."""
        walker = DialogueWalker(elder, manager)
        walker.start()

        walker.interact()
        assert walker.current_node_id == "n1"
        assert walker.is_text_revealed

        walker.interact()
        assert walker.current_node_id == "n3"
        assert walker.revealed_chars == 0

    def test_selection_wraps_after_reveal(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test up/down only move the selection once text is shown."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")

        walker.handle_action(GameAction.MOVE_DOWN)
        assert walker.selected_index == 0

        walker.handle_action(GameAction.INTERACT)
        walker.handle_action(GameAction.MOVE_UP)
        assert walker.selected_index == 1

        walker.handle_action(GameAction.MOVE_DOWN)
        assert walker.selected_index == 0

    def test_interact_picks_highlighted(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test confirming with a highlighted choice follows it."""
        walker = DialogueWalker(elder, manager)
        walker.advance("n3")
        walker.update(100.0)

        walker.handle_action(GameAction.MOVE_DOWN)
        walker.handle_action(GameAction.INTERACT)

        assert walker.is_finished
        assert not manager.has_flag("agreed")

    def test_cancel_ends(self, manager: GameStateManager, elder: DialogueData) -> None:
        """Test cancel abandons the conversation."""
        walker = DialogueWalker(elder, manager)
        walker.start()

        walker.handle_action(GameAction.CANCEL)

        assert walker.is_finished


class TestInlineDialogue:
    """Tests for create_inline_dialogue."""

    def test_pages_chain(self) -> None:
        """Test each segment becomes a linked page."""
        dialogue = create_inline_dialogue("Guard", "Halt! | Who goes there?")

        assert dialogue.id == "inline_Guard"
        assert [node.id for node in dialogue.nodes] == ["page_0", "page_1"]
        assert dialogue.nodes[0].next_node_id == "page_1"
        assert dialogue.nodes[1].next_node_id is None
        assert dialogue.nodes[1].text == "Who goes there?"
        assert dialogue.nodes[0].speaker == "Guard"

    def test_walks_to_end(self, manager: GameStateManager) -> None:
        """Test an inline dialogue ends after its last page."""
        walker = DialogueWalker(create_inline_dialogue("Guard", "Hi"), manager)
        walker.start()

        walker.interact()
        walker.interact()

        assert walker.is_finished
