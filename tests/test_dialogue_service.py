from __future__ import annotations

from deadcity.data.repositories import ItemsRepository, NpcsRepository
from deadcity.domain.clock import Clock
from deadcity.domain.effects import DialogueEnded, DialogueStarted
from deadcity.domain.entities import Player
from deadcity.domain.state import GameState
from deadcity.services.command_parser import ParsedCommand
from deadcity.services.dialogue_service import DialogueService
from deadcity.services.inventory_service import InventoryService


def _build_service() -> tuple[DialogueService, InventoryService]:
    inventory = InventoryService(ItemsRepository())
    return DialogueService(NpcsRepository(), inventory), inventory


def _make_state(location: str = "metro_concorde", day: int = 1) -> GameState:
    return GameState(player=Player(location_id=location), clock=Clock(day=day))


def _say(text: str) -> ParsedCommand:
    return ParsedCommand(verb=None, noun=text, raw=text)


def test_start_lists_available_options() -> None:
    service, _ = _build_service()
    state = _make_state()

    result = service.start("old_jean", state)

    assert result is not None
    assert result.messages[2:] == [
        "  1. Who are you?",
        "  2. Is there a way out of the city?",
        "  3. Goodbye.",
    ]
    assert result.effects == [DialogueStarted("old_jean")]
    assert service.in_conversation


def test_item_gated_option_appears_when_carried() -> None:
    service, inventory = _build_service()
    state = _make_state()
    inventory.add(state.player, "canned_food")

    result = service.start("old_jean", state)

    assert result is not None
    assert "  3. I brought you some food." in result.messages


def test_choosing_node_sets_flag() -> None:
    service, _ = _build_service()
    state = _make_state()
    service.start("old_jean", state)

    result = service.handle_input(_say("2"), state)

    assert state.player.has_flag("catacombs_discovered")
    assert result.messages[-1] == "  1. Goodbye."
    assert service.active_node == "way_out"


def test_free_text_matches_option() -> None:
    service, _ = _build_service()
    state = _make_state()
    service.start("old_jean", state)

    service.handle_input(_say("who"), state)

    assert service.active_node == "who"


def test_trading_food_for_the_map_ends_conversation() -> None:
    service, inventory = _build_service()
    state = _make_state()
    inventory.add(state.player, "canned_food")
    service.start("old_jean", state)

    result = service.handle_input(_say("3"), state)

    assert "[Received: Sewer Map]" in result.messages
    assert "[Given: Canned Cassoulet]" in result.messages
    assert result.messages[-1] == "The conversation ends."
    assert result.effects == [DialogueEnded()]
    assert state.player.has_item("sewer_map")
    assert not state.player.has_item("canned_food")
    assert not service.in_conversation


def test_invalid_choice_repeats_options() -> None:
    service, _ = _build_service()
    state = _make_state()
    service.start("old_jean", state)

    result = service.handle_input(_say("9"), state)

    assert result.messages[0] == "Choose an option:"
    assert service.in_conversation
    assert not result.effects


def test_leave_word_ends_conversation() -> None:
    service, _ = _build_service()
    state = _make_state()
    service.start("old_jean", state)

    result = service.handle_input(_say("bye"), state)

    assert result.messages == ["You end the conversation."]
    assert result.effects == [DialogueEnded()]
    assert not service.in_conversation


def test_claire_appears_from_day_two_and_can_join() -> None:
    service, _ = _build_service()
    assert service.npcs_in_room("pharmacy", _make_state("pharmacy", day=1)) == []

    state = _make_state("pharmacy", day=2)
    assert [npc.id for npc in service.npcs_in_room("pharmacy", state)] == ["claire"]

    service.start("claire", state)
    result = service.handle_input(_say("2"), state)

    assert "claire" in state.player.companions
    assert "[Claire has joined you!]" in result.messages
    assert not service.in_conversation


def test_give_uses_accepts_table() -> None:
    service, _ = _build_service()
    state = _make_state("police_station")

    result = service.give("sergent_moreau", "antibiotics", state)

    assert result is not None
    assert result.messages[0] == "Sergent Moreau takes the antibiotics gratefully."
    assert state.player.has_flag("moreau_healed")
    assert service.give("sergent_moreau", "canned_food", state) is None
    assert service.give("nobody", "antibiotics", state) is None
