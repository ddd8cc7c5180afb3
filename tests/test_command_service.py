from __future__ import annotations

from typing import Sequence

from deadcity.core.rng import SequenceRNG
from deadcity.domain.entities import EquippedItem, Player
from deadcity.domain.state import GameState
from deadcity.services import GameServices
from deadcity.services.command_parser import ParsedCommand


def _build_services(draws: Sequence[float] = ()) -> GameServices:
    return GameServices.build(rng=SequenceRNG(draws))


def _make_state(services: GameServices, location: str = "room_302", **items: int) -> GameState:
    player = Player(location_id=location)
    for item_id, quantity in items.items():
        services.inventory.add(player, item_id, quantity)
    return GameState(player=player, escape_progress=services.escape_routes.initial_progress())


def _cmd(verb: str, noun: str | None = None, modifier: str | None = None, raw: str | None = None) -> ParsedCommand:
    if raw is None:
        raw = " ".join(part for part in (verb, noun, modifier) if part)
    return ParsedCommand(verb=verb, noun=noun, modifier=modifier, raw=raw)


# -----------------------
# Items
# -----------------------


def test_take_moves_item_from_room_to_player() -> None:
    services = _build_services()
    state = _make_state(services)

    result = services.commands.execute(_cmd("take", "bottled_water"), state)

    assert result.messages == ["You take the Bottled Water."]
    assert result.time_elapsed == 2
    assert state.player.has_item("bottled_water")
    assert "bottled_water" not in services.world.room_item_ids("room_302")


def test_take_all_and_comma_lists() -> None:
    services = _build_services()
    state = _make_state(services)

    result = services.commands.execute(_cmd("take", "all"), state)
    assert result.time_elapsed == 4
    assert state.player.has_item("bottled_water")
    assert state.player.has_item("hotel_map")

    other = _build_services()
    other_state = _make_state(other)
    result = other.commands.execute(_cmd("take", "water, map", raw="take water, map"), other_state)
    assert result.messages == ["You take the Bottled Water.", "You take the Hotel Map."]


def test_take_comma_list_ignores_articles() -> None:
    services = _build_services()
    state = _make_state(services)

    result = services.commands.execute(_cmd("take", "water", raw="take the water, the map"), state)

    assert result.messages == ["You take the Bottled Water.", "You take the Hotel Map."]
    assert state.player.has_item("hotel_map")


def test_take_respects_weight_limit() -> None:
    services = _build_services()
    state = _make_state(services)
    state.player.max_weight = 0.5

    result = services.commands.execute(_cmd("take", "bottled_water"), state)

    assert result.messages == ["You are carrying too much. Drop something first."]
    assert not state.player.has_item("bottled_water")


def test_take_missing_item() -> None:
    services = _build_services()

    result = services.commands.execute(_cmd("take", "spaceship"), _make_state(services))

    assert result.messages == ['You don\'t see a "spaceship" here.']


def test_dropping_last_copy_unequips() -> None:
    services = _build_services()
    state = _make_state(services, kitchen_knife=1)
    state.player.equipped_weapon = EquippedItem.from_def(services.items_repo.get("kitchen_knife"))

    result = services.commands.execute(_cmd("drop", "knife"), state)

    assert result.messages == ["You drop the Kitchen Knife."]
    assert state.player.equipped_weapon is None
    assert "kitchen_knife" in services.world.room_item_ids("room_302")


def test_use_water_consumes_it() -> None:
    services = _build_services()
    state = _make_state(services, bottled_water=2)
    state.player.thirst = 50

    result = services.commands.execute(_cmd("use", "bottled_water"), state)

    assert result.time_elapsed == 5
    assert state.player.thirst == 90
    assert state.player.item_count("bottled_water") == 1


def test_quest_item_used_in_wrong_place() -> None:
    services = _build_services()
    state = _make_state(services, toolbox=1)

    result = services.commands.execute(_cmd("use", "toolbox"), state)

    assert result.messages == ["You examine the Toolbox. You'll need to use it at the right location."]


def test_inventory_listing() -> None:
    services = _build_services()
    empty = services.commands.execute(_cmd("inventory"), _make_state(services))
    assert empty.messages == ["You are carrying nothing."]

    state = _make_state(services, kitchen_knife=1, bottled_water=2)
    state.player.equipped_weapon = EquippedItem.from_def(services.items_repo.get("kitchen_knife"))
    result = services.commands.execute(_cmd("inventory"), state)

    assert result.messages == [
        "You are carrying:",
        "  Kitchen Knife [0.3kg] [EQUIPPED]",
        "  Bottled Water (x2) [1kg]",
        "Weight: 2.3/20kg",
    ]
    assert result.time_elapsed == 0


def test_search_once() -> None:
    services = _build_services()
    state = _make_state(services)

    first = services.commands.execute(_cmd("search"), state)
    second = services.commands.execute(_cmd("search"), state)

    assert first.messages == ["You search the area carefully...", "You find: Snack Bar, Bottle of Bordeaux!"]
    assert first.time_elapsed == 10
    assert second.messages == ["You've already thoroughly searched this area."]
    assert second.time_elapsed == 5


# -----------------------
# Movement and locks
# -----------------------


def test_go_reports_travel_time_by_zone() -> None:
    services = _build_services()

    state = _make_state(services)
    result = services.commands.execute(_cmd("go", "outside"), state)
    assert result.moved
    assert result.time_elapsed == 5
    assert result.messages[0] == "Third Floor Hallway"
    assert state.current_location_id == "hallway_3f"

    street = _make_state(services, "rue_de_rivoli")
    assert services.commands.execute(_cmd("go", "west"), street).time_elapsed == 15

    lobby = _make_state(services, "hotel_lobby")
    assert services.commands.execute(_cmd("go", "down"), lobby).time_elapsed == 10


def test_go_through_locked_exit_needs_key() -> None:
    services = _build_services()

    state = _make_state(services, "hallway_3f")
    result = services.commands.execute(_cmd("go", "up"), state)
    assert result.messages == ["The way is locked. You need a Rooftop Key."]
    assert not result.moved

    state = _make_state(services, "hallway_3f", rooftop_key=1)
    result = services.commands.execute(_cmd("go", "up"), state)
    assert result.messages[0] == "You use the Rooftop Key to unlock the way."
    assert state.current_location_id == "rooftop"


def test_lockpick_roll_decides_unlock() -> None:
    services = _build_services([0.7, 0.5])
    state = _make_state(services, "hallway_3f", lockpick_set=1)

    fumble = services.commands.execute(_cmd("unlock", "up"), state)
    assert fumble.time_elapsed == 5
    assert services.world.is_exit_locked("hallway_3f", "up")

    success = services.commands.execute(_cmd("unlock", "up"), state)
    assert success.messages == ["You work the lockpick carefully... *click*. It's open."]
    assert not services.world.is_exit_locked("hallway_3f", "up")


def test_lockpick_cannot_open_padlock() -> None:
    services = _build_services()
    state = _make_state(services, "hotel_lobby", lockpick_set=1)

    result = services.commands.execute(_cmd("unlock", "outside"), state)

    assert result.messages == ["It's locked. You need a Padlock Key."]
    assert services.rng.consumed == 0


# -----------------------
# Fortification and rest
# -----------------------


def test_barricade_needs_two_planks() -> None:
    services = _build_services()

    short = _make_state(services, wooden_plank=1)
    result = services.commands.execute(_cmd("barricade"), short)
    assert result.messages == ["You need at least 2 wooden planks to barricade this area."]

    state = _make_state(services, wooden_plank=3)
    result = services.commands.execute(_cmd("barricade"), state)
    assert result.time_elapsed == 30
    assert services.world.is_barricaded("room_302")
    assert state.player.item_count("wooden_plank") == 1

    again = services.commands.execute(_cmd("barricade"), state)
    assert again.messages == ["This location is already barricaded."]

    kitchen = _make_state(services, "hotel_kitchen", wooden_plank=2)
    assert services.commands.execute(_cmd("barricade"), kitchen).messages == [
        "You can't barricade this location."
    ]


def test_wait_and_sleep_advance_the_clock() -> None:
    services = _build_services()
    state = _make_state(services)
    state.player.health = 50

    result = services.commands.execute(_cmd("wait", "3"), state)
    assert "You rest for 3 hours. (+3 HP)" in result.messages
    assert result.time_elapsed == 0
    assert state.clock.hour == 9

    result = services.commands.execute(_cmd("wait", raw="sleep"), state)
    assert "You sleep for 6 hours. (+6 HP)" in result.messages
    assert state.clock.hour == 15


def test_unknown_verb_and_missing_map() -> None:
    services = _build_services()
    state = _make_state(services)

    assert services.commands.execute(_cmd("dance"), state).messages == ['You can\'t "dance" right now.']
    assert services.commands.execute(_cmd("map"), state).messages == [
        "You don't have a map. Find one to see your surroundings."
    ]
