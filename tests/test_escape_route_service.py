from __future__ import annotations

from deadcity.data.repositories import EscapeRoutesRepository, RoomsRepository
from deadcity.domain.defs import ConditionDef
from deadcity.domain.effects import EscapeVictory
from deadcity.domain.entities import Player
from deadcity.domain.state import GameState
from deadcity.services.escape_route_service import EscapeRouteService

_SEINE_HINT = "The damaged motorboat bobs against the dock. You have everything you need to repair it."


def _build_service() -> EscapeRouteService:
    return EscapeRouteService(EscapeRoutesRepository(), RoomsRepository())


def _make_state(service: EscapeRouteService, location: str = "room_302", *items: str) -> GameState:
    player = Player(location_id=location)
    for item_id in items:
        player.inventory.add(item_id, 1.0)
    return GameState(player=player, escape_progress=service.initial_progress())


def test_undiscovered_routes_make_no_progress() -> None:
    service = _build_service()
    state = _make_state(service, "room_302", "boat_engine_part")

    outcome = service.check(state)

    assert outcome.messages == []
    assert state.escape_progress["seine_boat"].completed_steps == 0


def test_discovery_announces_route_once() -> None:
    service = _build_service()
    state = _make_state(service)
    state.player.quest_flags.add("seine_boat_discovered")

    first = service.check(state)
    second = service.check(state)

    assert first.messages == [
        "[ESCAPE ROUTE DISCOVERED: Seine River Escape]",
        "Type 'status' to check your progress.",
    ]
    assert second.messages == []
    assert state.escape_progress["seine_boat"].discovered


def test_completed_step_count_never_decreases() -> None:
    service = _build_service()
    state = _make_state(service, "room_302", "boat_engine_part")
    state.player.quest_flags.add("seine_boat_discovered")

    outcome = service.check(state)
    assert "[Seine River Escape: Step 1/5 complete]" in outcome.messages

    state.player.inventory.remove("boat_engine_part")
    outcome = service.check(state)
    assert outcome.messages == []
    assert state.escape_progress["seine_boat"].completed_steps == 1


def test_last_step_alone_wins_once_discovered() -> None:
    service = _build_service()
    state = _make_state(service)
    state.player.quest_flags.update({"seine_boat_discovered", "boat_repaired"})

    outcome = service.check(state)

    assert outcome.first(EscapeVictory) == EscapeVictory("seine_boat")


def test_undiscovered_route_cannot_win() -> None:
    service = _build_service()
    state = _make_state(service)
    state.player.quest_flags.add("boat_repaired")

    assert not service.check(state).has(EscapeVictory)


def test_reaching_catacomb_exit_wins() -> None:
    service = _build_service()
    state = _make_state(service, "catacomb_exit")
    state.player.quest_flags.add("catacombs_discovered")

    outcome = service.check(state)

    assert outcome.first(EscapeVictory) == EscapeVictory("catacombs")


def test_visiting_dock_sets_flag_and_shows_hint_once() -> None:
    service = _build_service()
    state = _make_state(service, "seine_dock", "boat_engine_part", "toolbox", "fuel_can")
    state.player.quest_flags.add("seine_boat_discovered")

    outcome = service.check(state)

    assert state.player.has_flag("visited_seine_dock")
    assert "[Seine River Escape: Step 4/5 complete]" in outcome.messages
    assert _SEINE_HINT in outcome.messages
    assert state.player.has_flag("boat_repair_prompted")
    assert _SEINE_HINT not in service.check(state).messages


def test_climax_succeeds_with_every_piece() -> None:
    service = _build_service()
    state = _make_state(service, "seine_dock", "boat_engine_part", "toolbox", "gasoline_can")

    result = service.try_climax(state, "toolbox")

    assert result is not None
    assert result.time_elapsed == 120
    assert result.messages[0] == "You open the toolbox and get to work on the engine."
    assert state.player.has_flag("boat_repaired")
    # the parts stay in the inventory
    assert state.player.has_item("toolbox")


def test_climax_lists_missing_pieces() -> None:
    service = _build_service()
    state = _make_state(service, "seine_dock", "toolbox")

    result = service.try_climax(state, "toolbox")

    assert result is not None
    assert result.messages == [
        "You examine the boat. You still need:",
        "  - A boat engine part",
        "  - Fuel",
    ]
    assert result.time_elapsed == 0
    assert not state.player.has_flag("boat_repaired")


def test_climax_ignored_elsewhere() -> None:
    service = _build_service()
    state = _make_state(service, "room_302", "toolbox")

    assert service.try_climax(state, "toolbox") is None


def test_status_lines_mark_steps() -> None:
    service = _build_service()
    state = _make_state(service, "room_302", "toolbox")
    assert service.status_lines(state) == ["No escape routes discovered yet. Explore and talk to survivors."]

    state.player.quest_flags.add("seine_boat_discovered")
    service.check(state)
    lines = service.status_lines(state)

    assert lines[0] == "--- Seine River Escape ---"
    assert "  [X] Obtain a toolbox" in lines
    assert "  [ ] Obtain a boat engine part" in lines


def test_evaluate_all_of_and_count() -> None:
    service = _build_service()
    state = _make_state(service, "rooftop", "flare")
    state.player.inventory.add("flare", 0.3)

    two_flares = ConditionDef(kind="count_at_least", items=("flare",), count=2)
    on_roof = ConditionDef(kind="at_location", location="rooftop")

    assert service.evaluate(two_flares, state)
    assert service.evaluate(ConditionDef(kind="all_of", conditions=(two_flares, on_roof)), state)
    assert not service.evaluate(ConditionDef(kind="count_at_least", items=("flare",), count=3), state)
