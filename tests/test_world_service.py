from __future__ import annotations

from deadcity.data.repositories import RoomsRepository
from deadcity.services.world_service import WorldService


def _build_world() -> WorldService:
    return WorldService(RoomsRepository())


def test_search_reveals_items_once() -> None:
    world = _build_world()

    found = world.search_room("hallway_3f")

    assert found == ["first_aid_kit", "flare"]
    assert world.room_item_ids("hallway_3f") == ["fire_axe", "first_aid_kit", "flare"]
    assert world.is_searched("hallway_3f")
    assert world.search_room("hallway_3f") == []


def test_locked_exit_blocks_until_unlocked() -> None:
    world = _build_world()

    check = world.can_move("hallway_3f", "up")
    assert not check.allowed
    assert check.locked
    assert check.lock_requires == "rooftop_key"
    assert "  up: The service stairs to the rooftop [LOCKED]" in world.exit_lines("hallway_3f")

    assert world.unlock_exit("hallway_3f", "up")
    check = world.can_move("hallway_3f", "up")
    assert check.allowed
    assert check.room_id == "rooftop"


def test_missing_exit_is_refused() -> None:
    check = _build_world().can_move("room_302", "north")

    assert not check.allowed
    assert check.reason == "There is no exit in that direction."


def test_describe_prefers_first_visit_then_night_then_searched() -> None:
    world = _build_world()
    room = RoomsRepository().get("hallway_3f")

    assert world.describe_room("hallway_3f", 12, first_visit=False) == room.description.default
    assert world.describe_room("hallway_3f", 23, first_visit=False) == room.description.night
    world.search_room("hallway_3f")
    assert world.describe_room("hallway_3f", 12, first_visit=False) == room.description.searched
    assert world.describe_room("nowhere", 12, first_visit=False) == "You see nothing. This place doesn't exist."


def test_rivoli_first_visit_text() -> None:
    world = _build_world()
    room = RoomsRepository().get("rue_de_rivoli")

    assert world.is_first_visit("rue_de_rivoli")
    assert world.describe_room("rue_de_rivoli", 23, first_visit=True) == room.description.first_visit
    world.mark_visited("rue_de_rivoli")
    assert not world.is_first_visit("rue_de_rivoli")


def test_items_can_be_added_and_removed() -> None:
    world = _build_world()

    assert world.add_item("room_302", "flare")
    assert not world.add_item("nowhere", "flare")
    assert world.remove_item("room_302", "flare")
    assert not world.remove_item("room_302", "flare")


def test_snapshot_and_restore_round_trip() -> None:
    world = _build_world()
    world.search_room("hallway_3f")
    world.unlock_exit("hallway_3f", "up")
    world.set_barricaded("room_302", True)
    world.mark_visited("room_302")
    snapshot = world.snapshot()

    restored = _build_world()
    restored.restore(snapshot)

    assert restored.is_searched("hallway_3f")
    assert not restored.is_exit_locked("hallway_3f", "up")
    assert restored.is_barricaded("room_302")
    assert not restored.is_first_visit("room_302")


def test_restore_resets_untouched_rooms_and_skips_unknown() -> None:
    world = _build_world()
    world.search_room("hallway_3f")

    world.restore({"atlantis": {"searched": True}})

    assert not world.is_searched("hallway_3f")
    assert "atlantis" not in world.snapshot()
