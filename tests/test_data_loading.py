import json
from pathlib import Path

import pytest

from deadcity.data.errors import DataLoadError, DataReferenceError, DataValidationError
from deadcity.data.repositories import (
    EnemiesRepository,
    EscapeRoutesRepository,
    EventsRepository,
    ItemsRepository,
    NpcsRepository,
    RoomsRepository,
)


def test_items_repo_applies_defaults(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "items.json",
        {
            "stick": {"name": "Stick", "type": "weapon", "damage": [1, 3]},
            "crumbs": {"name": "Crumbs", "type": "food", "hunger_relief": 2},
        },
    )

    repo = ItemsRepository(base_path=definitions_dir)
    stick = repo.get("stick")
    crumbs = repo.get("crumbs")

    assert stick.damage == (1, 3)
    assert stick.durability == 0
    assert stick.special == frozenset()
    assert stick.is_weapon
    assert crumbs.weight == 0.0
    assert crumbs.hunger_relief == 2
    assert not crumbs.is_weapon
    assert repo.find("missing") is None


def test_items_repo_rejects_unknown_fields(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "items.json", {"stick": {"name": "Stick", "type": "weapon", "sharpness": 3}})

    with pytest.raises(DataValidationError):
        ItemsRepository(base_path=definitions_dir).all()


def test_items_repo_rejects_inverted_damage_range(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "items.json", {"stick": {"name": "Stick", "type": "weapon", "damage": [5, 1]}})

    with pytest.raises(DataValidationError):
        ItemsRepository(base_path=definitions_dir).get("stick")


def test_enemies_repo_defaults_and_plural(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "enemies.json", {"ghoul": {"name": "ghoul", "hp_range": [5, 9], "damage": [1, 2]}})

    ghoul = EnemiesRepository(base_path=definitions_dir).get("ghoul")

    assert ghoul.name_plural == "ghouls"
    assert ghoul.speed == "normal"
    assert ghoul.special == frozenset()


def test_enemies_repo_rejects_unknown_speed(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "enemies.json",
        {"ghoul": {"name": "ghoul", "hp_range": [5, 9], "damage": [1, 2], "speed": "teleporting"}},
    )

    with pytest.raises(DataValidationError):
        EnemiesRepository(base_path=definitions_dir).all()


def test_rooms_repo_defaults_encounter_fields(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "rooms.json",
        {
            "cellar": {
                "name": "Cellar",
                "zone": "interior",
                "description": "A damp cellar.",
                "encounters": {"spawn_chance": 0.2},
            }
        },
    )

    cellar = RoomsRepository(base_path=definitions_dir).get("cellar")

    assert cellar.description.default == "A damp cellar."
    assert cellar.encounters is not None
    assert cellar.encounters.max_count == 1
    assert cellar.encounters.types == ("shambler",)
    assert cellar.light_level == "bright"


def test_rooms_repo_rejects_exit_to_unknown_room(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "rooms.json",
        {
            "cellar": {
                "name": "Cellar",
                "zone": "interior",
                "description": "A damp cellar.",
                "exits": {"up": {"room_id": "attic"}},
            }
        },
    )

    with pytest.raises(DataReferenceError):
        RoomsRepository(base_path=definitions_dir).all()


def test_rooms_repo_rejects_unknown_zone(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "rooms.json", {"cellar": {"name": "Cellar", "zone": "space", "description": "x"}})

    with pytest.raises(DataValidationError):
        RoomsRepository(base_path=definitions_dir).all()


def test_missing_definition_file_raises_load_error(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)

    with pytest.raises(DataLoadError):
        ItemsRepository(base_path=definitions_dir).all()


def test_invalid_json_raises_load_error(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    (definitions_dir / "items.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(DataLoadError):
        ItemsRepository(base_path=definitions_dir).all()


def test_events_repo_rejects_duplicate_ids(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "events.json",
        {
            "scripted": [{"id": "boom", "day": 1, "messages": ["Boom."]}],
            "random": [{"id": "boom", "chance": 0.5, "messages": ["Boom again."]}],
        },
    )

    with pytest.raises(DataValidationError):
        EventsRepository(base_path=definitions_dir).all()


def test_shipped_definitions_load() -> None:
    assert len(RoomsRepository().all()) > 10
    assert ItemsRepository().has("bottled_water")
    assert EnemiesRepository().has("bloater")
    assert NpcsRepository().has("old_jean")
    assert EventsRepository().scripted()
    assert [route.id for route in EscapeRoutesRepository().ordered()] == [
        "seine_boat",
        "airport",
        "catacombs",
        "helicopter",
    ]


def test_shipped_definitions_reference_known_content() -> None:
    items = ItemsRepository()
    enemies = EnemiesRepository()
    rooms = RoomsRepository()

    for room in rooms.all():
        for item_id in room.items + room.search_items:
            assert items.has(item_id), f"{room.id} lists unknown item {item_id}"
        for exit_def in room.exits.values():
            if exit_def.lock_requires:
                assert items.has(exit_def.lock_requires)
        if room.encounters is not None:
            for type_id in room.encounters.types:
                assert enemies.has(type_id), f"{room.id} spawns unknown enemy {type_id}"

    for npc in NpcsRepository().all():
        assert rooms.has(npc.location)
        assert "root" in npc.dialogue

    for route in EscapeRoutesRepository().all():
        assert len(route.steps) == 5
        assert route.epilogue


def _make_definitions_dir(tmp_path: Path) -> Path:
    definitions_dir = tmp_path / "definitions"
    definitions_dir.mkdir()
    return definitions_dir


def _write_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")
