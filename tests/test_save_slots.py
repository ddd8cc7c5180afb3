import json
from pathlib import Path

import pytest

from deadcity.presentation.cli.save_slots import SaveSlotStore


def test_write_then_read_slot(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path / "saves")
    payload = {"metadata": {"day": 4}, "state": {}}

    store.write_slot(2, payload)

    assert store.slot_exists(2)
    assert not store.slot_exists(1)
    assert store.read_slot(2) == payload


def test_list_slots_reports_metadata_and_corruption(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)
    store.write_slot(1, {"metadata": {"day": 2, "time": "08:00"}})
    (tmp_path / "slot_3.json").write_text("{not json", encoding="utf-8")

    slots = store.list_slots()

    assert [slot.exists for slot in slots] == [True, False, True]
    assert slots[0].metadata == {"day": 2, "time": "08:00"}
    assert slots[2].is_corrupt


def test_invalid_slot_index_raises(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)

    with pytest.raises(ValueError):
        store.write_slot(4, {})
    with pytest.raises(ValueError):
        store.slot_exists(0)


def test_delete_slot(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)
    store.write_slot(1, {"metadata": {}})

    store.delete_slot(1)
    store.delete_slot(1)

    assert not store.slot_exists(1)


def test_slot_files_are_plain_json(tmp_path: Path) -> None:
    store = SaveSlotStore(tmp_path)
    store.write_slot(1, {"b": 1, "a": 2})

    assert json.loads((tmp_path / "slot_1.json").read_text(encoding="utf-8")) == {"a": 2, "b": 1}
