"""Rooms repository."""
from __future__ import annotations

from typing import Dict

from deadcity.data.errors import DataReferenceError, DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import EncounterDef, ExitDef, RoomDef, RoomDescriptionDef

_ZONES = ("interior", "exterior", "underground", "hotel")


class RoomsRepository(RepositoryBase[RoomDef]):
    """Loads and validates room definitions and their exits."""

    def __init__(self, base_path=None) -> None:
        super().__init__("rooms.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, RoomDef]:
        rooms: Dict[str, RoomDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Room IDs must be strings.")
            context = f"room '{raw_id}'"
            room_data = self._require_mapping(payload, context)
            self._assert_required(room_data, {"name", "zone", "description"}, context)

            zone = self._require_str(room_data["zone"], f"{context} zone")
            if zone not in _ZONES:
                raise DataValidationError(f"{context} zone must be one of {list(_ZONES)}.")

            rooms[raw_id] = RoomDef(
                id=raw_id,
                name=self._require_str(room_data["name"], f"{context} name"),
                zone=zone,  # type: ignore[arg-type]
                description=self._parse_description(room_data["description"], context),
                exits=self._parse_exits(room_data.get("exits", {}), context),
                items=tuple(self._require_str_list(room_data.get("items", []), f"{context} items")),
                search_items=tuple(
                    self._require_str_list(room_data.get("search_items", []), f"{context} search_items")
                ),
                barricadeable=self._require_bool(room_data.get("barricadeable", False), f"{context} barricadeable"),
                barricaded=self._require_bool(room_data.get("barricaded", False), f"{context} barricaded"),
                light_level=self._require_str(room_data.get("light_level", "bright"), f"{context} light_level"),
                notes=self._optional_str(room_data.get("notes"), f"{context} notes"),
                visit_flag=self._optional_str(room_data.get("visit_flag"), f"{context} visit_flag"),
                encounters=self._parse_encounters(room_data.get("encounters"), context),
            )
        self._validate_exit_targets(rooms)
        return rooms

    def _parse_description(self, value: object, context: str) -> RoomDescriptionDef:
        if isinstance(value, str):
            return RoomDescriptionDef(default=value)
        data = self._require_mapping(value, f"{context} description")
        self._assert_required(data, {"default"}, f"{context} description")
        return RoomDescriptionDef(
            default=self._require_str(data["default"], f"{context} description.default"),
            first_visit=self._optional_str(data.get("first_visit"), f"{context} description.first_visit"),
            night=self._optional_str(data.get("night"), f"{context} description.night"),
            searched=self._optional_str(data.get("searched"), f"{context} description.searched"),
        )

    def _parse_exits(self, value: object, context: str) -> Dict[str, ExitDef]:
        exits_data = self._require_mapping(value, f"{context} exits")
        exits: Dict[str, ExitDef] = {}
        for direction, raw_exit in exits_data.items():
            exit_context = f"{context} exit '{direction}'"
            exit_data = self._require_mapping(raw_exit, exit_context)
            self._assert_required(exit_data, {"room_id"}, exit_context)
            exits[direction] = ExitDef(
                room_id=self._require_str(exit_data["room_id"], f"{exit_context} room_id"),
                description=self._require_str(exit_data.get("description", ""), f"{exit_context} description"),
                locked=self._require_bool(exit_data.get("locked", False), f"{exit_context} locked"),
                lock_requires=self._optional_str(exit_data.get("lock_requires"), f"{exit_context} lock_requires"),
            )
        return exits

    def _parse_encounters(self, value: object, context: str) -> EncounterDef | None:
        if value is None:
            return None
        enc_context = f"{context} encounters"
        data = self._require_mapping(value, enc_context)
        spawn_chance = self._require_number(data.get("spawn_chance", 0), f"{enc_context} spawn_chance")
        types = self._require_str_list(data.get("types", ["shambler"]), f"{enc_context} types")
        if not types:
            raise DataValidationError(f"{enc_context} types must not be empty.")
        max_count = self._require_int(data.get("max_count", 1), f"{enc_context} max_count")
        if max_count < 1:
            raise DataValidationError(f"{enc_context} max_count must be at least 1.")
        return EncounterDef(spawn_chance=spawn_chance, types=tuple(types), max_count=max_count)

    @staticmethod
    def _validate_exit_targets(rooms: Dict[str, RoomDef]) -> None:
        for room in rooms.values():
            for direction, exit_def in room.exits.items():
                if exit_def.room_id not in rooms:
                    raise DataReferenceError(
                        f"room '{room.id}' exit '{direction}' targets unknown room '{exit_def.room_id}'."
                    )
