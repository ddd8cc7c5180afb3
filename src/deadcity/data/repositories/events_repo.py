"""Events repository."""
from __future__ import annotations

from typing import Dict, List

from deadcity.data.errors import DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import EventConditionsDef, EventEffectDef, RandomEventDef, ScriptedEventDef

_TIMES_OF_DAY = ("day", "dusk", "night")
_ZONES = ("interior", "exterior", "underground", "hotel")


class EventsRepository(RepositoryBase[ScriptedEventDef | RandomEventDef]):
    """Loads ``{"scripted": [...], "random": [...]}`` event tables.

    Ids are shared between both lists; lookups via ``get`` return either kind.
    """

    def __init__(self, base_path=None) -> None:
        super().__init__("events.json", base_path)
        self._scripted: List[ScriptedEventDef] = []
        self._random: List[RandomEventDef] = []

    def scripted(self) -> list[ScriptedEventDef]:
        self._ensure_loaded()
        return list(self._scripted)

    def random_events(self) -> list[RandomEventDef]:
        self._ensure_loaded()
        return list(self._random)

    def _build(self, raw: dict[str, object]) -> Dict[str, ScriptedEventDef | RandomEventDef]:
        self._assert_known_fields(raw, {"scripted", "random"}, "events file")
        definitions: Dict[str, ScriptedEventDef | RandomEventDef] = {}
        scripted: List[ScriptedEventDef] = []
        random_events: List[RandomEventDef] = []

        for index, payload in enumerate(self._require_list(raw.get("scripted", []), "scripted events")):
            event = self._parse_scripted(payload, f"scripted event [{index}]")
            self._register(definitions, event)
            scripted.append(event)

        for index, payload in enumerate(self._require_list(raw.get("random", []), "random events")):
            event = self._parse_random(payload, f"random event [{index}]")
            self._register(definitions, event)
            random_events.append(event)

        self._scripted = scripted
        self._random = random_events
        return definitions

    @staticmethod
    def _require_list(value: object, context: str) -> list:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return value

    @staticmethod
    def _register(
        definitions: Dict[str, ScriptedEventDef | RandomEventDef],
        event: ScriptedEventDef | RandomEventDef,
    ) -> None:
        if event.id in definitions:
            raise DataValidationError(f"Duplicate event id '{event.id}'.")
        definitions[event.id] = event

    def _parse_scripted(self, payload: object, context: str) -> ScriptedEventDef:
        data = self._require_mapping(payload, context)
        self._assert_required(data, {"id", "day", "messages"}, context)
        event_id = self._require_str(data["id"], f"{context} id")
        context = f"scripted event '{event_id}'"
        hour = self._optional_int(data.get("hour"), f"{context} hour")
        if hour is not None and not 0 <= hour <= 23:
            raise DataValidationError(f"{context} hour must be between 0 and 23.")
        return ScriptedEventDef(
            id=event_id,
            day=self._require_int(data["day"], f"{context} day"),
            messages=tuple(self._require_str_list(data["messages"], f"{context} messages")),
            hour=hour,
            flag=self._optional_str(data.get("flag"), f"{context} flag"),
            once=self._require_bool(data.get("once", True), f"{context} once"),
            effect=self._parse_effect(data.get("effect"), context),
        )

    def _parse_random(self, payload: object, context: str) -> RandomEventDef:
        data = self._require_mapping(payload, context)
        self._assert_required(data, {"id", "chance"}, context)
        event_id = self._require_str(data["id"], f"{context} id")
        context = f"random event '{event_id}'"
        chance = self._require_number(data["chance"], f"{context} chance")
        if not 0.0 <= chance <= 1.0:
            raise DataValidationError(f"{context} chance must be between 0 and 1.")
        messages = tuple(self._require_str_list(data.get("messages", []), f"{context} messages"))
        variants = tuple(self._require_str_list(data.get("variants", []), f"{context} variants"))
        if not messages and not variants:
            raise DataValidationError(f"{context} needs messages or variants.")
        return RandomEventDef(
            id=event_id,
            chance=chance,
            messages=messages,
            variants=variants,
            conditions=self._parse_conditions(data.get("conditions"), context),
            effect=self._parse_effect(data.get("effect"), context),
        )

    def _parse_conditions(self, value: object, context: str) -> EventConditionsDef | None:
        if value is None:
            return None
        data = self._require_mapping(value, f"{context} conditions")
        self._assert_known_fields(data, {"time_of_day", "zone", "min_day"}, f"{context} conditions")
        time_of_day = self._optional_str(data.get("time_of_day"), f"{context} time_of_day")
        if time_of_day is not None and time_of_day not in _TIMES_OF_DAY:
            raise DataValidationError(f"{context} time_of_day must be one of {list(_TIMES_OF_DAY)}.")
        zone = self._optional_str(data.get("zone"), f"{context} zone")
        if zone is not None and zone not in _ZONES:
            raise DataValidationError(f"{context} zone must be one of {list(_ZONES)}.")
        return EventConditionsDef(
            time_of_day=time_of_day,  # type: ignore[arg-type]
            zone=zone,  # type: ignore[arg-type]
            min_day=self._optional_int(data.get("min_day"), f"{context} min_day"),
        )

    def _parse_effect(self, value: object, context: str) -> EventEffectDef | None:
        if value is None:
            return None
        data = self._require_mapping(value, f"{context} effect")
        self._assert_known_fields(data, {"alert_increase", "hunger_increase", "add_items"}, f"{context} effect")
        return EventEffectDef(
            alert_increase=self._require_number(data.get("alert_increase", 0), f"{context} alert_increase"),
            hunger_increase=self._require_int(data.get("hunger_increase", 0), f"{context} hunger_increase"),
            add_items=tuple(self._require_str_list(data.get("add_items", []), f"{context} add_items")),
        )
