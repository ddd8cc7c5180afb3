"""Escape routes repository."""
from __future__ import annotations

from typing import Dict, Tuple

from deadcity.data.errors import DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import (
    ConditionDef,
    EscapeRouteDef,
    MissingPieceDef,
    RouteClimaxDef,
    RouteHintDef,
    RouteStepDef,
)

_CONDITION_KINDS = ("flag", "has_item", "has_all", "has_any", "at_location", "count_at_least", "all_of")


class EscapeRoutesRepository(RepositoryBase[EscapeRouteDef]):
    """Loads escape routes; ``ordered()`` preserves the checking order."""

    def __init__(self, base_path=None) -> None:
        super().__init__("escape_routes.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, EscapeRouteDef]:
        routes: Dict[str, EscapeRouteDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Escape route IDs must be strings.")
            context = f"escape route '{raw_id}'"
            route_data = self._require_mapping(payload, context)
            self._assert_required(route_data, {"name", "discovery_flag", "steps"}, context)

            raw_steps = route_data["steps"]
            if not isinstance(raw_steps, list) or not raw_steps:
                raise DataValidationError(f"{context} steps must be a non-empty list.")
            steps = []
            for index, raw_step in enumerate(raw_steps):
                step_context = f"{context} step {index + 1}"
                step_data = self._require_mapping(raw_step, step_context)
                self._assert_required(step_data, {"description", "check"}, step_context)
                steps.append(
                    RouteStepDef(
                        description=self._require_str(step_data["description"], f"{step_context} description"),
                        check=self._parse_condition(step_data["check"], f"{step_context} check"),
                    )
                )

            routes[raw_id] = EscapeRouteDef(
                id=raw_id,
                name=self._require_str(route_data["name"], f"{context} name"),
                discovery_flag=self._require_str(route_data["discovery_flag"], f"{context} discovery_flag"),
                steps=tuple(steps),
                hint=self._parse_hint(route_data.get("hint"), context),
                climax=self._parse_climax(route_data.get("climax"), context),
                epilogue=tuple(self._require_str_list(route_data.get("epilogue", []), f"{context} epilogue")),
            )
        return routes

    def _parse_condition(self, value: object, context: str) -> ConditionDef:
        data = self._require_mapping(value, context)
        self._assert_required(data, {"kind"}, context)
        kind = self._require_str(data["kind"], f"{context} kind")
        if kind not in _CONDITION_KINDS:
            raise DataValidationError(f"{context} kind must be one of {list(_CONDITION_KINDS)}.")
        flag = self._optional_str(data.get("flag"), f"{context} flag")
        location = self._optional_str(data.get("location"), f"{context} location")
        items = tuple(self._require_str_list(data.get("items", []), f"{context} items"))
        if kind == "flag" and flag is None:
            raise DataValidationError(f"{context} needs a flag.")
        if kind == "at_location" and location is None:
            raise DataValidationError(f"{context} needs a location.")
        if kind in ("has_item", "has_all", "has_any", "count_at_least") and not items:
            raise DataValidationError(f"{context} needs at least one item.")
        nested: Tuple[ConditionDef, ...] = ()
        if kind == "all_of":
            nested = self._parse_conditions(data.get("conditions"), f"{context} conditions")
            if not nested:
                raise DataValidationError(f"{context} needs at least one nested condition.")
        return ConditionDef(
            kind=kind,  # type: ignore[arg-type]
            flag=flag,
            location=location,
            items=items,
            count=self._require_int(data.get("count", 1), f"{context} count"),
            conditions=nested,
        )

    def _parse_conditions(self, value: object, context: str) -> Tuple[ConditionDef, ...]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return tuple(self._parse_condition(entry, f"{context}[{index}]") for index, entry in enumerate(value))

    def _parse_hint(self, value: object, context: str) -> RouteHintDef | None:
        if value is None:
            return None
        hint_context = f"{context} hint"
        data = self._require_mapping(value, hint_context)
        self._assert_required(data, {"location", "requires", "prompt_flag", "messages"}, hint_context)
        return RouteHintDef(
            location=self._require_str(data["location"], f"{hint_context} location"),
            requires=self._parse_conditions(data["requires"], f"{hint_context} requires"),
            prompt_flag=self._require_str(data["prompt_flag"], f"{hint_context} prompt_flag"),
            messages=tuple(self._require_str_list(data["messages"], f"{hint_context} messages")),
            sets_flags=tuple(self._require_str_list(data.get("sets_flags", []), f"{hint_context} sets_flags")),
        )

    def _parse_climax(self, value: object, context: str) -> RouteClimaxDef | None:
        if value is None:
            return None
        climax_context = f"{context} climax"
        data = self._require_mapping(value, climax_context)
        self._assert_required(
            data, {"location", "trigger_items", "requires", "sets_flags", "messages"}, climax_context
        )
        missing = []
        raw_missing = data.get("missing", [])
        if not isinstance(raw_missing, list):
            raise DataValidationError(f"{climax_context} missing must be a list.")
        for index, entry in enumerate(raw_missing):
            piece_context = f"{climax_context} missing[{index}]"
            piece = self._require_mapping(entry, piece_context)
            self._assert_required(piece, {"check", "message"}, piece_context)
            missing.append(
                MissingPieceDef(
                    check=self._parse_condition(piece["check"], f"{piece_context} check"),
                    message=self._require_str(piece["message"], f"{piece_context} message"),
                )
            )
        return RouteClimaxDef(
            location=self._require_str(data["location"], f"{climax_context} location"),
            trigger_items=tuple(self._require_str_list(data["trigger_items"], f"{climax_context} trigger_items")),
            requires=self._parse_conditions(data["requires"], f"{climax_context} requires"),
            sets_flags=tuple(self._require_str_list(data["sets_flags"], f"{climax_context} sets_flags")),
            messages=tuple(self._require_str_list(data["messages"], f"{climax_context} messages")),
            time_elapsed=self._require_int(data.get("time_elapsed", 0), f"{climax_context} time_elapsed"),
            missing_header=self._require_str(
                data.get("missing_header", "You still need:"), f"{climax_context} missing_header"
            ),
            missing=tuple(missing),
        )
