"""Escape route definitions and their step predicates."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

ConditionKind = Literal[
    "flag", "has_item", "has_all", "has_any", "at_location", "count_at_least", "all_of"
]


@dataclass(slots=True)
class ConditionDef:
    """A named predicate over game state.

    ``flag`` reads ``flag``; ``at_location`` reads ``location``; the item kinds
    read ``items`` (``has_item`` uses the first entry) and ``count_at_least``
    compares the summed quantities of ``items`` against ``count``. ``all_of``
    holds when every nested condition in ``conditions`` holds.
    """

    kind: ConditionKind
    flag: str | None = None
    location: str | None = None
    items: Tuple[str, ...] = ()
    count: int = 1
    conditions: Tuple["ConditionDef", ...] = ()


@dataclass(slots=True)
class RouteStepDef:
    description: str
    check: ConditionDef


@dataclass(slots=True)
class RouteHintDef:
    """One-shot "you have everything" prompt shown at the climax location."""

    location: str
    requires: Tuple[ConditionDef, ...]
    prompt_flag: str
    messages: Tuple[str, ...]
    sets_flags: Tuple[str, ...] = ()


@dataclass(slots=True)
class MissingPieceDef:
    check: ConditionDef
    message: str


@dataclass(slots=True)
class RouteClimaxDef:
    """The use-item action that completes a route."""

    location: str
    trigger_items: Tuple[str, ...]
    requires: Tuple[ConditionDef, ...]
    sets_flags: Tuple[str, ...]
    messages: Tuple[str, ...]
    time_elapsed: int = 0
    missing_header: str = "You still need:"
    missing: Tuple[MissingPieceDef, ...] = ()


@dataclass(slots=True)
class EscapeRouteDef:
    id: str
    name: str
    discovery_flag: str
    steps: Tuple[RouteStepDef, ...]
    hint: RouteHintDef | None = None
    climax: RouteClimaxDef | None = None
    epilogue: Tuple[str, ...] = ()
