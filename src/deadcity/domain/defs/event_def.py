"""Scripted and random event definitions."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from deadcity.core.types import TimeOfDay, Zone


@dataclass(slots=True)
class EventEffectDef:
    alert_increase: float = 0.0
    hunger_increase: int = 0
    add_items: Tuple[str, ...] = ()


@dataclass(slots=True)
class ScriptedEventDef:
    """Fires on an exact day, optionally gated by hour and flag."""

    id: str
    day: int
    messages: Tuple[str, ...]
    hour: int | None = None
    flag: str | None = None
    once: bool = True
    effect: EventEffectDef | None = None


@dataclass(slots=True)
class EventConditionsDef:
    time_of_day: TimeOfDay | None = None
    zone: Zone | None = None
    min_day: int | None = None


@dataclass(slots=True)
class RandomEventDef:
    """Rolled independently; either fixed messages or one variant line."""

    id: str
    chance: float
    messages: Tuple[str, ...] = ()
    variants: Tuple[str, ...] = ()
    conditions: EventConditionsDef | None = None
    effect: EventEffectDef | None = None
