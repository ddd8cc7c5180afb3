"""Room definition structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from deadcity.core.types import Zone


@dataclass(slots=True)
class ExitDef:
    """A directional connection to another room."""

    room_id: str
    description: str = ""
    locked: bool = False
    lock_requires: str | None = None


@dataclass(slots=True)
class EncounterDef:
    """Spawn configuration for a room; absent fields take their defaults."""

    spawn_chance: float
    types: Tuple[str, ...] = ("shambler",)
    max_count: int = 1


@dataclass(slots=True)
class RoomDescriptionDef:
    default: str
    first_visit: str | None = None
    night: str | None = None
    searched: str | None = None


@dataclass(slots=True)
class RoomDef:
    """Static room content. Runtime mutation lives in RoomState."""

    id: str
    name: str
    zone: Zone
    description: RoomDescriptionDef
    exits: Dict[str, ExitDef] = field(default_factory=dict)
    items: Tuple[str, ...] = ()
    search_items: Tuple[str, ...] = ()
    barricadeable: bool = False
    barricaded: bool = False
    light_level: str = "bright"
    notes: str | None = None
    visit_flag: str | None = None
    encounters: EncounterDef | None = None
