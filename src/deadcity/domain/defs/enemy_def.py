"""Enemy definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from deadcity.core.types import SpeedTier


@dataclass(slots=True)
class EnemyDef:
    """Enemy type template used when an encounter spawns."""

    id: str
    name: str
    name_plural: str
    hp_range: Tuple[int, int]
    damage: Tuple[int, int]
    speed: SpeedTier = "normal"
    special: FrozenSet[str] = frozenset()
    xp: int = 0
    description: str = ""
