"""Enemy runtime instances."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from deadcity.core.types import SpeedTier


@dataclass(slots=True)
class EnemyInstance:
    """A spawned enemy or group; exists only while its combat session lasts."""

    type_id: str
    name: str
    hp: int
    max_hp: int
    damage: Tuple[int, int]
    count: int = 1
    speed: SpeedTier = "normal"
    special: FrozenSet[str] = frozenset()
    xp: int = 0
    description: str = ""

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def has(self, special: str) -> bool:
        return special in self.special
