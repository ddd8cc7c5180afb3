"""Item definition structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple


@dataclass(slots=True)
class ItemDef:
    """Any carriable item; weapon, armor and consumable fields default to inert."""

    id: str
    name: str
    type: str
    description: str = ""
    weight: float = 0.0
    stackable: bool = False
    damage: Tuple[int, int] | None = None
    durability: int = 0
    break_message: str | None = None
    damage_reduction: int = 0
    hunger_relief: int = 0
    thirst_relief: int = 0
    healing: int = 0
    carry_capacity: float = 0.0
    special: FrozenSet[str] = frozenset()
    use_message: str | None = None

    @property
    def is_weapon(self) -> bool:
        return self.type == "weapon" or (self.damage is not None and self.damage[0] > 0)
