"""Equipped item snapshots."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from deadcity.domain.defs import ItemDef


@dataclass(slots=True)
class EquippedItem:
    """Copy of an item definition carrying its own mutable durability."""

    item_id: str
    name: str
    damage: Tuple[int, int] | None = None
    durability: int = 0
    current_durability: int = 0
    damage_reduction: int = 0
    special: FrozenSet[str] = frozenset()
    break_message: str | None = None

    @classmethod
    def from_def(cls, item_def: ItemDef) -> "EquippedItem":
        return cls(
            item_id=item_def.id,
            name=item_def.name,
            damage=item_def.damage,
            durability=item_def.durability,
            current_durability=item_def.durability,
            damage_reduction=item_def.damage_reduction,
            special=item_def.special,
            break_message=item_def.break_message,
        )
