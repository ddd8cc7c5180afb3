"""Player model."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Set

from deadcity.domain.inventory import Inventory

from .equipment import EquippedItem

MAX_STAT = 100


@dataclass(slots=True)
class Player:
    """The survivor. Hunger and thirst are satiety: 100 is full, 0 is starving."""

    location_id: str
    health: int = 100
    max_health: int = 100
    hunger: int = 100
    thirst: int = 100
    max_weight: float = 20.0
    inventory: Inventory = field(default_factory=Inventory)
    equipped_weapon: EquippedItem | None = None
    equipped_armor: EquippedItem | None = None
    companions: Set[str] = field(default_factory=set)
    quest_flags: Set[str] = field(default_factory=set)
    kills: int = 0
    infected: bool = False

    @property
    def current_weight(self) -> float:
        return self.inventory.current_weight

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def damage(self, amount: int) -> int:
        """Apply damage, clamp at zero and return the health lost."""
        before = self.health
        self.health = max(0, self.health - max(0, amount))
        return before - self.health

    def restore_health(self, amount: int) -> int:
        before = self.health
        self.health = min(self.max_health, self.health + max(0, amount))
        return self.health - before

    def has_item(self, item_id: str) -> bool:
        return item_id in self.inventory

    def item_count(self, item_id: str) -> int:
        return self.inventory.quantity(item_id)

    def has_flag(self, flag: str) -> bool:
        return flag in self.quest_flags
