"""Carried inventory with weight tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple


@dataclass(slots=True)
class Inventory:
    """Quantities keyed by item id.

    Unit weights are captured when an item is first added so the carried
    weight is always derived from the current quantities.
    """

    quantities: Dict[str, int] = field(default_factory=dict)
    unit_weights: Dict[str, float] = field(default_factory=dict)

    @property
    def current_weight(self) -> float:
        return sum(self.unit_weights.get(item_id, 0.0) * qty for item_id, qty in self.quantities.items())

    def add(self, item_id: str, weight: float = 0.0, quantity: int = 1) -> None:
        if quantity <= 0:
            return
        self.quantities[item_id] = self.quantities.get(item_id, 0) + quantity
        self.unit_weights[item_id] = weight

    def remove(self, item_id: str, quantity: int = 1) -> bool:
        if quantity <= 0:
            return True
        current = self.quantities.get(item_id, 0)
        if current < quantity:
            return False
        new_value = current - quantity
        if new_value == 0:
            self.quantities.pop(item_id, None)
            self.unit_weights.pop(item_id, None)
        else:
            self.quantities[item_id] = new_value
        return True

    def quantity(self, item_id: str) -> int:
        return self.quantities.get(item_id, 0)

    def items(self) -> Iterator[Tuple[str, int]]:
        return iter(list(self.quantities.items()))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.quantities

    def __len__(self) -> int:
        return len(self.quantities)
