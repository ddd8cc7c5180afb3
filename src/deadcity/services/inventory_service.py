"""Carried-item bookkeeping: weights, capacity and display names."""
from __future__ import annotations

from typing import List, Tuple

from deadcity.data.repositories import ItemsRepository
from deadcity.domain.defs import ItemDef
from deadcity.domain.entities import Player


class InventoryService:
    """Service responsible for the player's carried items."""

    def __init__(self, items_repo: ItemsRepository) -> None:
        self._items_repo = items_repo

    def item_def(self, item_id: str) -> ItemDef | None:
        return self._items_repo.find(item_id)

    def item_name(self, item_id: str) -> str:
        """Display name for ``item_id``; unknown ids fall back to a readable label."""
        item_def = self._items_repo.find(item_id)
        if item_def is None:
            return item_id.replace("_", " ")
        return item_def.name

    def item_weight(self, item_id: str) -> float:
        item_def = self._items_repo.find(item_id)
        return item_def.weight if item_def else 0.0

    def add(self, player: Player, item_id: str, quantity: int = 1) -> None:
        player.inventory.add(item_id, self.item_weight(item_id), quantity)

    def remove(self, player: Player, item_id: str, quantity: int = 1) -> bool:
        return player.inventory.remove(item_id, quantity)

    def extra_carry_capacity(self, player: Player) -> float:
        """Capacity granted by carried containers such as backpacks."""
        extra = 0.0
        for item_id, _ in player.inventory.items():
            item_def = self._items_repo.find(item_id)
            if item_def is not None and item_def.carry_capacity:
                extra += item_def.carry_capacity
        return extra

    def max_carry(self, player: Player) -> float:
        return player.max_weight + self.extra_carry_capacity(player)

    def can_carry(self, player: Player, item_id: str) -> bool:
        return player.current_weight + self.item_weight(item_id) <= self.max_carry(player)

    def find_carried(self, player: Player, query: str) -> str | None:
        """Resolve ``query`` to a carried item id by id or by name substring."""
        if player.has_item(query):
            return query
        lowered = query.lower()
        for item_id, _ in player.inventory.items():
            if lowered and lowered in self.item_name(item_id).lower():
                return item_id
        return None

    def carried(self, player: Player) -> List[Tuple[str, int]]:
        return list(player.inventory.items())
