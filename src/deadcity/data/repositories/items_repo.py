"""Items repository."""
from __future__ import annotations

from typing import Dict

from deadcity.data.errors import DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import ItemDef

_ITEM_FIELDS = {
    "name",
    "type",
    "description",
    "weight",
    "stackable",
    "damage",
    "durability",
    "break_message",
    "damage_reduction",
    "hunger_relief",
    "thirst_relief",
    "healing",
    "carry_capacity",
    "special",
    "use_message",
}


class ItemsRepository(RepositoryBase[ItemDef]):
    """Loads and validates item definitions."""

    def __init__(self, base_path=None) -> None:
        super().__init__("items.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, ItemDef]:
        items: Dict[str, ItemDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Item IDs must be strings.")
            context = f"item '{raw_id}'"
            item_data = self._require_mapping(payload, context)
            self._assert_required(item_data, {"name", "type"}, context)
            self._assert_known_fields(item_data, _ITEM_FIELDS, context)

            damage = item_data.get("damage")
            items[raw_id] = ItemDef(
                id=raw_id,
                name=self._require_str(item_data["name"], f"{context} name"),
                type=self._require_str(item_data["type"], f"{context} type"),
                description=self._require_str(item_data.get("description", ""), f"{context} description"),
                weight=self._require_number(item_data.get("weight", 0), f"{context} weight"),
                stackable=self._require_bool(item_data.get("stackable", False), f"{context} stackable"),
                damage=self._require_range(damage, f"{context} damage") if damage is not None else None,
                durability=self._require_int(item_data.get("durability", 0), f"{context} durability"),
                break_message=self._optional_str(item_data.get("break_message"), f"{context} break_message"),
                damage_reduction=self._require_int(
                    item_data.get("damage_reduction", 0), f"{context} damage_reduction"
                ),
                hunger_relief=self._require_int(item_data.get("hunger_relief", 0), f"{context} hunger_relief"),
                thirst_relief=self._require_int(item_data.get("thirst_relief", 0), f"{context} thirst_relief"),
                healing=self._require_int(item_data.get("healing", 0), f"{context} healing"),
                carry_capacity=self._require_number(
                    item_data.get("carry_capacity", 0), f"{context} carry_capacity"
                ),
                special=frozenset(self._require_str_list(item_data.get("special", []), f"{context} special")),
                use_message=self._optional_str(item_data.get("use_message"), f"{context} use_message"),
            )
        return items
