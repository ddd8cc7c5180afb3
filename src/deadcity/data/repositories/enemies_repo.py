"""Enemies repository."""
from __future__ import annotations

from typing import Dict

from deadcity.data.errors import DataValidationError
from deadcity.data.repositories.base import RepositoryBase
from deadcity.domain.defs import EnemyDef

_SPEED_TIERS = ("fast", "normal", "slow", "very_slow")
_SPECIALS = {"explodes_on_death", "regenerates", "ambush", "no_flee", "self_damage", "noise_maker"}


class EnemiesRepository(RepositoryBase[EnemyDef]):
    """Loads and validates enemy definitions."""

    def __init__(self, base_path=None) -> None:
        super().__init__("enemies.json", base_path)

    def _build(self, raw: dict[str, object]) -> Dict[str, EnemyDef]:
        enemies: Dict[str, EnemyDef] = {}
        for raw_id, payload in raw.items():
            if not isinstance(raw_id, str):
                raise DataValidationError("Enemy IDs must be strings.")
            context = f"enemy '{raw_id}'"
            enemy_data = self._require_mapping(payload, context)
            self._assert_required(enemy_data, {"name", "hp_range", "damage"}, context)

            name = self._require_str(enemy_data["name"], f"{context} name")
            speed = self._require_str(enemy_data.get("speed", "normal"), f"{context} speed")
            if speed not in _SPEED_TIERS:
                raise DataValidationError(f"{context} speed must be one of {list(_SPEED_TIERS)}.")
            special = self._require_str_list(enemy_data.get("special", []), f"{context} special")
            unknown = set(special) - _SPECIALS
            if unknown:
                raise DataValidationError(f"{context} has unknown specials: {sorted(unknown)}")

            enemies[raw_id] = EnemyDef(
                id=raw_id,
                name=name,
                name_plural=self._require_str(enemy_data.get("name_plural", f"{name}s"), f"{context} name_plural"),
                hp_range=self._require_range(enemy_data["hp_range"], f"{context} hp_range"),
                damage=self._require_range(enemy_data["damage"], f"{context} damage"),
                speed=speed,  # type: ignore[arg-type]
                special=frozenset(special),
                xp=self._require_int(enemy_data.get("xp", 0), f"{context} xp"),
                description=self._require_str(enemy_data.get("description", ""), f"{context} description"),
            )
        return enemies
