"""Runtime entity exports."""

from .enemy import EnemyInstance
from .equipment import EquippedItem
from .player import MAX_STAT, Player

__all__ = ["EnemyInstance", "EquippedItem", "MAX_STAT", "Player"]
