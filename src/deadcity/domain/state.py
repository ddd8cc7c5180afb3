"""Domain-level state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from deadcity.core.types import GameMode
from deadcity.domain.clock import Clock
from deadcity.domain.entities import EnemyInstance, Player

MAX_ALERT = 10.0
MIN_ALERT = 1.0


@dataclass(slots=True)
class CombatSession:
    enemy: EnemyInstance
    is_defending: bool = False
    round_count: int = 0


@dataclass(slots=True)
class RouteProgress:
    discovered: bool = False
    completed_steps: int = 0


@dataclass
class GameState:
    """Everything a session mutates. ``combat`` is set exactly when mode is combat."""

    player: Player
    mode: GameMode = "exploring"
    clock: Clock = field(default_factory=Clock)
    alert_level: float = MIN_ALERT
    combat: CombatSession | None = None
    escape_progress: Dict[str, RouteProgress] = field(default_factory=dict)
    ending: str | None = None

    @property
    def current_location_id(self) -> str:
        return self.player.location_id

    def raise_alert(self, amount: float) -> None:
        self.alert_level = min(MAX_ALERT, self.alert_level + amount)

    def set_mode(self, mode: GameMode, combat: CombatSession | None = None) -> None:
        """Switch modes; leaving combat always drops the combat session."""
        if mode == "combat":
            if combat is None:
                raise ValueError("Entering combat requires a combat session.")
            self.combat = combat
        else:
            self.combat = None
        self.mode = mode
