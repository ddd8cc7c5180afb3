"""Typed effects exchanged between subsystems and the session orchestrator.

Subsystems describe the state changes they cannot apply themselves as effect
objects next to their narrative messages; the session applies them in order.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Type, TypeVar


@dataclass(slots=True)
class Effect:
    """Base effect."""


@dataclass(slots=True)
class DamagePlayer(Effect):
    amount: int


@dataclass(slots=True)
class BreakWeapon(Effect):
    pass


@dataclass(slots=True)
class RaiseAlert(Effect):
    amount: float


@dataclass(slots=True)
class EnemyDied(Effect):
    count: int = 1


@dataclass(slots=True)
class PlayerDied(Effect):
    pass


@dataclass(slots=True)
class SurvivalVictory(Effect):
    pass


@dataclass(slots=True)
class EscapeVictory(Effect):
    route_id: str


@dataclass(slots=True)
class DialogueStarted(Effect):
    npc_id: str


@dataclass(slots=True)
class DialogueEnded(Effect):
    pass


E = TypeVar("E", bound=Effect)


@dataclass(slots=True)
class Outcome:
    """Ordered narrative messages plus the effects they announce."""

    messages: List[str] = field(default_factory=list)
    effects: List[Effect] = field(default_factory=list)

    def say(self, *lines: str) -> None:
        self.messages.extend(lines)

    def emit(self, effect: Effect) -> None:
        self.effects.append(effect)

    def extend(self, other: "Outcome") -> None:
        self.messages.extend(other.messages)
        self.effects.extend(other.effects)

    def has(self, effect_type: Type[Effect]) -> bool:
        return any(isinstance(effect, effect_type) for effect in self.effects)

    def first(self, effect_type: Type[E]) -> E | None:
        for effect in self.effects:
            if isinstance(effect, effect_type):
                return effect
        return None
