"""Result type shared by the exploring-mode handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from deadcity.domain.effects import Effect, Outcome


@dataclass(slots=True)
class CommandResult:
    """Messages, time cost and effects produced by one command."""

    messages: List[str] = field(default_factory=list)
    time_elapsed: int = 0
    moved: bool = False
    effects: List[Effect] = field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: Outcome, time_elapsed: int = 0) -> "CommandResult":
        return cls(messages=list(outcome.messages), time_elapsed=time_elapsed, effects=list(outcome.effects))
