"""Game clock and time-of-day helpers."""
from __future__ import annotations

from dataclasses import dataclass

from deadcity.core.types import TimeOfDay

SURVIVAL_DAYS = 30
MINUTES_PER_DAY = 1440


@dataclass(slots=True)
class Clock:
    day: int = 1
    hour: int = 6
    minute: int = 0

    @property
    def absolute_minutes(self) -> int:
        return self.day * MINUTES_PER_DAY + self.hour * 60 + self.minute

    def label(self) -> str:
        return f"Day {self.day}, {self.hour:02d}:{self.minute:02d}"


def time_of_day(hour: int) -> TimeOfDay:
    if 6 <= hour < 19:
        return "day"
    if 19 <= hour < 21:
        return "dusk"
    return "night"


def is_night(hour: int) -> bool:
    return hour >= 21 or hour < 6


def is_dusk(hour: int) -> bool:
    return 19 <= hour < 21


def spawn_multiplier(hour: int) -> float:
    """Encounter chance multiplier for the given hour."""
    if is_night(hour):
        return 2.0
    if is_dusk(hour):
        return 1.5
    return 1.0
