"""Shared type aliases for the core and domain layers."""
from typing import Literal

GameMode = Literal["exploring", "combat", "dialogue", "game_over", "victory"]
Zone = Literal["interior", "exterior", "underground", "hotel"]
SpeedTier = Literal["fast", "normal", "slow", "very_slow"]
TimeOfDay = Literal["day", "dusk", "night"]

TERMINAL_MODES: tuple[GameMode, ...] = ("game_over", "victory")

__all__ = ["GameMode", "SpeedTier", "TERMINAL_MODES", "TimeOfDay", "Zone"]
