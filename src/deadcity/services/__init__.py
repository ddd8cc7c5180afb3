"""Service layer exports."""

from .errors import SaveLoadError
from .command_parser import CommandParser, ParsedCommand, ParserContext
from .results import CommandResult
from .game_session import GameServices, GameSession, TurnResult

__all__ = [
    "SaveLoadError",
    "CommandParser",
    "ParsedCommand",
    "ParserContext",
    "CommandResult",
    "GameServices",
    "GameSession",
    "TurnResult",
]
