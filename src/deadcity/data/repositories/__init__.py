"""Repository exports."""

from .base import RepositoryBase
from .enemies_repo import EnemiesRepository
from .escape_routes_repo import EscapeRoutesRepository
from .events_repo import EventsRepository
from .items_repo import ItemsRepository
from .npcs_repo import NpcsRepository
from .rooms_repo import RoomsRepository

__all__ = [
    "EnemiesRepository",
    "EscapeRoutesRepository",
    "EventsRepository",
    "ItemsRepository",
    "NpcsRepository",
    "RepositoryBase",
    "RoomsRepository",
]
