"""Runtime room state layered over the static room definitions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from deadcity.data.repositories import RoomsRepository
from deadcity.domain.clock import time_of_day
from deadcity.domain.defs import RoomDef

logger = logging.getLogger(__name__)

WorldSnapshot = Dict[str, Dict[str, Any]]


@dataclass(slots=True)
class RoomState:
    """Everything about a room that changes during play."""

    items: List[str] = field(default_factory=list)
    search_items: List[str] = field(default_factory=list)
    searched: bool = False
    barricaded: bool = False
    exit_locks: Dict[str, bool] = field(default_factory=dict)
    visit_count: int = 0


@dataclass(slots=True)
class MoveCheck:
    allowed: bool
    room_id: str | None = None
    reason: str | None = None
    locked: bool = False
    lock_requires: str | None = None


class WorldService:
    """Sole owner of room runtime mutation."""

    def __init__(self, rooms_repo: RoomsRepository) -> None:
        self._rooms_repo = rooms_repo
        self._states: Dict[str, RoomState] = {}

    def reset(self) -> None:
        """Forget every runtime change; rooms revert to their definitions."""
        self._states = {}

    def get_room(self, room_id: str) -> RoomDef | None:
        return self._rooms_repo.find(room_id)

    def room_state(self, room_id: str) -> RoomState:
        state = self._states.get(room_id)
        if state is None:
            state = self._initial_state(room_id)
            self._states[room_id] = state
        return state

    def _initial_state(self, room_id: str) -> RoomState:
        room = self._rooms_repo.find(room_id)
        if room is None:
            return RoomState()
        return RoomState(
            items=list(room.items),
            search_items=list(room.search_items),
            barricaded=room.barricaded,
            exit_locks={direction: exit_def.locked for direction, exit_def in room.exits.items()},
        )

    def zone_of(self, room_id: str) -> str:
        room = self.get_room(room_id)
        return room.zone if room else "unknown"

    # -----------------------
    # Items
    # -----------------------

    def room_item_ids(self, room_id: str) -> List[str]:
        return list(self.room_state(room_id).items)

    def add_item(self, room_id: str, item_id: str) -> bool:
        if self.get_room(room_id) is None:
            return False
        self.room_state(room_id).items.append(item_id)
        return True

    def remove_item(self, room_id: str, item_id: str) -> bool:
        items = self.room_state(room_id).items
        if item_id not in items:
            return False
        items.remove(item_id)
        return True

    def is_searched(self, room_id: str) -> bool:
        return self.room_state(room_id).searched

    def search_room(self, room_id: str) -> List[str]:
        """Reveal the hidden items once; later searches find nothing."""
        state = self.room_state(room_id)
        if state.searched:
            return []
        state.searched = True
        found = list(state.search_items)
        state.items.extend(found)
        return found

    # -----------------------
    # Exits and fortification
    # -----------------------

    def exits(self, room_id: str) -> Dict[str, Any]:
        room = self.get_room(room_id)
        return dict(room.exits) if room else {}

    def is_exit_locked(self, room_id: str, direction: str) -> bool:
        return self.room_state(room_id).exit_locks.get(direction, False)

    def can_move(self, room_id: str, direction: str) -> MoveCheck:
        room = self.get_room(room_id)
        exit_def = room.exits.get(direction) if room else None
        if exit_def is None:
            return MoveCheck(allowed=False, reason="There is no exit in that direction.")
        if self.is_exit_locked(room_id, direction):
            return MoveCheck(
                allowed=False,
                reason="The way is locked.",
                locked=True,
                lock_requires=exit_def.lock_requires,
            )
        return MoveCheck(allowed=True, room_id=exit_def.room_id)

    def unlock_exit(self, room_id: str, direction: str) -> bool:
        room = self.get_room(room_id)
        if room is None or direction not in room.exits:
            return False
        self.room_state(room_id).exit_locks[direction] = False
        logger.debug("Unlocked %s exit of %s", direction, room_id)
        return True

    def is_barricadeable(self, room_id: str) -> bool:
        room = self.get_room(room_id)
        return bool(room and room.barricadeable)

    def is_barricaded(self, room_id: str) -> bool:
        return self.room_state(room_id).barricaded

    def set_barricaded(self, room_id: str, value: bool) -> None:
        self.room_state(room_id).barricaded = value

    # -----------------------
    # Visits and descriptions
    # -----------------------

    def mark_visited(self, room_id: str) -> None:
        self.room_state(room_id).visit_count += 1

    def is_first_visit(self, room_id: str) -> bool:
        if self.get_room(room_id) is None:
            return False
        return self.room_state(room_id).visit_count == 0

    def describe_room(self, room_id: str, hour: int, first_visit: bool) -> str:
        room = self.get_room(room_id)
        if room is None:
            return "You see nothing. This place doesn't exist."
        description = room.description
        if first_visit and description.first_visit:
            return description.first_visit
        if time_of_day(hour) == "night" and description.night:
            return description.night
        if self.is_searched(room_id) and description.searched:
            return description.searched
        return description.default

    def exit_lines(self, room_id: str) -> List[str]:
        room = self.get_room(room_id)
        if room is None:
            return []
        lines = []
        for direction, exit_def in room.exits.items():
            lock = " [LOCKED]" if self.is_exit_locked(room_id, direction) else ""
            lines.append(f"  {direction}: {exit_def.description}{lock}")
        return lines

    # -----------------------
    # Persistence
    # -----------------------

    def snapshot(self) -> WorldSnapshot:
        """Return the runtime state of every room that has been touched."""
        return {
            room_id: {
                "items": list(state.items),
                "search_items": list(state.search_items),
                "searched": state.searched,
                "barricaded": state.barricaded,
                "visit_count": state.visit_count,
                "exit_locks": dict(state.exit_locks),
            }
            for room_id, state in self._states.items()
        }

    def restore(self, snapshot: Mapping[str, Mapping[str, Any]]) -> None:
        """Replace runtime state; rooms absent from the snapshot revert to defaults."""
        states: Dict[str, RoomState] = {}
        for room_id, data in snapshot.items():
            if self.get_room(room_id) is None:
                logger.warning("Ignoring saved state for unknown room %s", room_id)
                continue
            state = self._initial_state(room_id)
            state.items = list(data.get("items", state.items))
            state.search_items = list(data.get("search_items", state.search_items))
            state.searched = bool(data.get("searched", False))
            state.barricaded = bool(data.get("barricaded", state.barricaded))
            state.visit_count = int(data.get("visit_count", 0))
            for direction, locked in dict(data.get("exit_locks", {})).items():
                if direction in state.exit_locks:
                    state.exit_locks[direction] = bool(locked)
            states[room_id] = state
        self._states = states
