"""Serialization helpers for manual save/load."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from deadcity.core.rng import RNG, RNGStatePayload
from deadcity.core.types import GameMode
from deadcity.data.repositories import EscapeRoutesRepository, ItemsRepository, RoomsRepository
from deadcity.domain.clock import Clock
from deadcity.domain.entities import EquippedItem, Player
from deadcity.domain.inventory import Inventory
from deadcity.domain.state import MAX_ALERT, MIN_ALERT, GameState, RouteProgress
from deadcity.services.errors import SaveLoadError
from deadcity.services.event_service import EventMemory
from deadcity.services.world_service import WorldService, WorldSnapshot

SavePayload = Dict[str, Any]
_VALID_MODES: tuple[GameMode, ...] = ("exploring", "game_over", "victory")
# transient modes never survive a save
_TRANSIENT_MODES: tuple[GameMode, ...] = ("combat", "dialogue")


@dataclass(slots=True)
class LoadedGame:
    state: GameState
    world: WorldSnapshot
    memory: EventMemory
    rng: RNG


class SaveService:
    """Converts runtime state to/from a validated, versioned payload."""

    SAVE_VERSION = 1

    def __init__(
        self,
        *,
        items_repo: ItemsRepository,
        rooms_repo: RoomsRepository,
        escape_routes_repo: EscapeRoutesRepository,
    ) -> None:
        self._items_repo = items_repo
        self._rooms_repo = rooms_repo
        self._escape_routes_repo = escape_routes_repo

    def serialize(self, state: GameState, world: WorldService, memory: EventMemory, rng: RNG) -> SavePayload:
        """Return a JSON-serializable payload for disk persistence."""
        return {
            "save_version": self.SAVE_VERSION,
            "metadata": self._build_metadata(state),
            "rng": rng.export_state(),
            "state": self._serialize_state(state),
            "world": world.snapshot(),
            "events": {
                "fired": sorted(memory.fired),
                "last_random_check": memory.last_random_check,
            },
        }

    def deserialize(self, payload: Mapping[str, Any]) -> LoadedGame:
        """Rehydrate a GameState, world snapshot, event memory and RNG."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        if payload.get("save_version") != self.SAVE_VERSION:
            raise SaveLoadError("Save format changed. Please start a new game.")
        rng_payload = payload.get("rng")
        state_payload = payload.get("state")
        if not isinstance(rng_payload, Mapping) or not isinstance(state_payload, Mapping):
            raise SaveLoadError("Save data is missing required sections.")

        rng = RNG(self._require_int(rng_payload.get("seed"), "rng.seed"))
        try:
            rng.restore_state(self._coerce_rng_payload(rng_payload))
        except ValueError as exc:
            raise SaveLoadError(f"Invalid RNG state: {exc}") from exc

        state = GameState(
            player=self._coerce_player(state_payload.get("player")),
            mode=self._require_mode(state_payload.get("mode")),
            clock=self._coerce_clock(state_payload.get("clock")),
            alert_level=self._coerce_alert(state_payload.get("alert_level")),
            escape_progress=self._coerce_escape_progress(state_payload.get("escape_progress")),
            ending=self._coerce_optional_str(state_payload.get("ending"), "state.ending"),
        )
        return LoadedGame(
            state=state,
            world=self._coerce_world(payload.get("world")),
            memory=self._coerce_memory(payload.get("events")),
            rng=rng,
        )

    def _build_metadata(self, state: GameState) -> Dict[str, Any]:
        room = self._rooms_repo.find(state.current_location_id)
        return {
            "day": state.clock.day,
            "time": f"{state.clock.hour:02d}:{state.clock.minute:02d}",
            "location_id": state.current_location_id,
            "location_name": room.name if room else state.current_location_id,
            "health": state.player.health,
            "kills": state.player.kills,
            "saved_at": datetime.now(timezone.utc).isoformat(),
        }

    def _serialize_state(self, state: GameState) -> Dict[str, Any]:
        mode = "exploring" if state.mode in _TRANSIENT_MODES else state.mode
        return {
            "mode": mode,
            "clock": {"day": state.clock.day, "hour": state.clock.hour, "minute": state.clock.minute},
            "alert_level": state.alert_level,
            "player": self._serialize_player(state.player),
            "escape_progress": {
                route_id: {"discovered": progress.discovered, "completed_steps": progress.completed_steps}
                for route_id, progress in state.escape_progress.items()
            },
            "ending": state.ending,
        }

    @staticmethod
    def _serialize_player(player: Player) -> Dict[str, Any]:
        weapon = player.equipped_weapon
        armor = player.equipped_armor
        return {
            "location_id": player.location_id,
            "health": player.health,
            "max_health": player.max_health,
            "hunger": player.hunger,
            "thirst": player.thirst,
            "max_weight": player.max_weight,
            "inventory": dict(player.inventory.quantities),
            "equipped_weapon": (
                {"item_id": weapon.item_id, "current_durability": weapon.current_durability} if weapon else None
            ),
            "equipped_armor": {"item_id": armor.item_id} if armor else None,
            "companions": sorted(player.companions),
            "quest_flags": sorted(player.quest_flags),
            "kills": player.kills,
            "infected": player.infected,
        }

    # -----------------------
    # Coercion
    # -----------------------

    def _coerce_rng_payload(self, payload: Mapping[str, Any]) -> RNGStatePayload:
        version = self._require_int(payload.get("version"), "rng.version")
        internal = payload.get("internal")
        if not isinstance(internal, list):
            raise SaveLoadError("Invalid RNG state payload.")
        return {"version": version, "internal": internal, "gauss_next": payload.get("gauss_next")}

    def _require_mode(self, value: Any) -> GameMode:
        if value in _TRANSIENT_MODES:
            return "exploring"
        if value not in _VALID_MODES:
            raise SaveLoadError(f"Invalid mode value: {value}")
        return value

    def _coerce_clock(self, value: Any) -> Clock:
        mapping = self._require_dict(value, "state.clock")
        day = self._require_int(mapping.get("day"), "state.clock.day")
        hour = self._require_int(mapping.get("hour"), "state.clock.hour")
        minute = self._require_int(mapping.get("minute"), "state.clock.minute")
        if day < 1 or not 0 <= hour <= 23 or not 0 <= minute <= 59:
            raise SaveLoadError("state.clock is out of range.")
        return Clock(day=day, hour=hour, minute=minute)

    def _coerce_alert(self, value: Any) -> float:
        alert = self._require_number(value, "state.alert_level")
        if not MIN_ALERT <= alert <= MAX_ALERT:
            raise SaveLoadError("state.alert_level is out of range.")
        return alert

    def _coerce_player(self, value: Any) -> Player:
        mapping = self._require_dict(value, "state.player")
        location_id = self._require_str(mapping.get("location_id"), "state.player.location_id")
        if self._rooms_repo.find(location_id) is None:
            raise SaveLoadError(f"Save references unknown location: {location_id}")

        player = Player(location_id=location_id)
        player.max_health = self._coerce_stat(mapping.get("max_health"), "state.player.max_health", 1, 10_000)
        player.health = self._coerce_stat(mapping.get("health"), "state.player.health", 0, player.max_health)
        player.hunger = self._coerce_stat(mapping.get("hunger"), "state.player.hunger", 0, 100)
        player.thirst = self._coerce_stat(mapping.get("thirst"), "state.player.thirst", 0, 100)
        player.max_weight = self._require_number(mapping.get("max_weight"), "state.player.max_weight")
        player.inventory = self._coerce_inventory(mapping.get("inventory"))
        player.equipped_weapon = self._coerce_equipped(mapping.get("equipped_weapon"), "state.player.equipped_weapon")
        player.equipped_armor = self._coerce_equipped(mapping.get("equipped_armor"), "state.player.equipped_armor")
        player.companions = set(self._coerce_str_list(mapping.get("companions"), "state.player.companions"))
        player.quest_flags = set(self._coerce_str_list(mapping.get("quest_flags"), "state.player.quest_flags"))
        player.kills = self._coerce_stat(mapping.get("kills"), "state.player.kills", 0, None)
        infected = mapping.get("infected", False)
        if not isinstance(infected, bool):
            raise SaveLoadError("state.player.infected must be a boolean.")
        player.infected = infected
        return player

    def _coerce_stat(self, value: Any, context: str, low: int, high: int | None) -> int:
        value_int = self._require_int(value, context)
        if value_int < low or (high is not None and value_int > high):
            raise SaveLoadError(f"{context} is out of range.")
        return value_int

    def _coerce_inventory(self, value: Any) -> Inventory:
        mapping = self._require_dict(value, "state.player.inventory")
        inventory = Inventory()
        for item_id, quantity in mapping.items():
            item_def = self._items_repo.find(item_id)
            if item_def is None:
                raise SaveLoadError(f"Save references unknown item: {item_id}")
            count = self._require_int(quantity, f"state.player.inventory.{item_id}")
            if count <= 0:
                raise SaveLoadError(f"state.player.inventory.{item_id} must be positive.")
            inventory.add(item_id, item_def.weight, count)
        return inventory

    def _coerce_equipped(self, value: Any, context: str) -> EquippedItem | None:
        if value is None:
            return None
        mapping = self._require_dict(value, context)
        item_id = self._require_str(mapping.get("item_id"), f"{context}.item_id")
        item_def = self._items_repo.find(item_id)
        if item_def is None:
            raise SaveLoadError(f"Save references unknown item: {item_id}")
        equipped = EquippedItem.from_def(item_def)
        if "current_durability" in mapping:
            equipped.current_durability = self._require_int(
                mapping.get("current_durability"), f"{context}.current_durability"
            )
        return equipped

    def _coerce_escape_progress(self, value: Any) -> Dict[str, RouteProgress]:
        mapping = self._require_dict(value, "state.escape_progress")
        progress: Dict[str, RouteProgress] = {route.id: RouteProgress() for route in self._escape_routes_repo.ordered()}
        for route_id, entry in mapping.items():
            if route_id not in progress:
                raise SaveLoadError(f"Save references unknown escape route: {route_id}")
            entry_map = self._require_dict(entry, f"state.escape_progress.{route_id}")
            discovered = entry_map.get("discovered")
            if not isinstance(discovered, bool):
                raise SaveLoadError(f"state.escape_progress.{route_id}.discovered must be a boolean.")
            steps = self._coerce_stat(
                entry_map.get("completed_steps"), f"state.escape_progress.{route_id}.completed_steps", 0, None
            )
            progress[route_id] = RouteProgress(discovered=discovered, completed_steps=steps)
        return progress

    def _coerce_world(self, value: Any) -> WorldSnapshot:
        mapping = self._require_dict(value, "world")
        snapshot: WorldSnapshot = {}
        for room_id, entry in mapping.items():
            if self._rooms_repo.find(room_id) is None:
                raise SaveLoadError(f"Save references unknown room: {room_id}")
            context = f"world.{room_id}"
            room_map = self._require_dict(entry, context)
            locks = self._require_dict(room_map.get("exit_locks", {}), f"{context}.exit_locks")
            if not all(isinstance(flag, bool) for flag in locks.values()):
                raise SaveLoadError(f"{context}.exit_locks values must be booleans.")
            snapshot[room_id] = {
                "items": self._coerce_str_list(room_map.get("items"), f"{context}.items"),
                "search_items": self._coerce_str_list(room_map.get("search_items"), f"{context}.search_items"),
                "searched": bool(room_map.get("searched", False)),
                "barricaded": bool(room_map.get("barricaded", False)),
                "visit_count": self._coerce_stat(room_map.get("visit_count", 0), f"{context}.visit_count", 0, None),
                "exit_locks": locks,
            }
        return snapshot

    def _coerce_memory(self, value: Any) -> EventMemory:
        mapping = self._require_dict(value, "events")
        fired = self._coerce_str_list(mapping.get("fired"), "events.fired")
        last_check = self._coerce_stat(mapping.get("last_random_check", 0), "events.last_random_check", 0, None)
        return EventMemory(fired=set(fired), last_random_check=last_check)

    @staticmethod
    def _require_str(value: Any, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_int(value: Any, context: str) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise SaveLoadError(f"{context} must be an integer.")
        return value

    @staticmethod
    def _require_number(value: Any, context: str) -> float:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise SaveLoadError(f"{context} must be a number.")
        return float(value)

    def _coerce_optional_str(self, value: Any, context: str) -> str | None:
        if value is None:
            return None
        return self._require_str(value, context)

    def _coerce_str_list(self, value: Any, context: str) -> List[str]:
        if value is None:
            return []
        if not isinstance(value, list):
            raise SaveLoadError(f"{context} must be a list.")
        result: List[str] = []
        for entry in value:
            if not isinstance(entry, str):
                raise SaveLoadError(f"{context} entries must be strings.")
            result.append(entry)
        return result

    @staticmethod
    def _require_dict(value: Any, context: str) -> Dict[str, Any]:
        if not isinstance(value, Mapping):
            raise SaveLoadError(f"{context} must be an object.")
        return dict(value)
