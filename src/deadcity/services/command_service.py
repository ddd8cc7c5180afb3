"""Exploring-mode command handlers."""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List

from deadcity.core.rng import RandomSource
from deadcity.domain.defs import ItemDef
from deadcity.domain.entities import EquippedItem
from deadcity.domain.state import GameState
from deadcity.services.command_parser import ARTICLES, DIRECTION_MAP, ParsedCommand
from deadcity.services.dialogue_service import DialogueService
from deadcity.services.escape_route_service import EscapeRouteService
from deadcity.services.inventory_service import InventoryService
from deadcity.services.results import CommandResult
from deadcity.services.survival_service import SurvivalService
from deadcity.services.world_service import WorldService

logger = logging.getLogger(__name__)

LOCKPICK_ITEM = "lockpick_set"
LOCKPICK_CHANCE = 0.6
CROWBAR_ITEM = "crowbar"
# locks that a pick cannot open
LOCKPICK_PROOF = frozenset({CROWBAR_ITEM, "lobby_barricade_key"})
PLANK_ITEM = "wooden_plank"
PLANKS_NEEDED = 2
MAP_ITEMS = ("hotel_map", "metro_map", "sewer_map")
LIGHT_SPECIALS = frozenset({"light_source", "dim_light"})
FLASHLIGHT_ITEM = "flashlight"
FLASHLIGHT_BATTERIES = "flashlight_batteries"
FLASHLIGHT_CHARGE = 50
MAX_WAIT_HOURS = 12
MIN_SLEEP_HOURS = 6

_TAKE_PREFIX = re.compile(r"^(take|pick\s+up|grab|get|collect)\s+", re.IGNORECASE)

HELP_LINES = (
    "=== DEAD CITY - COMMANDS ===",
    "",
    "MOVEMENT:  go [direction] or just north/south/east/west/n/s/e/w",
    "           upstairs/downstairs (or u/d)",
    "",
    "ACTIONS:   look (l) - examine surroundings",
    "           look [item/person] - examine something specific",
    "           search - search the area for hidden items",
    "           take [item] - pick up (use commas for multiple)",
    "           drop [item] - drop an item",
    "           use [item] - use/eat/drink an item",
    "           equip [weapon/armor] - equip a weapon or armor",
    "           unequip [item] - remove equipped item",
    "           inventory (i) - show what you're carrying",
    "",
    "INTERACT:  talk [person] - talk to someone",
    "           trade [person] - trade with someone",
    "           give [item] to [person] - give an item",
    "           unlock [direction] - unlock a locked exit",
    "           barricade - fortify current location (needs planks)",
    "",
    "COMBAT:    attack - strike the enemy",
    "           defend - reduce incoming damage",
    "           flee - attempt to escape",
    "           use [item] - use an item mid-combat",
    "",
    "SURVIVAL:  wait [hours] / rest / sleep - pass time and heal",
    "           status - check your vitals",
    "",
    "SYSTEM:    save [1-3] - save game",
    "           load [1-3] - load game",
    "           help (h) - show this list",
    "",
    "GOAL: Survive 30 days OR find one of 4 escape routes out of the city.",
    "      Explore, scavenge, fight, and stay alive.",
)

Handler = Callable[[ParsedCommand, GameState], CommandResult]


class CommandService:
    """Maps canonical verbs to world, inventory and survival actions."""

    def __init__(
        self,
        world: WorldService,
        inventory: InventoryService,
        survival: SurvivalService,
        escape_routes: EscapeRouteService,
        dialogue: DialogueService,
        rng: RandomSource,
    ) -> None:
        self._world = world
        self._inventory = inventory
        self._survival = survival
        self._escape_routes = escape_routes
        self._dialogue = dialogue
        self._rng = rng
        self._handlers: Dict[str, Handler] = {
            "go": self._go,
            "look": self._look,
            "search": self._search,
            "take": self._take,
            "drop": self._drop,
            "use": self.use,
            "equip": self._equip,
            "unequip": self._unequip,
            "inventory": self._inventory_list,
            "talk": self._talk,
            "trade": self._talk,
            "give": self._give,
            "wait": self._wait,
            "barricade": self._barricade,
            "open": self._unlock,
            "unlock": self._unlock,
            "close": self._close,
            "lock": self._lock,
            "status": self._status,
            "help": self._help,
            "map": self._map,
            "quit": self._quit,
            "attack": self._attack,
        }

    def execute(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        handler = self._handlers.get(cmd.verb or "")
        if handler is None:
            return CommandResult(messages=[f'You can\'t "{cmd.verb}" right now.'])
        return handler(cmd, state)

    # -----------------------
    # Room display
    # -----------------------

    def room_lines(self, state: GameState, entering: bool = False) -> List[str]:
        """Describe the player's room; entering counts as a visit."""
        room_id = state.current_location_id
        room = self._world.get_room(room_id)
        if room is None:
            return []
        first_visit = self._world.is_first_visit(room_id)
        if entering:
            self._world.mark_visited(room_id)

        lines = [room.name, self._world.describe_room(room_id, state.clock.hour, first_visit)]
        if room.light_level == "dark" and not self.has_light(state):
            lines.append("It is pitch dark. You can barely see. You need a light source.")

        item_ids = self._world.room_item_ids(room_id)
        if item_ids:
            lines.append(f"You can see: {self._group_items(item_ids)}")
        for npc in self._dialogue.npcs_in_room(room_id, state):
            lines.append(npc.presence_text or f"{npc.name} is here.")
        if room.notes and first_visit:
            lines.extend(["", room.notes])

        exit_lines = self._world.exit_lines(room_id)
        if exit_lines:
            lines.append("Exits:")
            lines.extend(exit_lines)
        return lines

    def has_light(self, state: GameState) -> bool:
        for item_id, _ in state.player.inventory.items():
            item_def = self._inventory.item_def(item_id)
            if item_def is not None and item_def.special & LIGHT_SPECIALS:
                return True
        return False

    def _group_items(self, item_ids: List[str]) -> str:
        counts: Dict[str, int] = {}
        for item_id in item_ids:
            counts[item_id] = counts.get(item_id, 0) + 1
        labels = []
        for item_id, count in counts.items():
            name = self._inventory.item_name(item_id)
            labels.append(f"{name} (x{count})" if count > 1 else name)
        return ", ".join(labels)

    # -----------------------
    # Movement and looking
    # -----------------------

    def _go(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        direction = cmd.noun
        if not direction:
            return CommandResult(
                messages=["Go where? Specify a direction (north, south, east, west, upstairs, downstairs)."]
            )
        room_id = state.current_location_id
        check = self._world.can_move(room_id, direction)
        messages: List[str] = []
        if not check.allowed:
            key = check.lock_requires
            if not (check.locked and key):
                return CommandResult(messages=[check.reason or "You can't go that way."])
            if not state.player.has_item(key):
                return CommandResult(messages=[f"The way is locked. You need a {self._inventory.item_name(key)}."])
            self._world.unlock_exit(room_id, direction)
            messages.append(f"You use the {self._inventory.item_name(key)} to unlock the way.")
            check = self._world.can_move(room_id, direction)
            if not check.allowed or check.room_id is None:
                return CommandResult(messages=messages)

        assert check.room_id is not None
        return self._move(check.room_id, state, messages)

    def _move(self, target_id: str, state: GameState, messages: List[str]) -> CommandResult:
        old_zone = self._world.zone_of(state.current_location_id)
        new_zone = self._world.zone_of(target_id)
        travel_time = 5
        if old_zone == "exterior" and new_zone == "exterior":
            travel_time = 15
        if "underground" in (old_zone, new_zone):
            travel_time = 10

        state.player.location_id = target_id
        logger.debug("Moved to %s (%d min)", target_id, travel_time)
        messages.extend(self.room_lines(state, entering=True))
        return CommandResult(messages=messages, time_elapsed=travel_time, moved=True)

    def _look(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun:
            return CommandResult(messages=self.room_lines(state))

        query = cmd.noun.lower()
        room_id = state.current_location_id
        for item_id in self._world.room_item_ids(room_id):
            name = self._inventory.item_name(item_id)
            if item_id == query or query in name.lower():
                item_def = self._inventory.item_def(item_id)
                description = item_def.description if item_def else ""
                return CommandResult(messages=[description or f"You see a {name}. Nothing special."])
        if state.player.has_item(query):
            item_def = self._inventory.item_def(query)
            return CommandResult(messages=[(item_def.description if item_def else "") or f"You examine the {query}."])
        for npc in self._dialogue.npcs_in_room(room_id, state):
            if npc.id == query or query in npc.name.lower():
                return CommandResult(messages=[npc.description or f"{npc.name} is here."])
        return CommandResult(messages=[f'You don\'t see "{cmd.noun}" here.'])

    def _search(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        room_id = state.current_location_id
        if self._world.is_searched(room_id):
            return CommandResult(messages=["You've already thoroughly searched this area."], time_elapsed=5)
        found = self._world.search_room(room_id)
        messages = ["You search the area carefully..."]
        if found:
            messages.append(f"You find: {', '.join(self._inventory.item_name(i) for i in found)}!")
        else:
            messages.append("You find nothing of interest.")
        return CommandResult(messages=messages, time_elapsed=10)

    # -----------------------
    # Items
    # -----------------------

    def _take(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun:
            return CommandResult(messages=["Take what?"])
        room_id = state.current_location_id

        if cmd.noun in ("all", "everything"):
            item_ids = self._world.room_item_ids(room_id)
            if not item_ids:
                return CommandResult(messages=["There is nothing here to take."])
            return self._combine(self._take_single(item_id, state) for item_id in item_ids)

        if "," in cmd.raw:
            names = [
                " ".join(word for word in chunk.split() if word.lower() not in ARTICLES)
                for chunk in _TAKE_PREFIX.sub("", cmd.raw).split(",")
            ]
            return self._combine(
                self._take_single(self._match_room_item(name, room_id), state) for name in names if name
            )
        return self._take_single(cmd.noun, state)

    def _match_room_item(self, name: str, room_id: str) -> str:
        lowered = name.lower()
        for item_id in self._world.room_item_ids(room_id):
            item_name = self._inventory.item_name(item_id).lower()
            if item_id == lowered or item_name == lowered or lowered in item_name:
                return item_id
        return name

    def _take_single(self, item_id: str, state: GameState) -> CommandResult:
        room_id = state.current_location_id
        if item_id not in self._world.room_item_ids(room_id):
            matched = self._match_room_item(item_id, room_id)
            if matched == item_id:
                return CommandResult(messages=[f'You don\'t see a "{item_id}" here.'])
            item_id = matched

        item_def = self._inventory.item_def(item_id)
        if item_def is None:
            return CommandResult(messages=["You can't take that."])
        player = state.player
        if not self._inventory.can_carry(player, item_id):
            return CommandResult(messages=["You are carrying too much. Drop something first."])

        self._world.remove_item(room_id, item_id)
        self._inventory.add(player, item_id)
        if item_def.type == "container" and item_def.carry_capacity:
            return CommandResult(
                messages=[f"You pick up the {item_def.name}. (+{item_def.carry_capacity:g}kg carry capacity)"],
                time_elapsed=2,
            )
        return CommandResult(messages=[f"You take the {item_def.name}."], time_elapsed=2)

    @staticmethod
    def _combine(results) -> CommandResult:
        combined = CommandResult()
        for result in results:
            combined.messages.extend(result.messages)
            combined.time_elapsed += result.time_elapsed
            combined.effects.extend(result.effects)
        return combined

    def _drop(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun:
            return CommandResult(messages=["Drop what?"])
        player = state.player
        item_id = self._inventory.find_carried(player, cmd.noun)
        if item_id is None:
            return CommandResult(messages=["You're not carrying that."])

        self._inventory.remove(player, item_id)
        self._world.add_item(state.current_location_id, item_id)
        if not player.has_item(item_id):
            if player.equipped_weapon and player.equipped_weapon.item_id == item_id:
                player.equipped_weapon = None
            if player.equipped_armor and player.equipped_armor.item_id == item_id:
                player.equipped_armor = None
        return CommandResult(messages=[f"You drop the {self._inventory.item_name(item_id)}."], time_elapsed=1)

    def use(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        """Use a carried item; also reachable from combat."""
        if not cmd.noun:
            return CommandResult(messages=["Use what?"])
        player = state.player
        item_id = self._inventory.find_carried(player, cmd.noun)
        if item_id is None:
            return CommandResult(messages=["You're not carrying that."])
        item_def = self._inventory.item_def(item_id)
        if item_def is None:
            return CommandResult(messages=["You can't use that."])

        if item_def.type in ("food", "water"):
            outcome = self._survival.eat(state, item_def)
            self._inventory.remove(player, item_id)
            return CommandResult.from_outcome(outcome, time_elapsed=5)
        if item_def.type == "medicine":
            outcome = self._survival.heal(state, item_def)
            self._inventory.remove(player, item_id)
            return CommandResult.from_outcome(outcome, time_elapsed=5)
        if item_id == FLASHLIGHT_BATTERIES:
            return self._replace_batteries(state)
        if item_id == CROWBAR_ITEM and cmd.modifier:
            return CommandResult(messages=["You wedge the crowbar into place and heave."], time_elapsed=10)

        climax = self._escape_routes.try_climax(state, item_id)
        if climax is not None:
            return climax
        if item_def.type == "quest":
            return CommandResult(
                messages=[f"You examine the {item_def.name}. You'll need to use it at the right location."]
            )
        return CommandResult(messages=[item_def.use_message or f"You use the {item_def.name}."], time_elapsed=5)

    def _replace_batteries(self, state: GameState) -> CommandResult:
        player = state.player
        if not player.has_item(FLASHLIGHT_ITEM):
            return CommandResult(messages=["You have no flashlight to put these in."], time_elapsed=2)
        weapon = player.equipped_weapon
        if weapon is not None and weapon.item_id == FLASHLIGHT_ITEM:
            weapon.current_durability = FLASHLIGHT_CHARGE
        self._inventory.remove(player, FLASHLIGHT_BATTERIES)
        return CommandResult(
            messages=["You replace the flashlight batteries. The beam strengthens."], time_elapsed=2
        )

    def _equip(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun:
            return CommandResult(messages=["Equip what?"])
        player = state.player
        item_id = self._inventory.find_carried(player, cmd.noun)
        if item_id is None:
            return CommandResult(messages=["You're not carrying that."])
        item_def = self._inventory.item_def(item_id)
        if item_def is None:
            return CommandResult(messages=["You can't equip that."])
        return CommandResult(messages=[self._equip_def(state, item_def)])

    @staticmethod
    def _equip_def(state: GameState, item_def: ItemDef) -> str:
        if item_def.is_weapon:
            state.player.equipped_weapon = EquippedItem.from_def(item_def)
            return f"You equip the {item_def.name}."
        if item_def.type == "armor":
            state.player.equipped_armor = EquippedItem.from_def(item_def)
            return f"You put on the {item_def.name}."
        return f"You can't equip the {item_def.name}."

    def _unequip(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        player = state.player
        weapon, armor = player.equipped_weapon, player.equipped_armor
        if not cmd.noun:
            messages = []
            if weapon is not None:
                messages.append(f"Weapon: {weapon.name}")
            if armor is not None:
                messages.append(f"Armor: {armor.name}")
            if not messages:
                messages.append("You have nothing equipped.")
            messages.append('Type "unequip [item]" to remove equipment.')
            return CommandResult(messages=messages)

        query = cmd.noun.lower()
        if weapon is not None and (weapon.item_id == query or query in weapon.name.lower()):
            player.equipped_weapon = None
            return CommandResult(messages=[f"You put away the {weapon.name}."])
        if armor is not None and (armor.item_id == query or query in armor.name.lower()):
            player.equipped_armor = None
            return CommandResult(messages=[f"You remove the {armor.name}."])
        return CommandResult(messages=["You don't have that equipped."])

    def _inventory_list(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        player = state.player
        carried = self._inventory.carried(player)
        if not carried:
            return CommandResult(messages=["You are carrying nothing."])

        messages = ["You are carrying:"]
        for item_id, quantity in carried:
            marker = ""
            if player.equipped_weapon and player.equipped_weapon.item_id == item_id:
                marker = " [EQUIPPED]"
            elif player.equipped_armor and player.equipped_armor.item_id == item_id:
                marker = " [WORN]"
            count = f" (x{quantity})" if quantity > 1 else ""
            weight = self._inventory.item_weight(item_id)
            messages.append(f"  {self._inventory.item_name(item_id)}{count} [{weight:g}kg]{marker}")
        messages.append(f"Weight: {player.current_weight:.1f}/{self._inventory.max_carry(player):g}kg")
        return CommandResult(messages=messages)

    # -----------------------
    # People
    # -----------------------

    def _talk(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        npcs = self._dialogue.npcs_in_room(state.current_location_id, state)
        if not npcs:
            return CommandResult(messages=["There is no one here to talk to."])
        npc = npcs[0]
        if cmd.noun:
            query = cmd.noun.lower()
            npc = next((n for n in npcs if n.id == query or query in n.name.lower()), npc)
        result = self._dialogue.start(npc.id, state)
        if result is None:
            return CommandResult(messages=[f"{npc.name} has nothing to say right now."])
        return result

    def _give(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun or not cmd.modifier:
            return CommandResult(messages=["Give what to whom? Try: give [item] to [person]"])
        query = cmd.modifier.lower()
        npcs = self._dialogue.npcs_in_room(state.current_location_id, state)
        npc = next((n for n in npcs if n.id == query or query in n.name.lower()), None)
        if npc is None:
            return CommandResult(messages=[f"You don't see {cmd.modifier} here."])

        player = state.player
        item_id = self._inventory.find_carried(player, cmd.noun)
        if item_id is None:
            return CommandResult(messages=["You're not carrying that."])
        result = self._dialogue.give(npc.id, item_id, state)
        if result is None:
            return CommandResult(messages=[f"{npc.name} doesn't want that."])
        self._inventory.remove(player, item_id)
        result.time_elapsed = 5
        return result

    # -----------------------
    # Time and fortification
    # -----------------------

    def _wait(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        hours = 1
        if cmd.noun and cmd.noun.isdigit() and 0 < int(cmd.noun) <= MAX_WAIT_HOURS:
            hours = int(cmd.noun)
        if "sleep" in cmd.raw:
            hours = max(hours, MIN_SLEEP_HOURS)
        room_id = state.current_location_id
        outcome = self._survival.rest(
            state, hours, self._world.zone_of(room_id), self._world.is_barricaded(room_id)
        )
        # rest advances the clock itself
        return CommandResult.from_outcome(outcome)

    def _barricade(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        room_id = state.current_location_id
        if not self._world.is_barricadeable(room_id):
            return CommandResult(messages=["You can't barricade this location."])
        if self._world.is_barricaded(room_id):
            return CommandResult(messages=["This location is already barricaded."])
        player = state.player
        if player.item_count(PLANK_ITEM) < PLANKS_NEEDED:
            return CommandResult(messages=["You need at least 2 wooden planks to barricade this area."])

        self._inventory.remove(player, PLANK_ITEM, PLANKS_NEEDED)
        self._world.set_barricaded(room_id, True)
        logger.info("Barricaded %s", room_id)
        return CommandResult(
            messages=[
                "You nail the planks across the entrance, reinforcing the barriers.",
                "This area is now barricaded. Zombies are less likely to get in.",
                "You can rest more safely here.",
            ],
            time_elapsed=30,
        )

    def _unlock(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not cmd.noun:
            return CommandResult(messages=["Unlock what? Specify a direction."])
        direction = DIRECTION_MAP.get(cmd.noun, cmd.noun)
        room_id = state.current_location_id
        exit_def = self._world.exits(room_id).get(direction)
        if exit_def is None:
            return CommandResult(messages=["There's nothing to unlock in that direction."])
        if not self._world.is_exit_locked(room_id, direction):
            return CommandResult(messages=["It's not locked."])

        requirement = exit_def.lock_requires
        if not requirement:
            return CommandResult(messages=["It's locked and you don't have the right tool to open it."])
        player = state.player
        if player.has_item(requirement):
            self._world.unlock_exit(room_id, direction)
            return CommandResult(
                messages=[f"You use the {self._inventory.item_name(requirement)} to unlock the way."],
                time_elapsed=2,
            )
        if player.has_item(LOCKPICK_ITEM) and requirement not in LOCKPICK_PROOF:
            if self._rng.random() < LOCKPICK_CHANCE:
                self._world.unlock_exit(room_id, direction)
                return CommandResult(
                    messages=["You work the lockpick carefully... *click*. It's open."], time_elapsed=10
                )
            return CommandResult(
                messages=["You fumble with the lockpick but can't get it open. Try again?"], time_elapsed=5
            )
        if requirement == CROWBAR_ITEM and player.has_item(CROWBAR_ITEM):
            self._world.unlock_exit(room_id, direction)
            return CommandResult(
                messages=["You wedge the crowbar in and heave. The grate gives way with a screech of rusted metal."],
                time_elapsed=10,
            )
        return CommandResult(messages=[f"It's locked. You need a {self._inventory.item_name(requirement)}."])

    @staticmethod
    def _close(cmd: ParsedCommand, state: GameState) -> CommandResult:
        return CommandResult(messages=["You close it."], time_elapsed=1)

    @staticmethod
    def _lock(cmd: ParsedCommand, state: GameState) -> CommandResult:
        return CommandResult(messages=["You don't have a way to lock that."])

    # -----------------------
    # Information
    # -----------------------

    def _status(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        lines = self._survival.status_lines(state)
        lines.extend(["", "=== ESCAPE ROUTES ==="])
        lines.extend(self._escape_routes.status_lines(state))
        return CommandResult(messages=lines)

    @staticmethod
    def _help(cmd: ParsedCommand, state: GameState) -> CommandResult:
        return CommandResult(messages=list(HELP_LINES))

    def _map(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        if not any(state.player.has_item(item_id) for item_id in MAP_ITEMS):
            return CommandResult(messages=["You don't have a map. Find one to see your surroundings."])
        room_id = state.current_location_id
        room = self._world.get_room(room_id)
        messages = [f"Current location: {room.name if room else room_id}", "Nearby:"]
        for direction, exit_def in self._world.exits(room_id).items():
            target = self._world.get_room(exit_def.room_id)
            lock = " [LOCKED]" if self._world.is_exit_locked(room_id, direction) else ""
            messages.append(f"  {direction}: {target.name if target else exit_def.room_id}{lock}")
        return CommandResult(messages=messages)

    @staticmethod
    def _quit(cmd: ParsedCommand, state: GameState) -> CommandResult:
        return CommandResult(messages=["There is no quitting. Only survival."])

    @staticmethod
    def _attack(cmd: ParsedCommand, state: GameState) -> CommandResult:
        return CommandResult(
            messages=["There's nothing to attack here. (Encounters happen when you explore.)"]
        )
