"""Session orchestrator: owns the game state and runs the per-command pipeline."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from deadcity.core.rng import RNG, RandomSource
from deadcity.core.types import TERMINAL_MODES, GameMode
from deadcity.data.repositories import (
    EnemiesRepository,
    EscapeRoutesRepository,
    EventsRepository,
    ItemsRepository,
    NpcsRepository,
    RoomsRepository,
)
from deadcity.domain.clock import spawn_multiplier
from deadcity.domain.effects import (
    BreakWeapon,
    DamagePlayer,
    DialogueEnded,
    DialogueStarted,
    Effect,
    EnemyDied,
    EscapeVictory,
    Outcome,
    PlayerDied,
    RaiseAlert,
    SurvivalVictory,
)
from deadcity.domain.entities import EnemyInstance, Player
from deadcity.domain.state import CombatSession, GameState
from deadcity.services.combat_service import CombatService
from deadcity.services.command_parser import CommandParser, ExitRef, NamedRef, ParsedCommand, ParserContext
from deadcity.services.command_service import CommandService
from deadcity.services.dialogue_service import DialogueService
from deadcity.services.errors import SaveLoadError
from deadcity.services.escape_route_service import EscapeRouteService
from deadcity.services.event_service import EventMemory, EventService
from deadcity.services.inventory_service import InventoryService
from deadcity.services.save_service import SaveService
from deadcity.services.survival_service import SurvivalService
from deadcity.services.world_service import WorldService

logger = logging.getLogger(__name__)

START_ROOM_ID = "room_302"
COMBAT_ROUND_MINUTES = 5
RESTART_WORDS = ("restart", "new")
UNKNOWN_INPUT = "I don't understand that. Type 'help' for a list of commands."
COMBAT_HINT = "In combat you can: attack, defend, flee, use [item], or check inventory."

_DEATH_LINES = (
    "Your vision fades. The cold stone of Paris is the last thing you feel.",
    "You collapse. The city claims another soul.",
    "The darkness takes you. Paris remains, silent and dead.",
    "Your story ends here, in the city of lights gone dark.",
    "You fall. The zombies descend. It is over.",
)
_BANNER = "========================================"


class SlotStorage(Protocol):
    """What the session needs from a save-slot backend."""

    @property
    def slot_count(self) -> int:
        ...

    def slot_exists(self, slot: int) -> bool:
        ...

    def read_slot(self, slot: int) -> Dict[str, Any]:
        ...

    def write_slot(self, slot: int, payload: Dict[str, Any]) -> None:
        ...

    def list_slots(self) -> Sequence[Any]:
        ...


@dataclass(slots=True)
class TurnResult:
    messages: List[str] = field(default_factory=list)
    mode: GameMode = "exploring"


@dataclass(slots=True)
class GameServices:
    """Repositories and services shared by one session."""

    items_repo: ItemsRepository
    rooms_repo: RoomsRepository
    enemies_repo: EnemiesRepository
    npcs_repo: NpcsRepository
    events_repo: EventsRepository
    escape_routes_repo: EscapeRoutesRepository
    rng: RandomSource
    world: WorldService
    inventory: InventoryService
    survival: SurvivalService
    combat: CombatService
    events: EventService
    escape_routes: EscapeRouteService
    dialogue: DialogueService
    commands: CommandService
    saves: SaveService
    parser: CommandParser

    @classmethod
    def build(cls, rng: RandomSource | None = None, base_path: Path | str | None = None) -> "GameServices":
        """Wire every repository and service against one random source."""
        rng = rng if rng is not None else RNG(0)
        items_repo = ItemsRepository(base_path)
        rooms_repo = RoomsRepository(base_path)
        enemies_repo = EnemiesRepository(base_path)
        npcs_repo = NpcsRepository(base_path)
        events_repo = EventsRepository(base_path)
        escape_routes_repo = EscapeRoutesRepository(base_path)

        world = WorldService(rooms_repo)
        inventory = InventoryService(items_repo)
        survival = SurvivalService(rng)
        escape_routes = EscapeRouteService(escape_routes_repo, rooms_repo)
        dialogue = DialogueService(npcs_repo, inventory)
        return cls(
            items_repo=items_repo,
            rooms_repo=rooms_repo,
            enemies_repo=enemies_repo,
            npcs_repo=npcs_repo,
            events_repo=events_repo,
            escape_routes_repo=escape_routes_repo,
            rng=rng,
            world=world,
            inventory=inventory,
            survival=survival,
            combat=CombatService(enemies_repo, rng),
            events=EventService(events_repo, world, EventMemory(), rng),
            escape_routes=escape_routes,
            dialogue=dialogue,
            commands=CommandService(world, inventory, survival, escape_routes, dialogue, rng),
            saves=SaveService(
                items_repo=items_repo,
                rooms_repo=rooms_repo,
                escape_routes_repo=escape_routes_repo,
            ),
            parser=CommandParser(),
        )


class GameSession:
    """Owns the GameState and applies one command at a time in a fixed order."""

    def __init__(self, services: GameServices, slot_store: SlotStorage | None = None) -> None:
        self._services = services
        self._slot_store = slot_store
        self._state = self._fresh_state()

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def mode(self) -> GameMode:
        return self._state.mode

    @property
    def services(self) -> GameServices:
        return self._services

    @property
    def slot_store(self) -> SlotStorage | None:
        return self._slot_store

    def new_game(self, seed: int | None = None) -> List[str]:
        """Start over in the starting room; returns the opening room description."""
        services = self._services
        if seed is not None and isinstance(services.rng, RNG):
            services.rng.reseed(seed)
        services.world.reset()
        services.dialogue.reset()
        memory = services.events.memory
        memory.fired = set()
        memory.last_random_check = 0
        self._state = self._fresh_state()
        logger.info("New game started (seed=%s)", seed)
        return services.commands.room_lines(self._state, entering=True)

    def _fresh_state(self) -> GameState:
        return GameState(
            player=Player(location_id=START_ROOM_ID),
            escape_progress=self._services.escape_routes.initial_progress(),
        )

    # -----------------------
    # Pipeline
    # -----------------------

    def process(self, raw: str) -> TurnResult:
        """Resolve one line of player input."""
        state = self._state
        if state.mode in TERMINAL_MODES:
            if raw.strip().lower() in RESTART_WORDS:
                return TurnResult(messages=self.new_game(), mode=self._state.mode)
            return TurnResult(mode=state.mode)

        cmd = self._services.parser.parse(raw, self.build_context())

        if state.mode == "dialogue":
            result = self._services.dialogue.handle_input(cmd, state)
            messages = list(result.messages)
            if not self._apply_effects(result.effects, messages):
                self._advance(messages, 0, moved=False)
            return TurnResult(messages=messages, mode=state.mode)

        if not cmd.recognized:
            return TurnResult(messages=[UNKNOWN_INPUT], mode=state.mode)

        if state.mode == "combat":
            return self._combat_turn(cmd)

        if cmd.verb == "save":
            return TurnResult(messages=self._save_command(cmd), mode=state.mode)
        if cmd.verb == "load":
            messages = self._load_command(cmd)
            return TurnResult(messages=messages, mode=self._state.mode)

        result = self._services.commands.execute(cmd, state)
        messages = list(result.messages)
        if not self._apply_effects(result.effects, messages):
            self._advance(messages, result.time_elapsed, result.moved)
        return TurnResult(messages=messages, mode=state.mode)

    def _advance(self, messages: List[str], minutes: int, moved: bool) -> bool:
        """Run the post-action pipeline; returns True once the session has ended."""
        services = self._services
        state = self._state

        if minutes > 0:
            tick = services.survival.tick(state, minutes)
            messages.extend(tick.messages)
            if self._apply_effects(tick.effects, messages):
                return True

        events = services.events.check(state)
        messages.extend(events.messages)
        if self._apply_effects(events.effects, messages):
            return True

        progress = services.escape_routes.check(state)
        messages.extend(progress.messages)
        if self._apply_effects(progress.effects, messages):
            return True

        if moved and state.mode == "exploring":
            self._check_encounter(messages)

        if state.player.health <= 0:
            self._game_over(messages)
            return True
        return False

    def _apply_effects(self, effects: Sequence[Effect], messages: List[str]) -> bool:
        """Apply typed effects in order; returns True when one ended the session."""
        state = self._state
        player = state.player
        for effect in effects:
            if isinstance(effect, DamagePlayer):
                player.damage(effect.amount)
            elif isinstance(effect, BreakWeapon):
                player.equipped_weapon = None
            elif isinstance(effect, RaiseAlert):
                state.raise_alert(effect.amount)
            elif isinstance(effect, EnemyDied):
                player.kills += effect.count
                if state.mode == "combat":
                    state.set_mode("exploring")
            elif isinstance(effect, DialogueStarted):
                state.set_mode("dialogue")
            elif isinstance(effect, DialogueEnded):
                if state.mode == "dialogue":
                    state.set_mode("exploring")
            elif isinstance(effect, PlayerDied):
                self._game_over(messages)
                return True
            elif isinstance(effect, SurvivalVictory):
                self._survival_victory(messages)
                return True
            elif isinstance(effect, EscapeVictory):
                self._escape_victory(effect.route_id, messages)
                return True
        return False

    def build_context(self) -> ParserContext:
        """Vocabulary for the parser: room and carried items, exits and people present."""
        services = self._services
        state = self._state
        room_id = state.current_location_id
        item_ids = services.world.room_item_ids(room_id) + [item_id for item_id, _ in state.player.inventory.items()]
        items = [NamedRef(id=item_id, name=services.inventory.item_name(item_id)) for item_id in item_ids]
        exits = {
            direction: ExitRef(room_id=exit_def.room_id, description=exit_def.description)
            for direction, exit_def in services.world.exits(room_id).items()
        }
        npcs = [NamedRef(id=npc.id, name=npc.name) for npc in services.dialogue.npcs_in_room(room_id, state)]
        return ParserContext(items=items, exits=exits, npcs=npcs)

    # -----------------------
    # Combat
    # -----------------------

    def _check_encounter(self, messages: List[str]) -> None:
        services = self._services
        state = self._state
        room_id = state.current_location_id
        room = services.world.get_room(room_id)
        if room is None:
            return
        enemy = services.combat.try_spawn_encounter(
            room,
            services.world.is_barricaded(room_id),
            state.alert_level,
            spawn_multiplier(state.clock.hour),
        )
        if enemy is not None:
            self._start_combat(enemy, messages)

    def _start_combat(self, enemy: EnemyInstance, messages: List[str]) -> None:
        combat = self._services.combat
        self._state.set_mode("combat", CombatSession(enemy=enemy))
        logger.info("Combat started against %s", enemy.name)
        messages.extend(["", "=== COMBAT ===", combat.encounter_intro(enemy)])
        if enemy.description:
            messages.append(enemy.description)
        messages.extend(["", combat.combat_prompt(enemy)])
        if self._state.player.equipped_weapon is None:
            messages.append("You have no weapon equipped! Use 'equip [weapon]' or fight with bare hands.")

    def _combat_turn(self, cmd: ParsedCommand) -> TurnResult:
        services = self._services
        state = self._state
        session = state.combat
        if session is None:
            state.set_mode("exploring")
            return TurnResult(mode=state.mode)
        enemy = session.enemy
        player = state.player
        session.round_count += 1
        session.is_defending = False

        outcome = Outcome()
        fight_over = False
        if cmd.verb == "attack":
            outcome.extend(services.combat.player_attack(enemy, player.equipped_weapon, bool(player.companions)))
            if enemy.is_alive:
                outcome.extend(services.combat.enemy_attack(enemy, player.equipped_armor, defending=False))
            else:
                fight_over = True
        elif cmd.verb == "defend":
            session.is_defending = True
            outcome.say("You brace yourself and prepare to defend.")
            outcome.extend(services.combat.enemy_attack(enemy, player.equipped_armor, defending=True))
        elif cmd.verb in ("flee", "go"):
            flee = services.combat.try_flee(enemy, player.hunger, player.equipped_armor)
            outcome.extend(flee.outcome)
            if flee.success:
                fight_over = True
                outcome.say("You escape the fight!")
        elif cmd.verb == "use":
            used = services.commands.use(cmd, state)
            outcome.say(*used.messages)
            outcome.effects.extend(used.effects)
            outcome.extend(services.combat.enemy_attack(enemy, player.equipped_armor, defending=False))
        elif cmd.verb == "inventory":
            return TurnResult(messages=services.commands.execute(cmd, state).messages, mode=state.mode)
        else:
            return TurnResult(messages=[COMBAT_HINT], mode=state.mode)

        messages = list(outcome.messages)
        if self._apply_effects(outcome.effects, messages):
            return TurnResult(messages=messages, mode=state.mode)
        if player.health <= 0:
            self._game_over(messages)
            return TurnResult(messages=messages, mode=state.mode)
        if fight_over and state.mode == "combat":
            state.set_mode("exploring")

        if self._advance(messages, COMBAT_ROUND_MINUTES, moved=False):
            return TurnResult(messages=messages, mode=state.mode)

        if fight_over:
            messages.extend(["The fight is over.", ""])
        elif state.combat is not None:
            messages.append(services.combat.combat_prompt(enemy))
        return TurnResult(messages=messages, mode=state.mode)

    # -----------------------
    # Endings
    # -----------------------

    def _game_over(self, messages: List[str]) -> None:
        state = self._state
        state.player.health = 0
        state.set_mode("game_over")
        state.ending = "death"
        logger.info("Game over on day %d", state.clock.day)
        messages.extend(
            [
                "",
                _BANNER,
                "            YOU ARE DEAD",
                _BANNER,
                "",
                self._services.rng.choice(_DEATH_LINES),
                f"You survived {state.clock.day - 1} days.",
                f"Kills: {state.player.kills}",
                "",
                "Type 'restart' to try again.",
            ]
        )

    def _survival_victory(self, messages: List[str]) -> None:
        state = self._state
        state.set_mode("victory")
        state.ending = "survival"
        logger.info("Survival victory")
        messages.extend(
            [
                "",
                _BANNER,
                "           YOU SURVIVED",
                _BANNER,
                "",
                "Dawn breaks on Day 30. You hear engines -- real engines.",
                "Military convoys roll down the Champs-Elysees, soldiers in hazmat",
                "suits sweeping the streets. A helicopter circles overhead, its",
                'loudspeaker crackling: "SURVIVORS REPORT TO PLACE DE LA CONCORDE."',
                "",
                "You stumble out into the light. You made it. Against all odds,",
                "you survived 30 days in the dead city.",
                "",
                f"Kills: {state.player.kills}",
                "Type 'restart' to play again.",
            ]
        )

    def _escape_victory(self, route_id: str, messages: List[str]) -> None:
        state = self._state
        state.set_mode("victory")
        state.ending = route_id
        logger.info("Escape victory via %s", route_id)
        route = self._services.escape_routes_repo.find(route_id)
        epilogue = list(route.epilogue) if route and route.epilogue else ["You escaped the dead city."]
        messages.extend(["", _BANNER, "            YOU ESCAPED", _BANNER, ""])
        messages.extend(epilogue)
        messages.extend(
            [
                "",
                f"Escaped on Day {state.clock.day}.",
                f"Kills: {state.player.kills}",
                "Type 'restart' to play again.",
            ]
        )

    # -----------------------
    # Persistence
    # -----------------------

    def save_game(self, slot: int) -> bool:
        """Write the session to ``slot``; False when nothing could be written."""
        if self._slot_store is None or not isinstance(self._services.rng, RNG):
            return False
        services = self._services
        payload = services.saves.serialize(self._state, services.world, services.events.memory, services.rng)
        try:
            self._slot_store.write_slot(slot, payload)
        except (OSError, ValueError) as exc:
            logger.warning("Saving to slot %s failed: %s", slot, exc)
            return False
        logger.info("Saved to slot %d", slot)
        return True

    def load_game(self, slot: int) -> bool:
        """Replace the session with ``slot``; the current game is untouched on failure."""
        if self._slot_store is None:
            return False
        services = self._services
        try:
            if not self._slot_store.slot_exists(slot):
                return False
            payload = self._slot_store.read_slot(slot)
            loaded = services.saves.deserialize(payload)
        except (OSError, ValueError, SaveLoadError) as exc:
            logger.warning("Loading slot %s failed: %s", slot, exc)
            return False

        services.world.restore(loaded.world)
        services.dialogue.reset()
        memory = services.events.memory
        memory.fired = set(loaded.memory.fired)
        memory.last_random_check = loaded.memory.last_random_check
        if isinstance(services.rng, RNG):
            services.rng.restore_state(loaded.rng.export_state())
        self._state = loaded.state
        logger.info("Loaded slot %d", slot)
        return True

    def _save_command(self, cmd: ParsedCommand) -> List[str]:
        slot = self._slot_from(cmd)
        if self.save_game(slot):
            return [f"Game saved to slot {slot}."]
        return ["Failed to save game."]

    def _load_command(self, cmd: ParsedCommand) -> List[str]:
        slot = self._slot_from(cmd)
        if self.load_game(slot):
            return [f"Game loaded from slot {slot}.", *self._services.commands.room_lines(self._state)]
        if self._slot_store is None:
            return ["No saved games found."]
        saves = [entry for entry in self._slot_store.list_slots() if entry.exists and entry.metadata]
        if not saves:
            return ["No saved games found."]
        lines = ["Available saves:"]
        for entry in saves:
            metadata = entry.metadata
            lines.append(f"  {entry.slot}: Day {metadata.get('day', '?')} ({metadata.get('saved_at', 'unknown')})")
        return lines

    @staticmethod
    def _slot_from(cmd: ParsedCommand) -> int:
        if cmd.noun and cmd.noun.isdigit():
            return int(cmd.noun)
        return 1
