"""Console-driven UI loop for Dead City."""
from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, Literal

from deadcity.core.rng import RNG
from deadcity.core.types import TERMINAL_MODES
from deadcity.presentation.cli import config
from deadcity.presentation.cli.render import render_lines, render_menu, render_status_bar
from deadcity.presentation.cli.save_slots import SaveSlotStore
from deadcity.services import GameServices, GameSession

logger = logging.getLogger(__name__)

MenuAction = Literal["new_game", "load_game", "quit"]
_MAX_RANDOM_SEED = 2**31 - 1
_EXIT_WORDS = ("exit", "menu")


def main() -> None:
    """Start the interactive CLI session."""
    settings = config.load_config()
    session = _build_session()
    step = settings["text_display_mode"] == "step"
    print("=== DEAD CITY ===")
    print("Paris has fallen. Survive 30 days or find a way out.")
    running = True
    while running:
        action = _main_menu_loop()
        if action == "quit":
            running = False
            continue
        if action == "load_game":
            if not _load_from_menu(session):
                continue
            render_lines(session.services.commands.room_lines(session.state), step=step)
        else:
            seed = _prompt_seed(settings)
            render_lines(session.new_game(seed), step=step)
            print(f"Game started with seed: {seed}")
        running = _run_game_loop(session, step=step)
    print("Goodbye!")


def _build_session() -> GameSession:
    """Construct the session with concrete repositories and the on-disk slot store."""
    services = GameServices.build(rng=RNG(0))
    return GameSession(services, slot_store=SaveSlotStore())


def _main_menu_loop() -> MenuAction:
    while True:
        render_menu("Main Menu", ["New Game", "Load Game", "Quit"])
        choice = input("Select an option: ").strip()
        if choice == "1":
            return "new_game"
        if choice == "2":
            return "load_game"
        if choice == "3":
            return "quit"
        print("Invalid selection. Please enter 1, 2 or 3.")


def _prompt_seed(settings: Dict[str, Any]) -> int:
    default_seed = settings.get("default_seed")
    prompt = "Enter seed (blank for random): "
    if default_seed is not None:
        prompt = f"Enter seed (blank for {default_seed}): "
    while True:
        raw_value = input(prompt).strip()
        if not raw_value:
            if default_seed is not None:
                return default_seed
            return secrets.randbelow(_MAX_RANDOM_SEED)
        try:
            return int(raw_value)
        except ValueError:
            print("Invalid seed. Please enter a valid integer.")


def _load_from_menu(session: GameSession) -> bool:
    store = session.slot_store
    if store is None:
        return False
    slots = [entry for entry in store.list_slots() if entry.exists]
    if not slots:
        print("No saved games found.")
        return False
    options = []
    for entry in slots:
        if entry.is_corrupt or not entry.metadata:
            options.append(f"Slot {entry.slot}: (unreadable)")
            continue
        metadata = entry.metadata
        options.append(
            f"Slot {entry.slot}: Day {metadata.get('day', '?')} {metadata.get('time', '')}"
            f" - {metadata.get('location_name', '?')}"
        )
    render_menu("Load Game", options)
    raw = input("Select a save (blank to cancel): ").strip()
    if not raw:
        return False
    if not raw.isdigit() or not 1 <= int(raw) <= len(slots):
        print("Invalid selection.")
        return False
    slot = slots[int(raw) - 1].slot
    if not session.load_game(slot):
        print("That save could not be loaded.")
        return False
    print(f"Game loaded from slot {slot}.")
    return True


def _run_game_loop(session: GameSession, *, step: bool) -> bool:
    """Feed player input to the session; returns False when the player quits the program."""
    while True:
        state = session.state
        render_status_bar(state.clock.day, state.clock.label(), state.player.health, state.mode)
        try:
            raw = input("\n> ")
        except EOFError:
            return False
        if not raw.strip():
            continue
        if raw.strip().lower() in _EXIT_WORDS:
            return True
        result = session.process(raw)
        render_lines(result.messages, step=step)
        if result.mode in TERMINAL_MODES and not result.messages:
            print("Type 'restart' to play again, or 'menu' to return to the main menu.")
