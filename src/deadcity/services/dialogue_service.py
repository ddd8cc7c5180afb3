"""Walks NPC dialogue trees and resolves gifts."""
from __future__ import annotations

import logging
from typing import List

from deadcity.data.repositories import NpcsRepository
from deadcity.domain.clock import is_night
from deadcity.domain.defs import DialogueNodeDef, DialogueOptionDef, NpcDef
from deadcity.domain.effects import DialogueEnded, DialogueStarted
from deadcity.domain.state import GameState
from deadcity.services.command_parser import ParsedCommand
from deadcity.services.inventory_service import InventoryService
from deadcity.services.results import CommandResult

logger = logging.getLogger(__name__)

ROOT_NODE = "root"
LEAVE_WORDS = frozenset({"leave", "bye", "goodbye", "quit"})


class DialogueService:
    """Holds the one active conversation of a session."""

    def __init__(self, npcs_repo: NpcsRepository, inventory_service: InventoryService) -> None:
        self._npcs_repo = npcs_repo
        self._inventory = inventory_service
        self.active_npc_id: str | None = None
        self.active_node: str | None = None

    @property
    def in_conversation(self) -> bool:
        return self.active_npc_id is not None

    def reset(self) -> None:
        self.active_npc_id = None
        self.active_node = None

    def npcs_in_room(self, room_id: str, state: GameState) -> List[NpcDef]:
        """NPCs present in ``room_id`` at the current day and hour."""
        clock = state.clock
        present = []
        for npc in self._npcs_repo.ordered():
            if npc.location != room_id:
                continue
            if npc.appears_on_day and clock.day < npc.appears_on_day:
                continue
            if npc.night_only and not is_night(clock.hour):
                continue
            present.append(npc)
        return present

    def start(self, npc_id: str, state: GameState) -> CommandResult | None:
        npc = self._npcs_repo.find(npc_id)
        if npc is None:
            return None
        self.active_npc_id = npc_id
        self.active_node = ROOT_NODE
        messages = [npc.greeting, ""]
        messages.extend(self._option_lines(self._available_options(npc.dialogue[ROOT_NODE], state)))
        logger.debug("Dialogue started with %s", npc_id)
        return CommandResult(messages=messages, effects=[DialogueStarted(npc_id)])

    def handle_input(self, cmd: ParsedCommand, state: GameState) -> CommandResult:
        """Advance the conversation with a numbered or free-text choice."""
        npc = self._npcs_repo.find(self.active_npc_id) if self.active_npc_id else None
        if npc is None or self.active_node is None:
            return self._end(["No conversation active."])

        node = npc.dialogue.get(self.active_node)
        if node is None:
            return self._end(["The conversation ends."])

        options = self._available_options(node, state)
        raw = cmd.raw.strip().lower()
        if raw in LEAVE_WORDS or cmd.verb == "quit":
            return self._end(["You end the conversation."])

        index = self._choice_index(raw, options)
        if index is None:
            return CommandResult(messages=["Choose an option:", *self._option_lines(options)])

        choice = options[index]
        if not choice.next:
            return self._end(["You end the conversation."])
        next_node = npc.dialogue.get(choice.next)
        if next_node is None:
            return self._end(["The conversation ends."])

        self.active_node = choice.next
        messages = self._enter_node(npc, next_node, state)

        next_options = self._available_options(next_node, state)
        if not next_options:
            return self._end([*messages, "", "The conversation ends."])
        messages.append("")
        messages.extend(self._option_lines(next_options))
        return CommandResult(messages=messages)

    def give(self, npc_id: str, item_id: str, state: GameState) -> CommandResult | None:
        """Hand an item to an NPC; None when the NPC has no use for it."""
        npc = self._npcs_repo.find(npc_id)
        if npc is None:
            return None
        response = npc.accepts.get(item_id)
        if response is None:
            return None
        if response.sets_flag:
            state.player.quest_flags.add(response.sets_flag)
        logger.info("%s accepted %s", npc_id, item_id)
        return CommandResult(messages=list(response.messages))

    # -----------------------
    # Helpers
    # -----------------------

    def _enter_node(self, npc: NpcDef, node: DialogueNodeDef, state: GameState) -> List[str]:
        player = state.player
        messages: List[str] = []
        if node.text:
            messages.append(node.text)
        if node.sets_flag:
            player.quest_flags.add(node.sets_flag)
        if node.gives_item and not player.has_item(node.gives_item):
            self._inventory.add(player, node.gives_item)
            messages.append(f"[Received: {self._inventory.item_name(node.gives_item)}]")
        if node.consumes_item and self._inventory.remove(player, node.consumes_item):
            messages.append(f"[Given: {self._inventory.item_name(node.consumes_item)}]")
        if node.recruits and npc.id not in player.companions:
            player.companions.add(npc.id)
            messages.append(f"[{npc.name} has joined you!]")
        return messages

    @staticmethod
    def _choice_index(raw: str, options: List[DialogueOptionDef]) -> int | None:
        if raw.isdigit():
            number = int(raw)
            if 1 <= number <= len(options):
                return number - 1
            return None
        if not raw:
            return None
        for index, option in enumerate(options):
            if raw in option.text.lower():
                return index
        return None

    @staticmethod
    def _available_options(node: DialogueNodeDef, state: GameState) -> List[DialogueOptionDef]:
        return [
            option
            for option in node.options
            if option.requires is None or state.player.has_item(option.requires)
        ]

    @staticmethod
    def _option_lines(options: List[DialogueOptionDef]) -> List[str]:
        return [f"  {index}. {option.text}" for index, option in enumerate(options, start=1)]

    def _end(self, messages: List[str]) -> CommandResult:
        self.reset()
        return CommandResult(messages=messages, effects=[DialogueEnded()])
