"""Escape-route discovery, progress tracking and climax actions."""
from __future__ import annotations

import logging
from typing import Iterable, List

from deadcity.data.repositories import EscapeRoutesRepository, RoomsRepository
from deadcity.domain.defs import ConditionDef, EscapeRouteDef
from deadcity.domain.effects import EscapeVictory, Outcome
from deadcity.domain.state import GameState, RouteProgress
from deadcity.services.results import CommandResult

logger = logging.getLogger(__name__)


class EscapeRouteService:
    """Evaluates route predicates against the live game state.

    Every step is evaluated on every check, so a route finishes as soon as its
    last step holds even if earlier steps do not.
    """

    def __init__(self, escape_routes_repo: EscapeRoutesRepository, rooms_repo: RoomsRepository) -> None:
        self._routes_repo = escape_routes_repo
        self._rooms_repo = rooms_repo

    def routes(self) -> List[EscapeRouteDef]:
        return self._routes_repo.ordered()

    def initial_progress(self) -> dict[str, RouteProgress]:
        return {route.id: RouteProgress() for route in self.routes()}

    def check(self, state: GameState) -> Outcome:
        outcome = Outcome()
        player = state.player

        room = self._rooms_repo.find(state.current_location_id)
        if room is not None and room.visit_flag:
            player.quest_flags.add(room.visit_flag)

        for route in self.routes():
            progress = state.escape_progress.setdefault(route.id, RouteProgress())
            if not progress.discovered and player.has_flag(route.discovery_flag):
                progress.discovered = True
                outcome.say(f"[ESCAPE ROUTE DISCOVERED: {route.name}]", "Type 'status' to check your progress.")
                logger.info("Escape route %s discovered", route.id)
            if not progress.discovered:
                continue

            completed = sum(1 for step in route.steps if self.evaluate(step.check, state))
            total = len(route.steps)
            if completed > progress.completed_steps:
                progress.completed_steps = completed
                if completed < total:
                    outcome.say(f"[{route.name}: Step {completed}/{total} complete]")

            if route.steps and self.evaluate(route.steps[-1].check, state):
                logger.info("Escape route %s completed", route.id)
                outcome.emit(EscapeVictory(route.id))
                return outcome

        for route in self.routes():
            hint = route.hint
            if hint is None or state.current_location_id != hint.location:
                continue
            if player.has_flag(hint.prompt_flag) or not self._all_hold(hint.requires, state):
                continue
            player.quest_flags.add(hint.prompt_flag)
            player.quest_flags.update(hint.sets_flags)
            outcome.say(*hint.messages)
        return outcome

    def try_climax(self, state: GameState, item_id: str) -> CommandResult | None:
        """Handle using ``item_id`` where a route's finale happens; None when no finale applies."""
        for route in self.routes():
            climax = route.climax
            if climax is None:
                continue
            if item_id not in climax.trigger_items or state.current_location_id != climax.location:
                continue
            if self._all_hold(climax.requires, state):
                state.player.quest_flags.update(climax.sets_flags)
                logger.info("Climax for %s triggered with %s", route.id, item_id)
                return CommandResult(messages=list(climax.messages), time_elapsed=climax.time_elapsed)
            messages = [climax.missing_header]
            messages.extend(
                f"  - {piece.message}" for piece in climax.missing if not self.evaluate(piece.check, state)
            )
            return CommandResult(messages=messages)
        return None

    def status_lines(self, state: GameState) -> List[str]:
        lines: List[str] = []
        for route in self.routes():
            progress = state.escape_progress.get(route.id)
            if progress is None or not progress.discovered:
                continue
            lines.append(f"--- {route.name} ---")
            for step in route.steps:
                mark = "[X]" if self.evaluate(step.check, state) else "[ ]"
                lines.append(f"  {mark} {step.description}")
            lines.append("")
        if not lines:
            lines.append("No escape routes discovered yet. Explore and talk to survivors.")
        return lines

    # -----------------------
    # Predicates
    # -----------------------

    def _all_hold(self, conditions: Iterable[ConditionDef], state: GameState) -> bool:
        return all(self.evaluate(condition, state) for condition in conditions)

    def evaluate(self, condition: ConditionDef, state: GameState) -> bool:
        player = state.player
        kind = condition.kind
        if kind == "flag":
            return bool(condition.flag) and player.has_flag(condition.flag)
        if kind == "at_location":
            return state.current_location_id == condition.location
        if kind == "has_item":
            return bool(condition.items) and player.has_item(condition.items[0])
        if kind == "has_all":
            return all(player.has_item(item_id) for item_id in condition.items)
        if kind == "has_any":
            return any(player.has_item(item_id) for item_id in condition.items)
        if kind == "count_at_least":
            return sum(player.item_count(item_id) for item_id in condition.items) >= condition.count
        if kind == "all_of":
            return self._all_hold(condition.conditions, state)
        raise ValueError(f"Unknown condition kind: {kind}")
