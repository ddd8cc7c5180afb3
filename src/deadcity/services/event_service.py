"""Scripted and random world events."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Set

from deadcity.core.rng import RandomSource
from deadcity.data.repositories import EventsRepository
from deadcity.domain.clock import time_of_day
from deadcity.domain.defs import EventEffectDef, RandomEventDef, ScriptedEventDef
from deadcity.domain.effects import Outcome
from deadcity.domain.entities import MAX_STAT
from deadcity.domain.state import GameState
from deadcity.services.world_service import WorldService

logger = logging.getLogger(__name__)

RANDOM_CHECK_INTERVAL = 30
RADIO_PARTS_FLAG = "has_radio_parts"
RADIO_PARTS_ITEM = "radio_parts"


@dataclass(slots=True)
class EventMemory:
    """Per-session record of fired one-shot events and the random-roll throttle."""

    fired: Set[str] = field(default_factory=set)
    last_random_check: int = 0


class EventService:
    def __init__(
        self,
        events_repo: EventsRepository,
        world: WorldService,
        memory: EventMemory,
        rng: RandomSource,
    ) -> None:
        self._events_repo = events_repo
        self._world = world
        self._rng = rng
        self.memory = memory

    def check(self, state: GameState) -> Outcome:
        """Fire due scripted events, then at most one random event."""
        outcome = self.check_scripted(state)
        now = state.clock.absolute_minutes
        if now - self.memory.last_random_check >= RANDOM_CHECK_INTERVAL:
            self.memory.last_random_check = now
            outcome.extend(self.check_random(state))
        return outcome

    # -----------------------
    # Scripted
    # -----------------------

    def check_scripted(self, state: GameState) -> Outcome:
        outcome = Outcome()
        for event in self._events_repo.scripted():
            if not self._scripted_due(event, state):
                continue
            self.memory.fired.add(event.id)
            outcome.say("", *event.messages)
            self._apply_effect(event.effect, state, outcome)
            logger.info("Scripted event %s fired on day %d", event.id, state.clock.day)
        return outcome

    def _scripted_due(self, event: ScriptedEventDef, state: GameState) -> bool:
        clock = state.clock
        if event.once and event.id in self.memory.fired:
            return False
        if event.day != clock.day:
            return False
        if event.hour is not None and clock.hour < event.hour:
            return False
        if event.flag and not self._flag_satisfied(event.flag, state):
            return False
        return True

    @staticmethod
    def _flag_satisfied(flag: str, state: GameState) -> bool:
        player = state.player
        if player.has_flag(flag):
            return True
        # the radio flag is never set directly; carrying the parts counts
        return flag == RADIO_PARTS_FLAG and player.has_item(RADIO_PARTS_ITEM)

    # -----------------------
    # Random
    # -----------------------

    def check_random(self, state: GameState) -> Outcome:
        outcome = Outcome()
        zone = self._world.zone_of(state.current_location_id)
        period = time_of_day(state.clock.hour)

        for event in self._events_repo.random_events():
            if self._rng.random() > event.chance:
                continue
            if not self._conditions_hold(event, state, zone, period):
                continue

            if event.variants:
                outcome.say("", self._rng.choice(event.variants))
            else:
                outcome.say("", *event.messages)
            self._apply_effect(event.effect, state, outcome)
            logger.debug("Random event %s fired", event.id)
            break
        return outcome

    @staticmethod
    def _conditions_hold(event: RandomEventDef, state: GameState, zone: str, period: str) -> bool:
        conditions = event.conditions
        if conditions is None:
            return True
        if conditions.time_of_day and conditions.time_of_day != period:
            return False
        if conditions.zone and conditions.zone != zone:
            return False
        if conditions.min_day and state.clock.day < conditions.min_day:
            return False
        return True

    def _apply_effect(self, effect: EventEffectDef | None, state: GameState, outcome: Outcome) -> None:
        if effect is None:
            return
        if effect.alert_increase:
            state.raise_alert(effect.alert_increase)
        if effect.hunger_increase:
            player = state.player
            player.hunger = min(MAX_STAT, player.hunger + effect.hunger_increase)
        if effect.add_items:
            for item_id in effect.add_items:
                self._world.add_item(state.current_location_id, item_id)
            outcome.say("You notice supplies scattered nearby!")
