"""Survival clock: time, hunger, thirst, rest and healing."""
from __future__ import annotations

import logging
from typing import List

from deadcity.core.rng import RandomSource
from deadcity.core.types import Zone
from deadcity.domain.clock import SURVIVAL_DAYS
from deadcity.domain.defs import ItemDef
from deadcity.domain.effects import Outcome, PlayerDied, SurvivalVictory
from deadcity.domain.entities import MAX_STAT
from deadcity.domain.state import GameState

logger = logging.getLogger(__name__)

DAILY_ALERT_INCREASE = 0.3
SICKNESS_CHANCE = 0.15
SICKNESS_DAMAGE = 10
UNSAFE_REST_HOURS = 2

_TRANSITIONS = {
    (5, 6): "Dawn breaks over Paris. The first light reveals the damage of another night.",
    (18, 19): "Dusk settles over the city. The shadows grow long.",
    (20, 21): "Night falls. The groaning from the streets grows louder.",
}


class SurvivalService:
    """Advances the clock hour by hour and applies resource decay."""

    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def tick(self, state: GameState, minutes: int) -> Outcome:
        """Advance time by ``minutes``; every carried hour is processed on its own."""
        outcome = Outcome()
        clock = state.clock
        player = state.player

        total = clock.minute + max(0, minutes)
        hours, clock.minute = divmod(total, 60)

        for _ in range(hours):
            previous_hour = clock.hour
            clock.hour += 1
            if clock.hour >= 24:
                clock.hour -= 24
                clock.day += 1
                state.raise_alert(DAILY_ALERT_INCREASE)
                outcome.say(f"--- Day {clock.day} ---")
                logger.info("Day %d begins (alert %.1f)", clock.day, state.alert_level)
                if clock.day > SURVIVAL_DAYS:
                    outcome.emit(SurvivalVictory())
                    return outcome

            transition = _TRANSITIONS.get((previous_hour, clock.hour))
            if transition:
                outcome.say(transition)

            player.hunger = max(0, player.hunger - 1)
            player.thirst = max(0, player.thirst - (2 if clock.hour % 2 == 0 else 1))

            self._apply_hunger(state, outcome)
            self._apply_thirst(state, outcome)

            if player.health <= 0:
                player.health = 0
                outcome.emit(PlayerDied())
                logger.info("Player died of exposure on day %d", clock.day)
                return outcome

        return outcome

    @staticmethod
    def _apply_hunger(state: GameState, outcome: Outcome) -> None:
        player = state.player
        if player.hunger <= 0:
            player.health -= 3
            outcome.say("You are starving! Your body is failing. (-3 HP)")
        elif player.hunger <= 20:
            player.health -= 1
            outcome.say("You are very hungry. Your stomach cramps painfully. (-1 HP)")
        elif player.hunger == 40:
            outcome.say("You feel weak with hunger. You should eat something.")

    @staticmethod
    def _apply_thirst(state: GameState, outcome: Outcome) -> None:
        player = state.player
        if player.thirst <= 0:
            player.health -= 4
            outcome.say("You are dying of thirst! Your vision blurs. (-4 HP)")
        elif player.thirst <= 10:
            player.health -= 2
            outcome.say("You are severely dehydrated. Every movement is agony. (-2 HP)")
        elif player.thirst <= 30:
            player.health -= 1
            outcome.say("Your mouth is parched. You desperately need water. (-1 HP)")
        elif player.thirst == 50:
            outcome.say("Your throat is dry. You should find something to drink.")

    def eat(self, state: GameState, item_def: ItemDef) -> Outcome:
        """Consume food or drink."""
        outcome = Outcome()
        player = state.player
        if item_def.hunger_relief:
            player.hunger = min(MAX_STAT, player.hunger + item_def.hunger_relief)
            outcome.say(
                item_def.use_message
                or f"You eat the {item_def.name}. Hunger restored by {item_def.hunger_relief}."
            )
        if item_def.thirst_relief:
            player.thirst = min(MAX_STAT, player.thirst + item_def.thirst_relief)
            if not item_def.hunger_relief and item_def.use_message:
                outcome.say(item_def.use_message)
            outcome.say(f"Thirst restored by {item_def.thirst_relief}.")
        if item_def.healing:
            player.restore_health(item_def.healing)
            outcome.say(f"Health restored by {item_def.healing}.")

        if "slight_blur" in item_def.special:
            outcome.say("The alcohol warms you but dulls your senses.")
        if "sickness" in item_def.special and self._rng.random() < SICKNESS_CHANCE:
            player.damage(SICKNESS_DAMAGE)
            outcome.say(f"The meat makes you sick. You vomit. (-{SICKNESS_DAMAGE} HP)")
        return outcome

    @staticmethod
    def heal(state: GameState, item_def: ItemDef) -> Outcome:
        outcome = Outcome()
        player = state.player
        if item_def.healing:
            healed = player.restore_health(item_def.healing)
            outcome.say(item_def.use_message or f"You use the {item_def.name}. Health restored by {healed}.")
        if "cures_infection" in item_def.special and player.infected:
            player.infected = False
            outcome.say("The antibiotics clear the infection. You feel much better.")
        return outcome

    def rest(self, state: GameState, hours: int, zone: Zone, barricaded: bool) -> Outcome:
        """Rest in place, heal a little, then let the hours pass."""
        outcome = Outcome()
        if zone == "exterior" and not barricaded:
            outcome.say(
                "You try to rest, but the open streets are too dangerous. You manage only fitful dozing."
            )
            hours = min(hours, UNSAFE_REST_HOURS)

        rate = 3 if barricaded else 1
        total_heal = rate * hours
        state.player.restore_health(total_heal)
        verb = "sleep" if hours >= 4 else "rest"
        outcome.say(f"You {verb} for {hours} hours. (+{total_heal} HP)")

        outcome.extend(self.tick(state, hours * 60))
        return outcome

    @staticmethod
    def status_lines(state: GameState) -> List[str]:
        player = state.player
        clock = state.clock
        lines = [
            f"Health: {player.health}/{player.max_health}",
            f"Hunger: {player.hunger}/100{' [!]' if player.hunger <= 40 else ''}",
            f"Thirst: {player.thirst}/100{' [!]' if player.thirst <= 50 else ''}",
            f"Day: {clock.day}/{SURVIVAL_DAYS}",
            f"Time: {clock.hour:02d}:{clock.minute:02d}",
            f"Zombie Alert Level: {state.alert_level:.1f}/10",
            f"Days survived: {clock.day - 1}",
            f"Kills: {player.kills}",
        ]
        if player.equipped_weapon is not None:
            lines.append(f"Weapon: {player.equipped_weapon.name}")
        if player.equipped_armor is not None:
            lines.append(f"Armor: {player.equipped_armor.name}")
        if player.companions:
            lines.append(f"Companions: {', '.join(sorted(player.companions))}")
        return lines
