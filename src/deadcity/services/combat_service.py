"""Combat resolution: encounter spawning, attacks and flight."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from deadcity.core.rng import RandomSource
from deadcity.data.repositories import EnemiesRepository
from deadcity.domain.defs import RoomDef
from deadcity.domain.effects import BreakWeapon, DamagePlayer, EnemyDied, Outcome, RaiseAlert
from deadcity.domain.entities import EnemyInstance, EquippedItem

logger = logging.getLogger(__name__)

BARE_HANDS_DAMAGE = (2, 5)
COMPANION_BONUS = 0.3
GROUP_SCALING = 0.4
AMBUSH_CHANCE = 0.3
AMBUSH_MULTIPLIER = 1.5
NOISE_ALERT = 0.5
REGENERATION = 3
BASE_FLEE_CHANCE = 0.6
_FLEE_SPEED_MODIFIERS = {"fast": -0.3, "slow": 0.1, "very_slow": 0.2}


@dataclass(slots=True)
class FleeResult:
    success: bool
    outcome: Outcome = field(default_factory=Outcome)


class CombatService:
    """Resolves one combat action at a time; the session applies the effects."""

    def __init__(self, enemies_repo: EnemiesRepository, rng: RandomSource) -> None:
        self._enemies_repo = enemies_repo
        self._rng = rng

    def try_spawn_encounter(
        self,
        room_def: RoomDef,
        barricaded: bool,
        alert_level: float,
        time_multiplier: float,
    ) -> EnemyInstance | None:
        """Roll for an encounter in ``room_def``; returns None when nothing appears."""
        encounters = room_def.encounters
        if encounters is None or barricaded:
            return None

        effective = encounters.spawn_chance * time_multiplier * (1 + alert_level * 0.1)
        if self._rng.random() > effective:
            return None

        type_id = self._rng.choice(encounters.types)
        enemy_def = self._enemies_repo.find(type_id)
        if enemy_def is None:
            logger.warning("Room %s lists unknown enemy type %s", room_def.id, type_id)
            return None

        count = self._rng.randint(1, encounters.max_count)
        hp = self._rng.randint(*enemy_def.hp_range)
        enemy = EnemyInstance(
            type_id=type_id,
            name=f"{count} {enemy_def.name_plural}" if count > 1 else enemy_def.name,
            hp=hp,
            max_hp=hp,
            damage=enemy_def.damage,
            count=count,
            speed=enemy_def.speed,
            special=enemy_def.special,
            xp=enemy_def.xp,
            description=enemy_def.description,
        )
        logger.debug("Spawned %s (hp %d) in %s", enemy.name, hp, room_def.id)
        return enemy

    def player_attack(
        self,
        enemy: EnemyInstance,
        weapon: EquippedItem | None,
        has_companion: bool,
    ) -> Outcome:
        outcome = Outcome()
        if weapon is not None and weapon.damage is not None:
            damage = self._rng.randint(*weapon.damage)
            if has_companion:
                bonus = int(damage * COMPANION_BONUS)
                damage += bonus
                outcome.say(f"Your companion attacks alongside you! (+{bonus} damage)")
            outcome.say(f"You strike the {enemy.name} with your {weapon.name} for {damage} damage!")
            self._wear_weapon(weapon, outcome)
            if "self_damage" in weapon.special:
                self_damage = self._rng.randint(1, 2)
                outcome.say(f"The glass cuts your hand. (-{self_damage} HP)")
                outcome.emit(DamagePlayer(self_damage))
            if "noise_maker" in weapon.special:
                outcome.say("The gunshot echoes through the streets. That will attract attention...")
                outcome.emit(RaiseAlert(NOISE_ALERT))
        else:
            damage = self._rng.randint(*BARE_HANDS_DAMAGE)
            outcome.say(f"You punch the {enemy.name} for {damage} damage. You need a weapon!")

        enemy.hp -= damage
        if not enemy.is_alive:
            outcome.say(f"The {enemy.name} collapses!")
            if enemy.has("explodes_on_death"):
                blast = self._rng.randint(8, 15)
                outcome.say(f"The bloated corpse EXPLODES in a shower of putrid flesh! (-{blast} HP)")
                outcome.emit(DamagePlayer(blast))
            outcome.emit(EnemyDied(enemy.count))
            return outcome

        if enemy.has("regenerates"):
            enemy.hp = min(enemy.max_hp, enemy.hp + REGENERATION)
            outcome.say(f"The creature's wounds begin to close... (+{REGENERATION} HP to enemy)")
        outcome.say(self._wound_line(enemy))
        return outcome

    @staticmethod
    def _wear_weapon(weapon: EquippedItem, outcome: Outcome) -> None:
        # durability 0 means the weapon never wears out
        if weapon.durability <= 0:
            return
        weapon.current_durability -= 1
        if weapon.current_durability <= 0:
            outcome.say(weapon.break_message or f"Your {weapon.name} breaks!")
            outcome.emit(BreakWeapon())
        elif weapon.current_durability <= 3:
            outcome.say(f"Your {weapon.name} is about to break!")

    @staticmethod
    def _wound_line(enemy: EnemyInstance) -> str:
        percent = (enemy.hp * 100) // enemy.max_hp
        if percent > 60:
            return f"The {enemy.name} staggers but keeps coming."
        if percent > 30:
            return f"The {enemy.name} is badly wounded but still fighting."
        return f"The {enemy.name} is barely standing, dragging itself forward."

    def enemy_attack(self, enemy: EnemyInstance, armor: EquippedItem | None, defending: bool) -> Outcome:
        outcome = Outcome()
        damage = self._rng.randint(*enemy.damage)
        if enemy.count > 1:
            damage = int(damage * (1 + (enemy.count - 1) * GROUP_SCALING))
        if armor is not None and armor.damage_reduction:
            damage = max(1, damage - armor.damage_reduction)
        if defending:
            damage = max(1, damage // 2)
            outcome.say(f"You brace yourself. The {enemy.name} attacks!")
        else:
            outcome.say(f"The {enemy.name} lunges at you!")
        if enemy.has("ambush") and not defending and self._rng.random() < AMBUSH_CHANCE:
            damage = int(damage * AMBUSH_MULTIPLIER)
            outcome.say("It catches you off guard from below!")
        outcome.say(f"You take {damage} damage!")
        outcome.emit(DamagePlayer(damage))
        return outcome

    @staticmethod
    def flee_chance(enemy: EnemyInstance, hunger: int) -> float:
        """Probability that a flee attempt succeeds."""
        if enemy.has("no_flee"):
            return 0.0
        chance = BASE_FLEE_CHANCE + _FLEE_SPEED_MODIFIERS.get(enemy.speed, 0.0)
        if hunger > 60:
            chance -= 0.1
        return chance

    def try_flee(self, enemy: EnemyInstance, hunger: int, armor: EquippedItem | None = None) -> FleeResult:
        if enemy.has("no_flee"):
            outcome = Outcome(messages=["There are too many of them! You can't escape!"])
            return FleeResult(success=False, outcome=outcome)

        if self._rng.random() < self.flee_chance(enemy, hunger):
            return FleeResult(success=True, outcome=Outcome(messages=["You manage to break free and retreat!"]))

        outcome = Outcome(messages=["You try to run but the zombie blocks your path!"])
        outcome.extend(self.enemy_attack(enemy, armor, defending=False))
        return FleeResult(success=False, outcome=outcome)

    def encounter_intro(self, enemy: EnemyInstance) -> str:
        intros = (
            f"A {enemy.name} lurches out of the shadows!",
            f"You hear a wet gurgling sound. A {enemy.name} appears!",
            f"The stench hits you first. Then you see it -- a {enemy.name}!",
            f"Something moves in the darkness. A {enemy.name} shambles toward you!",
            f"A {enemy.name} blocks your path, dead eyes fixed on you.",
        )
        return self._rng.choice(intros)

    @staticmethod
    def combat_prompt(enemy: EnemyInstance) -> str:
        return f"[COMBAT] {enemy.name} (HP: {enemy.hp}/{enemy.max_hp}) | attack | defend | flee | use [item]"
