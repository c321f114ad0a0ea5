"""
Turn-based battle resolution between two trainers' lead creatures.

Algorithm (per turn, at most ``MAX_TURNS`` turns):
1. The faster creature acts first; equal speed favours the first operand
2. Each attacker picks its strongest affordable ability, or Struggle
3. damage = max(4, floor((power + attack - floor(defense * 0.6)) * multiplier))
4. The battle stops the instant either creature reaches 0 health

Settlement then moves XP, loyalty, gold and Elo, knocks the loser's creature
down to 20% health and refills both creatures' stamina. Everything here is
synchronous and pure Python; once started a battle always runs to a knockout
or the turn cap.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from automon.catalog import ABILITY_BY_ID, ITEM_BY_ID, SPECIES_BY_ID, AbilityDef
from automon.rng import clamp, round_half_up
from automon.schemas import AutoMon, Trainer, inventory_add

MAX_TURNS = 30
ELO_K = 28
ADVANTAGE_MULTIPLIER = 1.5
MIN_DAMAGE = 4
HEAL_COST = 35

STRUGGLE = AbilityDef(
    id="struggle",
    name="Struggle",
    element="air",
    power=10,
    stamina_cost=8,
    unlock_level=1,
)

# attacker element -> element it hits for 1.5x
ELEMENT_ADVANTAGE = {
    "fire": "earth",
    "earth": "electric",
    "electric": "water",
    "water": "fire",
    "light": "shadow",
    "shadow": "light",
}


class BattleResult(BaseModel):
    winner_id: str
    loser_id: str
    log: List[str] = Field(default_factory=list)
    winner_gold: int = 0
    loser_gold_loss: int = 0
    elo_delta: int = 0
    turns: int = 0


def element_multiplier(attacker_element: str, defender_element: str) -> float:
    if ELEMENT_ADVANTAGE.get(attacker_element) == defender_element:
        return ADVANTAGE_MULTIPLIER
    return 1.0


def choose_ability(automon: AutoMon) -> Optional[AbilityDef]:
    """Strongest unlocked ability the creature can pay for; None means Struggle.

    Ties on power keep the earlier ability in the creature's list.
    """

    affordable = [
        ABILITY_BY_ID[ability_id]
        for ability_id in automon.abilities
        if ability_id in ABILITY_BY_ID
        and ABILITY_BY_ID[ability_id].stamina_cost <= automon.stamina_current
    ]
    if not affordable:
        return None
    return max(affordable, key=lambda ability: ability.power)


def compute_damage(attacker: AutoMon, defender: AutoMon, ability: AbilityDef) -> Tuple[int, float]:
    multiplier = element_multiplier(attacker.element, defender.element)
    scaled = ability.power + attacker.stats.attack - math.floor(defender.stats.defense * 0.6)
    return max(MIN_DAMAGE, math.floor(scaled * multiplier)), multiplier


def _strike(attacker: AutoMon, defender: AutoMon) -> str:
    ability = choose_ability(attacker) or STRUGGLE
    damage, multiplier = compute_damage(attacker, defender, ability)
    defender.health = int(clamp(defender.health - damage, 0, defender.max_health))
    attacker.stamina_current = max(0, attacker.stamina_current - ability.stamina_cost)

    species = SPECIES_BY_ID.get(attacker.species_id)
    name = species.name if species else attacker.nickname
    suffix = " (element advantage)" if multiplier > 1 else ""
    return f"{name} used {ability.name} for {damage} damage{suffix}."


def expected_score(rating: float, opponent: float) -> float:
    return 1 / (1 + math.pow(10, (opponent - rating) / 400))


def elo_delta(winner_elo: int, loser_elo: int) -> int:
    """Points the winner gains and the loser drops (zero-sum, K=28)."""
    return round_half_up(ELO_K * (1 - expected_score(winner_elo, loser_elo)))


def resolve_battle(trainer_a: Trainer, trainer_b: Trainer) -> Optional[BattleResult]:
    """Fight the first living creature of each side and settle the outcome.

    Mutates both trainers and their lead creatures. Returns None (and
    changes nothing) when either side has no creature with health left.
    """

    a = trainer_a.first_living_automon()
    b = trainer_b.first_living_automon()
    if a is None or b is None:
        return None

    log: List[str] = []
    turn = 0
    while a.health > 0 and b.health > 0 and turn < MAX_TURNS:
        turn += 1
        first, second = (a, b) if a.stats.speed >= b.stats.speed else (b, a)
        log.append(f"Turn {turn}: {_strike(first, second)}")
        if second.health <= 0:
            break
        log.append(f"Turn {turn}: {_strike(second, first)}")

    if a.health > 0 and b.health > 0:
        # Turn cap reached: the healthier creature (by fraction) takes it, ties to trainer_a
        a_wins = a.health_fraction >= b.health_fraction
        log.append(f"Turn cap of {MAX_TURNS} reached; decided on remaining health.")
    else:
        a_wins = a.health > 0

    winner, loser = (trainer_a, trainer_b) if a_wins else (trainer_b, trainer_a)
    winner_mon, loser_mon = (a, b) if a_wins else (b, a)

    winner_mon.xp += 20 + loser_mon.level * 2
    winner_mon.loyalty = int(clamp(winner_mon.loyalty + 4, 0, 100))

    payout = 25 + loser_mon.level * 3
    gold_moved = min(loser.gold, payout)
    winner.gold += gold_moved
    loser.gold -= gold_moved

    delta = elo_delta(winner.elo, loser.elo)
    winner.elo += delta
    loser.elo -= delta

    loser_mon.health = max(1, math.floor(loser_mon.max_health * 0.2))

    for mon in (a, b):
        mon.stamina_current = mon.full_stamina()

    return BattleResult(
        winner_id=winner.id,
        loser_id=loser.id,
        log=log,
        winner_gold=gold_moved,
        loser_gold_loss=gold_moved,
        elo_delta=delta,
        turns=turn,
    )


def heal_automon(trainer: Trainer, target_id: Optional[str] = None) -> str:
    """Pay the healer to fully restore one creature (the most hurt by default)."""
    if trainer.gold < HEAL_COST:
        return "Not enough gold to heal."

    target = trainer.find_automon(target_id) if target_id else None
    if target is None:
        if not trainer.automons:
            return "No AutoMon available to heal."
        target = min(trainer.automons, key=lambda mon: mon.health)

    trainer.gold -= HEAL_COST
    target.health = target.max_health
    target.stamina_current = target.full_stamina()
    return f"Healed {target.nickname} for {HEAL_COST}g."


def apply_potion(trainer: Trainer, target_id: Optional[str] = None) -> str:
    if not trainer.has_item("minor_potion"):
        return "No potion available."

    target = trainer.find_automon(target_id) if target_id else None
    if target is None:
        if not trainer.automons:
            return "No AutoMon available."
        target = min(trainer.automons, key=lambda mon: mon.health)

    potion = ITEM_BY_ID["minor_potion"]
    inventory_add(trainer.inventory, "minor_potion", -1)
    target.health = int(clamp(target.health + potion.effect("automon_health", 20), 0, target.max_health))
    return f"{trainer.name} used a potion on {target.nickname}."
