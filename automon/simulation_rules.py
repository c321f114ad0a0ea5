"""
Deterministic world physics for AutoMon.

``WorldRules`` owns everything about a tick that can be calculated without
asking the reasoning service: the calendar, market drift, survival needs,
busy-window completion, XP and evolution, wild spawns and the per-trainer
decision context. Action handlers (``automon.actions``) call back into it to
log events and award XP.

A ``WorldRules`` instance wraps one working ``GameState``. The engine builds a
fresh instance over a deep copy each tick and only commits the copy when the
whole tick succeeds.

Design principle: if it can be calculated, calculate it (don't ask the LLM).
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from automon.catalog import (
    ABILITY_BY_ID,
    ITEMS,
    LOCATION_BY_ID,
    SPECIES_BY_ID,
    STARTING_LOCATION,
    TIME_STATES,
    WEATHER_STATES,
    LocationDef,
)
from automon.rng import clamp, rand_int, sample, weighted_choice
from automon.schemas import (
    AgentContext,
    AutoMon,
    EventLog,
    GameConfig,
    GameState,
    NearbyAgent,
    Trainer,
)
from automon.seed import build_leaderboard, create_wild_automon

# Legal at every location; no location lists them explicitly.
UNIVERSAL_ACTIONS = ("feed_automon", "use_item", "release_automon")

RECENT_EVENT_WINDOW = 10

# Weight added to a spawn entry when the weather favours its element.
WEATHER_SPAWN_BOOST = {
    "rain": "water",
    "storm": "electric",
    "fog": "shadow",
    "heat": "fire",
}
SPAWN_BOOST = 2

RESCUE_HEALTH = 25
RESCUE_HUNGER = 25
RESCUE_ENERGY = 30


def xp_to_next(level: int) -> int:
    return 40 + level * 18


def unlock_abilities(automon: AutoMon) -> List[str]:
    """Append species abilities the creature's level now qualifies for."""
    species = SPECIES_BY_ID.get(automon.species_id)
    if species is None:
        return []
    unlocked = []
    for ability_id in species.base_abilities:
        ability = ABILITY_BY_ID.get(ability_id)
        if ability and ability.unlock_level <= automon.level and ability_id not in automon.abilities:
            automon.abilities.append(ability_id)
            unlocked.append(ability.name)
    return unlocked


def evolve_if_eligible(automon: AutoMon) -> Optional[str]:
    """Evolve once if the creature has reached its species' threshold.

    Returns the announcement, or None when nothing happened. The evolved
    species is checked again only on the next level-up, so one call never
    chains through two evolutions.
    """

    species = SPECIES_BY_ID.get(automon.species_id)
    if species is None or not species.evolve_at_level or not species.evolves_to:
        return None
    if automon.level < species.evolve_at_level:
        return None

    evolved = SPECIES_BY_ID.get(species.evolves_to)
    if evolved is None:
        return None

    automon.species_id = evolved.id
    automon.nickname = evolved.name
    automon.element = evolved.element
    automon.max_health += 18
    automon.health = int(clamp(automon.health + 15, 1, automon.max_health))
    automon.stats.attack += 5
    automon.stats.defense += 4
    automon.stats.speed += 4
    automon.stats.stamina += 4

    for ability_id in evolved.base_abilities:
        if ability_id not in automon.abilities:
            automon.abilities.append(ability_id)
    return f"{species.name} evolved into {evolved.name}!"


def fishing_chance(location_id: str, weather: str) -> float:
    chance = 0.58
    if location_id == "river_delta":
        chance += 0.12
    if weather == "rain":
        chance += 0.10
    if weather == "storm":
        chance -= 0.15
    return chance


def catch_chance(wild: AutoMon, own_level: int, trap_id: str) -> float:
    """Probability of a successful catch, always within [0.05, 0.9]."""
    trap_bonus = 0.30 if trap_id == "pro_trap" else 0.15
    health_factor = 1 - wild.health_fraction
    level_penalty = max(0, wild.level - own_level) * 0.03
    return clamp(0.25 + trap_bonus + health_factor - level_penalty, 0.05, 0.9)


def market_bounds(base_price: int) -> tuple[int, int]:
    return max(1, math.floor(base_price * 0.6)), math.floor(base_price * 1.8)


class WorldRules:
    """Per-tick physics over one working ``GameState``."""

    def __init__(
        self,
        state: GameState,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.state = state
        self.config = config or GameConfig()
        self.rng = rng

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------

    def add_event(
        self,
        event_type: str,
        message: str,
        trainer_id: Optional[str] = None,
        reasoning: Optional[str] = None,
    ) -> EventLog:
        """Append to the event log, keeping only the newest ``max_log_entries``."""
        event = EventLog(
            tick=self.state.tick,
            day=self.state.day,
            type=event_type,
            message=message,
            trainer_id=trainer_id,
            reasoning=reasoning,
        )
        self.state.events.append(event)
        overflow = len(self.state.events) - self.config.max_log_entries
        if overflow > 0:
            del self.state.events[:overflow]
        return event

    # ------------------------------------------------------------------
    # Passive world evolution
    # ------------------------------------------------------------------

    def apply_tick(self) -> None:
        """Calendar, market and survival needs: everything before decisions."""
        self.advance_calendar()
        for trainer in self.state.trainers:
            self.apply_passive_needs(trainer)

    def advance_calendar(self) -> None:
        state = self.state
        state.tick += 1
        if state.tick % self.config.ticks_per_day == 0:
            state.day += 1
            state.weather = sample(WEATHER_STATES, self.rng)
        state.time_of_day = TIME_STATES[state.tick % len(TIME_STATES)]
        self.drift_market()

    def drift_market(self) -> None:
        market = self.state.market
        for item in ITEMS:
            current = market.prices.get(item.id, item.price)
            drift = rand_int(-3, 3, self.rng)
            low, high = market_bounds(item.price)
            market.prices[item.id] = int(clamp(current + drift, low, high))
            market.trend[item.id] = "up" if drift > 0 else "down" if drift < 0 else "steady"

    def apply_passive_needs(self, trainer: Trainer) -> None:
        trainer.hunger = int(clamp(trainer.hunger - 2, 0, 100))
        trainer.energy = int(clamp(trainer.energy - 1, 0, 100))

        if trainer.hunger == 0:
            trainer.health = int(clamp(trainer.health - 4, 0, 100))
            self.add_event("survival", f"{trainer.name} is starving and loses health.", trainer.id)
        if trainer.energy == 0:
            trainer.health = int(clamp(trainer.health - 2, 0, 100))

        for automon in list(trainer.automons):
            automon.hunger = int(clamp(automon.hunger - 1, 0, 100))
            if automon.hunger == 0:
                automon.loyalty = int(clamp(automon.loyalty - 3, 0, 100))
                automon.health = int(clamp(automon.health - 2, 0, automon.max_health))
            if automon.loyalty <= 0:
                trainer.automons.remove(automon)
                self.add_event(
                    "automon",
                    f"{automon.nickname} ran away from {trainer.name} due to neglect.",
                    trainer.id,
                )

        if trainer.health <= 0:
            self.rescue(trainer)

    def rescue(self, trainer: Trainer) -> None:
        """Collapse recovery: trainers never die, they wake up back in town."""
        trainer.health = RESCUE_HEALTH
        trainer.hunger = RESCUE_HUNGER
        trainer.energy = RESCUE_ENERGY
        trainer.location_id = STARTING_LOCATION
        trainer.clear_busy()
        location = LOCATION_BY_ID[STARTING_LOCATION]
        self.add_event(
            "survival",
            f"{trainer.name} collapsed and was rescued back to {location.name}.",
            trainer.id,
        )

    def complete_busy_action(self, trainer: Trainer) -> bool:
        """Finish an expired busy window. Returns True while the trainer is still busy."""
        if trainer.busy_until_tick is None:
            return False
        if self.state.tick < trainer.busy_until_tick:
            return True

        if trainer.busy_action == "sleep":
            trainer.energy = 100
            trainer.health = int(clamp(trainer.health + 15, 0, 100))
            self.add_event("survival", f"{trainer.name} woke up fully rested.", trainer.id)
        elif trainer.busy_action == "travel" and trainer.pending_travel_to:
            trainer.location_id = trainer.pending_travel_to
            destination = LOCATION_BY_ID[trainer.location_id]
            self.add_event("travel", f"{trainer.name} arrived at {destination.name}.", trainer.id)

        trainer.clear_busy()
        return False

    # ------------------------------------------------------------------
    # Progression
    # ------------------------------------------------------------------

    def gain_xp(
        self, trainer: Trainer, amount: int, automon: Optional[AutoMon] = None
    ) -> List[str]:
        """Award XP (to the lead creature by default) and process level-ups.

        Returns the level-up and evolution announcements in order.
        """

        mon = automon or trainer.lead_automon()
        if mon is None:
            return []
        mon.xp += amount

        messages: List[str] = []
        while mon.xp >= xp_to_next(mon.level):
            mon.xp -= xp_to_next(mon.level)
            mon.level += 1
            mon.max_health += 8
            mon.health = int(clamp(mon.health + 8, 1, mon.max_health))
            mon.stats.attack += 2
            mon.stats.defense += 2
            mon.stats.speed += 1
            mon.stats.stamina += 1
            messages.append(f"{trainer.name}'s {mon.nickname} reached level {mon.level}.")
            for ability_name in unlock_abilities(mon):
                messages.append(f"{trainer.name}'s {mon.nickname} learned {ability_name}.")
            evolution = evolve_if_eligible(mon)
            if evolution:
                messages.append(f"{trainer.name}: {evolution}")
        return messages

    def pick_wild_automon(self, location: LocationDef) -> Optional[AutoMon]:
        """Roll a wild encounter from the location's spawn table.

        Weather favours one element (+2 weight) and night favours shadow and
        epic species (+2, stacking with weather).
        """

        if not location.spawn_table:
            return None

        favoured = WEATHER_SPAWN_BOOST.get(self.state.weather)
        adjusted = []
        for entry in location.spawn_table:
            species = SPECIES_BY_ID[entry.species_id]
            boost = 0
            if species.element == favoured:
                boost += SPAWN_BOOST
            if self.state.time_of_day == "night" and (
                species.element == "shadow" or species.rarity == "epic"
            ):
                boost += SPAWN_BOOST
            adjusted.append(entry.model_copy(update={"weight": entry.weight + boost}))

        chosen = weighted_choice(adjusted, self.rng)
        if chosen is None:
            return None
        level = rand_int(chosen.min_level, chosen.max_level, self.rng)
        return create_wild_automon(chosen.species_id, level, self.rng)

    # ------------------------------------------------------------------
    # Decision context
    # ------------------------------------------------------------------

    def legal_actions(self, trainer: Trainer) -> List[str]:
        location = LOCATION_BY_ID[trainer.location_id]
        actions = list(location.actions)
        actions.extend(action for action in UNIVERSAL_ACTIONS if action not in actions)
        return actions

    def validate_action(self, trainer: Trainer, action: str) -> bool:
        return action in self.legal_actions(trainer)

    def build_context(self, trainer: Trainer) -> AgentContext:
        location = LOCATION_BY_ID[trainer.location_id]
        nearby = [
            NearbyAgent(
                id=other.id,
                name=other.name,
                location_id=other.location_id,
                gold=other.gold,
                elo=other.elo,
            )
            for other in self.state.trainers
            if other.id != trainer.id and other.location_id == trainer.location_id
        ]
        return AgentContext(
            trainer=trainer,
            nearby_agents=nearby,
            available_actions=self.legal_actions(trainer),
            market=self.state.market,
            location=location,
            recent_events=self.state.events[-RECENT_EVENT_WINDOW:],
            world_tick=self.state.tick,
            day=self.state.day,
            weather=self.state.weather,
            time_of_day=self.state.time_of_day,
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def recompute_leaderboard(self) -> None:
        self.state.leaderboard = build_leaderboard(self.state.trainers)

    def format_tick_summary(self, decisions: int) -> str:
        state = self.state
        return (
            f"Tick {state.tick} | Day {state.day} | {state.weather}, {state.time_of_day} | "
            f"{decisions} decision(s)"
        )
