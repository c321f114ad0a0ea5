"""World seeding: starter creatures, trainers and the fresh-world factory.

``create_initial_state`` is the single source of truth for what a new world
looks like. It runs at first boot (no snapshot yet) and on ``reset``.
"""

from __future__ import annotations

import random
import string
from typing import List, Optional, Tuple

from automon.catalog import (
    ABILITY_BY_ID,
    ITEMS,
    SPECIES_BY_ID,
    STARTING_INVENTORY,
    STARTING_LOCATION,
)
from automon.rng import rand_int, sample
from automon.schemas import (
    AutoMon,
    EventLog,
    GameState,
    LeaderboardEntry,
    MarketState,
    Stats,
    Trainer,
)

# (name, starter species) for the default roster.
DEFAULT_TRAINERS: List[Tuple[str, str]] = [
    ("Astra", "sparkit"),
    ("Bram", "drizzlefin"),
    ("Cyra", "cindercub"),
]

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_id(prefix: str, rng: Optional[random.Random] = None) -> str:
    """Short random id such as ``am_k3v9x0qa``. Seeded rngs give stable ids."""
    source = rng if rng is not None else random
    return f"{prefix}_" + "".join(source.choice(_ID_ALPHABET) for _ in range(8))


def _stats_for_level(species_id: str, level: int) -> Stats:
    base = SPECIES_BY_ID[species_id].base_stats
    return Stats(
        attack=base.attack + level,
        defense=base.defense + level // 2,
        speed=base.speed + level // 2,
        stamina=base.stamina + level // 2,
    )


def create_automon(species_id: str, level: int, rng: Optional[random.Random] = None) -> AutoMon:
    """Build an owned creature with abilities unlocked up to ``level``."""
    species = SPECIES_BY_ID[species_id]
    max_health = 60 + species.base_stats.stamina * 3 + level * 4
    abilities = [
        ability_id
        for ability_id in species.base_abilities
        if ABILITY_BY_ID[ability_id].unlock_level <= level
    ]
    return AutoMon(
        id=new_id("am", rng),
        species_id=species_id,
        nickname=species.name,
        element=species.element,
        level=level,
        xp=0,
        health=max_health,
        max_health=max_health,
        hunger=80,
        loyalty=70,
        stats=_stats_for_level(species_id, level),
        abilities=abilities,
        personality=sample(species.personality_pool, rng) if species.personality_pool else "",
        stamina_current=20 + species.base_stats.stamina,
    )


def create_wild_automon(species_id: str, level: int, rng: Optional[random.Random] = None) -> AutoMon:
    """Build a wild encounter. Wild creatures know every base ability of their species."""
    species = SPECIES_BY_ID[species_id]
    max_health = 52 + species.base_stats.stamina * 3 + level * 3
    return AutoMon(
        id=new_id("wild", rng),
        species_id=species_id,
        nickname=species.name,
        element=species.element,
        level=level,
        xp=0,
        health=max_health,
        max_health=max_health,
        hunger=100,
        loyalty=0,
        stats=_stats_for_level(species_id, level),
        abilities=list(species.base_abilities),
        personality=sample(species.personality_pool, rng) if species.personality_pool else "",
        stamina_current=20 + species.base_stats.stamina,
    )


def create_trainer(name: str, starter_species_id: str, rng: Optional[random.Random] = None) -> Trainer:
    return Trainer(
        id=new_id("tr", rng),
        name=name,
        health=100,
        energy=90,
        hunger=90,
        gold=120,
        location_id=STARTING_LOCATION,
        inventory=dict(STARTING_INVENTORY),
        stable_capacity=3,
        automons=[create_automon(starter_species_id, rand_int(3, 5, rng), rng)],
        crops=[],
        elo=1000,
    )


def build_leaderboard(trainers: List[Trainer]) -> List[LeaderboardEntry]:
    """All trainers by elo, highest first. Python's stable sort keeps roster order on ties."""
    ranked = sorted(trainers, key=lambda trainer: trainer.elo, reverse=True)
    return [LeaderboardEntry(trainer_id=t.id, elo=t.elo) for t in ranked]


def create_initial_state(rng: Optional[random.Random] = None) -> GameState:
    """Return a fresh world at tick 0, day 1, clear weather, dawn."""
    prices = {item.id: item.price for item in ITEMS}
    trainers = [create_trainer(name, species, rng) for name, species in DEFAULT_TRAINERS]
    state = GameState(
        tick=0,
        day=1,
        weather="clear",
        time_of_day="dawn",
        trainers=trainers,
        market=MarketState(prices=prices, trend={item_id: "steady" for item_id in prices}),
        events=[EventLog(tick=0, day=1, type="system", message="World initialized.")],
    )
    state.leaderboard = build_leaderboard(state.trainers)
    return state
