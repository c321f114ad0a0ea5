"""Location table: legal actions, weighted travel edges and spawn tables."""

from __future__ import annotations

from typing import Dict, List

from .schemas import LocationConnection, LocationDef, SpawnEntry


def _edge(to: str, travel_ticks: int) -> LocationConnection:
    return LocationConnection(to=to, travel_ticks=travel_ticks)


def _spawn(species_id: str, weight: float, min_level: int, max_level: int) -> SpawnEntry:
    return SpawnEntry(species_id=species_id, weight=weight, min_level=min_level, max_level=max_level)


LOCATIONS: List[LocationDef] = [
    LocationDef(
        id="starter_town",
        name="Starter Town",
        danger_level=1,
        actions=["rest", "sleep", "eat", "buy", "sell", "heal_automon", "travel"],
        connections=[
            _edge("town_arena", 1),
            _edge("green_meadows", 1),
            _edge("town_market", 1),
            _edge("community_farm", 1),
        ],
        spawn_table=[
            _spawn("cindercub", 3, 1, 4),
            _spawn("sparkit", 3, 1, 4),
            _spawn("lumina", 1, 4, 6),
        ],
    ),
    LocationDef(
        id="town_arena",
        name="Town Arena",
        danger_level=2,
        actions=["battle_pve", "battle_pvp", "train_automon", "travel"],
        connections=[_edge("starter_town", 1), _edge("town_market", 1)],
    ),
    LocationDef(
        id="green_meadows",
        name="Green Meadows",
        danger_level=2,
        actions=["explore", "catch_automon", "gather", "travel"],
        connections=[
            _edge("starter_town", 1),
            _edge("old_pond", 1),
            _edge("dark_forest", 2),
        ],
        spawn_table=[
            _spawn("sparkit", 6, 1, 7),
            _spawn("spriglet", 6, 1, 7),
            _spawn("mistrail", 3, 3, 8),
        ],
    ),
    LocationDef(
        id="old_pond",
        name="Old Pond",
        danger_level=2,
        actions=["fish", "explore", "catch_automon", "travel"],
        connections=[_edge("green_meadows", 1), _edge("river_delta", 2)],
        spawn_table=[
            _spawn("drizzlefin", 8, 2, 8),
            _spawn("mistrail", 2, 3, 7),
        ],
    ),
    LocationDef(
        id="community_farm",
        name="Community Farm",
        danger_level=1,
        actions=["plant", "water", "harvest", "travel"],
        connections=[_edge("starter_town", 1), _edge("town_market", 1)],
        spawn_table=[_spawn("spriglet", 4, 1, 6)],
    ),
    LocationDef(
        id="town_market",
        name="Town Market",
        danger_level=1,
        actions=["buy", "sell", "craft", "travel"],
        connections=[
            _edge("starter_town", 1),
            _edge("town_arena", 1),
            _edge("community_farm", 1),
            _edge("river_delta", 2),
        ],
    ),
    LocationDef(
        id="dark_forest",
        name="Dark Forest",
        danger_level=5,
        actions=["explore", "catch_automon", "gather", "battle_pve", "travel"],
        connections=[_edge("green_meadows", 2), _edge("crystal_caves", 2)],
        spawn_table=[
            _spawn("gloomimp", 6, 6, 13),
            _spawn("pyrofang", 2, 10, 15),
            _spawn("umbrahowl", 1, 14, 18),
        ],
    ),
    LocationDef(
        id="river_delta",
        name="River Delta",
        danger_level=3,
        actions=["fish", "catch_automon", "explore", "travel"],
        connections=[
            _edge("old_pond", 2),
            _edge("town_market", 2),
            _edge("crystal_caves", 2),
        ],
        spawn_table=[
            _spawn("drizzlefin", 5, 5, 12),
            _spawn("torrenthorn", 2, 10, 16),
            _spawn("mistrail", 3, 6, 12),
        ],
    ),
    LocationDef(
        id="crystal_caves",
        name="Crystal Caves",
        danger_level=7,
        actions=["mine", "explore", "catch_automon", "battle_pve", "travel"],
        connections=[_edge("dark_forest", 2), _edge("river_delta", 2)],
        spawn_table=[
            _spawn("aeronyx", 3, 12, 20),
            _spawn("umbrahowl", 2, 12, 20),
            _spawn("solaris", 1, 18, 24),
            _spawn("thornox", 4, 10, 17),
        ],
    ),
]

LOCATION_BY_ID: Dict[str, LocationDef] = {location.id: location for location in LOCATIONS}
