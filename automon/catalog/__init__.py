"""Static reference catalogs: species, abilities, items and locations.

All tables are immutable and indexed by id. World constants (weather and
time-of-day cycles, starting kit) live here too so seeding and rules read
from one place.
"""

from typing import Dict, List

from .abilities import ABILITIES, ABILITY_BY_ID
from .graph import LocationGraph, WORLD_MAP
from .items import ITEMS, ITEM_BY_ID
from .locations import LOCATIONS, LOCATION_BY_ID
from .schemas import (
    AbilityDef,
    BaseStats,
    Element,
    ItemDef,
    LocationConnection,
    LocationDef,
    Rarity,
    SpawnEntry,
    SpeciesDef,
)
from .species import SPECIES, SPECIES_BY_ID

WEATHER_STATES: List[str] = ["clear", "rain", "storm", "fog", "heat"]
TIME_STATES: List[str] = ["dawn", "morning", "afternoon", "evening", "night"]

STARTING_LOCATION = "starter_town"

STARTING_INVENTORY: Dict[str, int] = {
    "trail_ration": 3,
    "automon_chow": 4,
    "bait": 4,
    "basic_trap": 2,
    "quick_berries_seed": 2,
}

__all__ = [
    "ABILITIES",
    "ABILITY_BY_ID",
    "ITEMS",
    "ITEM_BY_ID",
    "LOCATIONS",
    "LOCATION_BY_ID",
    "SPECIES",
    "SPECIES_BY_ID",
    "WEATHER_STATES",
    "TIME_STATES",
    "STARTING_LOCATION",
    "STARTING_INVENTORY",
    "LocationGraph",
    "WORLD_MAP",
    "AbilityDef",
    "BaseStats",
    "Element",
    "ItemDef",
    "LocationConnection",
    "LocationDef",
    "Rarity",
    "SpawnEntry",
    "SpeciesDef",
]
