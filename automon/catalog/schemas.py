"""Pydantic schemas for the static reference catalogs.

Catalog rows are frozen: they are loaded once at import time and shared by
every world, so nothing in the engine may mutate them.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


Element = Literal["fire", "water", "earth", "air", "electric", "shadow", "light"]
Rarity = Literal["common", "uncommon", "rare", "epic", "legendary"]
ItemType = Literal["food", "trap", "bait", "material", "potion", "seed"]
ItemEffect = Literal[
    "trainer_hunger",
    "trainer_energy",
    "automon_hunger",
    "automon_health",
    "automon_loyalty",
]


class CatalogModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class BaseStats(CatalogModel):
    attack: int
    defense: int
    speed: int
    stamina: int


class SpeciesDef(CatalogModel):
    """A creature species. ``evolves_to`` is reached at ``evolve_at_level``."""

    id: str
    name: str
    element: Element
    rarity: Rarity
    habitats: List[str] = Field(default_factory=list)
    base_stats: BaseStats
    personality_pool: List[str] = Field(default_factory=list)
    evolve_at_level: Optional[int] = None
    evolves_to: Optional[str] = None
    base_abilities: List[str] = Field(default_factory=list)


class AbilityDef(CatalogModel):
    id: str
    name: str
    element: Element
    power: int
    stamina_cost: int
    unlock_level: int


class ItemDef(CatalogModel):
    id: str
    name: str
    type: ItemType
    price: int
    effects: Dict[ItemEffect, int] = Field(default_factory=dict)

    def effect(self, key: ItemEffect, default: int = 0) -> int:
        return self.effects.get(key, default)


class LocationConnection(CatalogModel):
    to: str
    travel_ticks: int = Field(..., ge=1)


class SpawnEntry(CatalogModel):
    species_id: str
    weight: float
    min_level: int
    max_level: int


class LocationDef(CatalogModel):
    """A map location with its legal actions, outgoing edges and wild spawns."""

    id: str
    name: str
    danger_level: int
    actions: List[str]
    connections: List[LocationConnection] = Field(default_factory=list)
    spawn_table: List[SpawnEntry] = Field(default_factory=list)
