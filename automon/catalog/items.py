"""Item table. Prices here are the market's base prices."""

from __future__ import annotations

from typing import Dict, List

from .schemas import ItemDef


ITEMS: List[ItemDef] = [
    ItemDef(id="trail_ration", name="Trail Ration", type="food", price=12, effects={"trainer_hunger": 25}),
    ItemDef(id="hearty_meal", name="Hearty Meal", type="food", price=30, effects={"trainer_hunger": 50, "trainer_energy": 10}),
    ItemDef(id="automon_chow", name="AutoMon Chow", type="food", price=16, effects={"automon_hunger": 35, "automon_loyalty": 3}),
    ItemDef(id="lux_chow", name="Lux Chow", type="food", price=40, effects={"automon_hunger": 55, "automon_loyalty": 8}),
    ItemDef(id="basic_trap", name="Basic Trap", type="trap", price=20),
    ItemDef(id="pro_trap", name="Pro Trap", type="trap", price=45),
    ItemDef(id="bait", name="Bait", type="bait", price=6),
    ItemDef(id="ore", name="Ore", type="material", price=18),
    ItemDef(id="fiber", name="Fiber", type="material", price=10),
    ItemDef(id="herb", name="Herb", type="material", price=14),
    ItemDef(id="minor_potion", name="Minor Potion", type="potion", price=24, effects={"automon_health": 25}),
    ItemDef(id="quick_berries_seed", name="Quick Berries Seed", type="seed", price=8),
    ItemDef(id="hearty_roots_seed", name="Hearty Roots Seed", type="seed", price=14),
    ItemDef(id="golden_apples_seed", name="Golden Apples Seed", type="seed", price=28),
]

ITEM_BY_ID: Dict[str, ItemDef] = {item.id: item for item in ITEMS}
