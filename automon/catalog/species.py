"""Species table. Each common/uncommon species evolves into a stronger form."""

from __future__ import annotations

from typing import Dict, List

from .schemas import BaseStats, SpeciesDef


def _stats(attack: int, defense: int, speed: int, stamina: int) -> BaseStats:
    return BaseStats(attack=attack, defense=defense, speed=speed, stamina=stamina)


SPECIES: List[SpeciesDef] = [
    SpeciesDef(
        id="sparkit", name="Sparkit", element="electric", rarity="common",
        habitats=["green_meadows"], base_stats=_stats(8, 6, 10, 12),
        personality_pool=["playful", "bold", "curious"],
        evolve_at_level=10, evolves_to="voltruff", base_abilities=["volt_peck"],
    ),
    SpeciesDef(
        id="voltruff", name="Voltruff", element="electric", rarity="rare",
        habitats=["river_delta", "crystal_caves"], base_stats=_stats(14, 10, 16, 16),
        personality_pool=["fierce", "loyal"],
        base_abilities=["volt_peck", "thunder_roll"],
    ),
    SpeciesDef(
        id="spriglet", name="Spriglet", element="earth", rarity="common",
        habitats=["green_meadows", "community_farm"], base_stats=_stats(9, 9, 7, 12),
        personality_pool=["calm", "gentle", "stubborn"],
        evolve_at_level=12, evolves_to="thornox", base_abilities=["stone_knuckle"],
    ),
    SpeciesDef(
        id="thornox", name="Thornox", element="earth", rarity="rare",
        habitats=["dark_forest", "crystal_caves"], base_stats=_stats(16, 15, 8, 18),
        personality_pool=["stoic", "guarded"],
        base_abilities=["stone_knuckle", "fault_spike"],
    ),
    SpeciesDef(
        id="cindercub", name="Cindercub", element="fire", rarity="common",
        habitats=["starter_town", "dark_forest"], base_stats=_stats(10, 7, 9, 11),
        personality_pool=["brash", "friendly", "reckless"],
        evolve_at_level=11, evolves_to="pyrofang", base_abilities=["ember_burst"],
    ),
    SpeciesDef(
        id="pyrofang", name="Pyrofang", element="fire", rarity="rare",
        habitats=["dark_forest", "crystal_caves"], base_stats=_stats(17, 11, 13, 15),
        personality_pool=["feral", "proud"],
        base_abilities=["ember_burst", "flare_lash"],
    ),
    SpeciesDef(
        id="drizzlefin", name="Drizzlefin", element="water", rarity="common",
        habitats=["old_pond", "river_delta"], base_stats=_stats(9, 8, 8, 13),
        personality_pool=["chill", "social", "timid"],
        evolve_at_level=10, evolves_to="torrenthorn", base_abilities=["tidal_jab"],
    ),
    SpeciesDef(
        id="torrenthorn", name="Torrenthorn", element="water", rarity="rare",
        habitats=["river_delta"], base_stats=_stats(15, 12, 10, 18),
        personality_pool=["confident", "watchful"],
        base_abilities=["tidal_jab", "wave_crush"],
    ),
    SpeciesDef(
        id="mistrail", name="Mistrail", element="air", rarity="uncommon",
        habitats=["green_meadows", "river_delta"], base_stats=_stats(8, 7, 14, 12),
        personality_pool=["skittish", "clever", "restless"],
        evolve_at_level=13, evolves_to="aeronyx", base_abilities=["gale_slice"],
    ),
    SpeciesDef(
        id="aeronyx", name="Aeronyx", element="air", rarity="epic",
        habitats=["crystal_caves"], base_stats=_stats(14, 11, 19, 17),
        personality_pool=["precise", "aloof"],
        base_abilities=["gale_slice", "cyclone_drive"],
    ),
    SpeciesDef(
        id="gloomimp", name="Gloomimp", element="shadow", rarity="uncommon",
        habitats=["dark_forest"], base_stats=_stats(12, 8, 11, 13),
        personality_pool=["sly", "greedy", "chaotic"],
        evolve_at_level=14, evolves_to="umbrahowl", base_abilities=["shade_bite"],
    ),
    SpeciesDef(
        id="umbrahowl", name="Umbrahowl", element="shadow", rarity="epic",
        habitats=["dark_forest", "crystal_caves"], base_stats=_stats(19, 12, 14, 18),
        personality_pool=["menacing", "cold"],
        base_abilities=["shade_bite", "night_maw"],
    ),
    SpeciesDef(
        id="lumina", name="Lumina", element="light", rarity="epic",
        habitats=["starter_town", "crystal_caves"], base_stats=_stats(16, 14, 12, 17),
        personality_pool=["kind", "noble"],
        evolve_at_level=18, evolves_to="solaris", base_abilities=["lumen_strike"],
    ),
    SpeciesDef(
        id="solaris", name="Solaris", element="light", rarity="legendary",
        habitats=["crystal_caves"], base_stats=_stats(23, 18, 15, 22),
        personality_pool=["regal", "unyielding"],
        base_abilities=["lumen_strike", "solar_surge"],
    ),
]

SPECIES_BY_ID: Dict[str, SpeciesDef] = {species.id: species for species in SPECIES}
