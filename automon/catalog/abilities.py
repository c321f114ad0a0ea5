"""Ability table: one starter move and one evolved move per element."""

from __future__ import annotations

from typing import Dict, List

from .schemas import AbilityDef


ABILITIES: List[AbilityDef] = [
    AbilityDef(id="ember_burst", name="Ember Burst", element="fire", power=18, stamina_cost=10, unlock_level=1),
    AbilityDef(id="flare_lash", name="Flare Lash", element="fire", power=28, stamina_cost=18, unlock_level=8),
    AbilityDef(id="tidal_jab", name="Tidal Jab", element="water", power=17, stamina_cost=9, unlock_level=1),
    AbilityDef(id="wave_crush", name="Wave Crush", element="water", power=29, stamina_cost=18, unlock_level=9),
    AbilityDef(id="stone_knuckle", name="Stone Knuckle", element="earth", power=20, stamina_cost=11, unlock_level=1),
    AbilityDef(id="fault_spike", name="Fault Spike", element="earth", power=31, stamina_cost=20, unlock_level=10),
    AbilityDef(id="gale_slice", name="Gale Slice", element="air", power=16, stamina_cost=8, unlock_level=1),
    AbilityDef(id="cyclone_drive", name="Cyclone Drive", element="air", power=27, stamina_cost=17, unlock_level=8),
    AbilityDef(id="volt_peck", name="Volt Peck", element="electric", power=19, stamina_cost=10, unlock_level=1),
    AbilityDef(id="thunder_roll", name="Thunder Roll", element="electric", power=30, stamina_cost=19, unlock_level=9),
    AbilityDef(id="shade_bite", name="Shade Bite", element="shadow", power=21, stamina_cost=12, unlock_level=1),
    AbilityDef(id="night_maw", name="Night Maw", element="shadow", power=33, stamina_cost=20, unlock_level=11),
    AbilityDef(id="lumen_strike", name="Lumen Strike", element="light", power=21, stamina_cost=12, unlock_level=1),
    AbilityDef(id="solar_surge", name="Solar Surge", element="light", power=32, stamina_cost=20, unlock_level=11),
]

ABILITY_BY_ID: Dict[str, AbilityDef] = {ability.id: ability for ability in ABILITIES}
