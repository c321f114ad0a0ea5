"""Integrity checks for the static catalogs and the world map."""

from automon.catalog import (
    ABILITY_BY_ID,
    ITEM_BY_ID,
    LOCATION_BY_ID,
    LOCATIONS,
    SPECIES,
    SPECIES_BY_ID,
    STARTING_INVENTORY,
    STARTING_LOCATION,
    WORLD_MAP,
)


def test_catalog_sizes():
    assert len(SPECIES) == 14
    assert len(ABILITY_BY_ID) == 14
    assert len(ITEM_BY_ID) == 14
    assert len(LOCATIONS) == 9


def test_species_references_resolve():
    for species in SPECIES:
        for ability_id in species.base_abilities:
            assert ability_id in ABILITY_BY_ID, (species.id, ability_id)
        if species.evolves_to:
            assert species.evolves_to in SPECIES_BY_ID
            assert species.evolve_at_level is not None


def test_evolution_pairs_do_not_chain():
    evolved_ids = {s.evolves_to for s in SPECIES if s.evolves_to}
    assert len(evolved_ids) == 7
    for evolved_id in evolved_ids:
        assert SPECIES_BY_ID[evolved_id].evolves_to is None


def test_locations_reference_known_nodes_and_species():
    for location in LOCATIONS:
        for edge in location.connections:
            assert edge.to in LOCATION_BY_ID
            assert edge.travel_ticks >= 1
        for spawn in location.spawn_table:
            assert spawn.species_id in SPECIES_BY_ID
            assert spawn.min_level <= spawn.max_level


def test_starting_kit_is_valid():
    assert STARTING_LOCATION in LOCATION_BY_ID
    for item_id in STARTING_INVENTORY:
        assert item_id in ITEM_BY_ID


def test_world_map_routes():
    neighbors = WORLD_MAP.neighbors(STARTING_LOCATION)
    assert neighbors
    first = neighbors[0]
    assert WORLD_MAP.travel_ticks(STARTING_LOCATION, first) == WORLD_MAP.edge(STARTING_LOCATION, first).travel_ticks
    assert WORLD_MAP.shortest_route(STARTING_LOCATION, STARTING_LOCATION) == [STARTING_LOCATION]
    assert WORLD_MAP.shortest_route(STARTING_LOCATION, "nowhere") is None

    for location in LOCATIONS:
        route = WORLD_MAP.shortest_route(STARTING_LOCATION, location.id)
        assert route is not None, location.id
        assert route[0] == STARTING_LOCATION and route[-1] == location.id
        for src, dst in zip(route, route[1:]):
            assert WORLD_MAP.edge(src, dst) is not None


def test_world_map_describe_is_json_ready():
    described = WORLD_MAP.describe()
    assert {row["id"] for row in described} == set(LOCATION_BY_ID)
    assert all(isinstance(row["connections"], list) for row in described)
