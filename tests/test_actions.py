"""Tests for the per-action handlers and dispatch."""

import random

from automon.actions import (
    ACTION_HANDLERS,
    ActionKind,
    PVP_ENTRY_FEE,
    crop_ready,
    resolve_action,
)
from automon.schemas import AgentDecision, GameState, MarketState, Stats, Trainer
from automon.seed import create_automon
from automon.simulation_rules import WorldRules


class FixedRoll(random.Random):
    """Seeded generator whose uniform draws always return ``value``."""

    def __init__(self, value, seed=0):
        super().__init__(seed)
        self.value = value

    def random(self):
        return self.value


def make_trainer(trainer_id="tr_a", name="Vic", location_id="starter_town", **fields):
    fields.setdefault("automons", [create_automon("sparkit", 4, random.Random(8))])
    return Trainer(id=trainer_id, name=name, location_id=location_id, **fields)


def make_rules(*trainers, rng=None):
    state = GameState(trainers=list(trainers), market=MarketState())
    return WorldRules(state, rng=rng or random.Random(4))


def act(rules, trainer, action, target=None):
    decision = AgentDecision(action=action, target=target, reasoning="test")
    return resolve_action(rules, trainer, decision)


def last_message(rules):
    return rules.state.events[-1].message


def test_every_kind_has_a_handler():
    assert set(ACTION_HANDLERS) == set(ActionKind)


def test_parse_maps_unknown_and_illegal_names_to_idle():
    assert ActionKind.parse(" Fish ") is ActionKind.FISH
    assert ActionKind.parse("dance") is ActionKind.IDLE
    assert ActionKind.parse("fish", ["rest", "travel"]) is ActionKind.IDLE
    assert ActionKind.parse("rest", ["rest", "travel"]) is ActionKind.REST


def test_illegal_action_idles_with_explanation():
    trainer = make_trainer()
    rules = make_rules(trainer)

    kind = act(rules, trainer, "fish")

    assert kind is ActionKind.IDLE
    assert last_message(rules) == "Vic idles (cannot fish here)."
    assert rules.state.events[-1].reasoning == "test"


def test_eat_ignores_non_food_targets():
    trainer = make_trainer(hunger=40, inventory={"bait": 1, "trail_ration": 1})
    rules = make_rules(trainer)

    act(rules, trainer, "eat", "bait")

    assert trainer.hunger == 65
    assert trainer.inventory == {"bait": 1}


def test_eat_without_food():
    trainer = make_trainer(hunger=40)
    rules = make_rules(trainer)

    act(rules, trainer, "eat")

    assert trainer.hunger == 40
    assert last_message(rules) == "Vic tried to eat but has no food."


def test_feed_prefers_lux_chow():
    trainer = make_trainer(inventory={"automon_chow": 1, "lux_chow": 1})
    mon = trainer.automons[0]
    mon.hunger, mon.loyalty = 20, 50
    rules = make_rules(trainer)

    act(rules, trainer, "feed_automon", mon.id)

    assert mon.hunger == 75
    assert mon.loyalty == 61
    assert trainer.inventory == {"automon_chow": 1}


def test_successful_fishing():
    trainer = make_trainer(location_id="old_pond", energy=50, inventory={"bait": 1})
    rules = make_rules(trainer, rng=FixedRoll(0.1))

    act(rules, trainer, "fish")

    assert trainer.energy == 45
    assert trainer.gold == 126
    assert trainer.inventory == {"trail_ration": 1}
    assert last_message(rules) == "Vic landed a catch and found Trail Ration."


def test_unlucky_fishing_still_spends_bait():
    trainer = make_trainer(location_id="old_pond", inventory={"bait": 2})
    rules = make_rules(trainer, rng=FixedRoll(0.99))

    act(rules, trainer, "fish")

    assert trainer.inventory == {"bait": 1}
    assert trainer.gold == 120
    assert last_message(rules) == "Vic fished with no luck."


def test_fishing_needs_bait():
    trainer = make_trainer(location_id="old_pond")
    rules = make_rules(trainer)

    act(rules, trainer, "fish")

    assert last_message(rules) == "Vic failed to fish (needs energy and bait)."


def test_mine_draws_from_the_ore_pool():
    trainer = make_trainer(location_id="crystal_caves", energy=50)
    rules = make_rules(trainer, rng=random.Random(2))

    act(rules, trainer, "mine")

    assert trainer.energy == 42
    assert set(trainer.inventory) <= {"ore", "herb"}
    assert sum(trainer.inventory.values()) == 1


def test_buy_and_sell_use_market_prices():
    trainer = make_trainer(location_id="town_market", gold=100, inventory={"bait": 1})
    rules = make_rules(trainer)
    rules.state.market.prices = {"trail_ration": 10, "bait": 6}

    act(rules, trainer, "buy", "trail_ration")
    assert trainer.gold == 90
    assert trainer.inventory["trail_ration"] == 1

    act(rules, trainer, "sell", "bait")
    assert trainer.gold == 94
    assert "bait" not in trainer.inventory


def test_buy_refuses_when_broke():
    trainer = make_trainer(gold=3)
    rules = make_rules(trainer)

    act(rules, trainer, "buy", "hearty_meal")

    assert trainer.gold == 3
    assert last_message(rules) == "Vic couldn't afford Hearty Meal."


def test_craft_turns_materials_into_a_potion():
    trainer = make_trainer(location_id="town_market", inventory={"herb": 1, "fiber": 2})
    rules = make_rules(trainer)

    act(rules, trainer, "craft")

    assert trainer.inventory == {"fiber": 1, "minor_potion": 1}


def test_plant_water_and_harvest():
    trainer = make_trainer(location_id="community_farm", inventory={"quick_berries_seed": 1})
    rules = make_rules(trainer)

    act(rules, trainer, "plant")
    act(rules, trainer, "water")
    crop = trainer.crops[0]
    assert crop.growth_ticks == 3 and crop.watered_ticks == 1

    rules.state.tick = 1
    act(rules, trainer, "harvest")
    assert last_message(rules) == "Vic tried to harvest but crops are not ready."

    rules.state.tick = 2
    assert crop_ready(crop, 2)
    act(rules, trainer, "harvest")
    assert trainer.crops == []
    assert trainer.inventory == {"trail_ration": 2}


def test_catch_adds_creature_and_spends_trap():
    trainer = make_trainer(location_id="green_meadows", inventory={"basic_trap": 1})
    rules = make_rules(trainer, rng=FixedRoll(0.0, seed=3))

    act(rules, trainer, "catch_automon")

    assert len(trainer.automons) == 2
    caught = trainer.automons[-1]
    assert caught.id.startswith("am_")
    assert caught.loyalty == 55 and caught.hunger == 75
    assert "basic_trap" not in trainer.inventory
    assert last_message(rules).startswith("Vic caught a ")


def test_catch_refuses_when_stable_is_full():
    trainer = make_trainer(location_id="green_meadows", stable_capacity=1, inventory={"basic_trap": 1})
    rules = make_rules(trainer)

    act(rules, trainer, "catch_automon")

    assert trainer.inventory == {"basic_trap": 1}
    assert last_message(rules) == "Vic's stable is full."


def test_release_keeps_the_last_creature():
    trainer = make_trainer()
    starter = trainer.automons[0]
    rules = make_rules(trainer)

    act(rules, trainer, "release_automon")
    assert trainer.automons == [starter]
    assert last_message(rules) == "Vic cannot release that AutoMon."

    spare = create_automon("spriglet", 3, random.Random(5))
    trainer.automons.append(spare)
    act(rules, trainer, "release_automon", spare.id)
    assert trainer.automons == [starter]
    assert last_message(rules) == "Vic released Spriglet."


def test_travel_to_a_distant_location_takes_the_first_hop():
    trainer = make_trainer()
    rules = make_rules(trainer)
    rules.state.tick = 7

    act(rules, trainer, "travel", "old_pond")

    assert trainer.busy_action == "travel"
    assert trainer.pending_travel_to == "green_meadows"
    assert trainer.busy_until_tick == 8
    assert trainer.location_id == "starter_town"


def test_travel_uses_edge_cost():
    trainer = make_trainer(location_id="town_market")
    rules = make_rules(trainer)

    act(rules, trainer, "travel", "river_delta")

    assert trainer.pending_travel_to == "river_delta"
    assert trainer.busy_until_tick == 2
    assert last_message(rules) == "Vic travels to River Delta (2 ticks)."


def test_unknown_travel_target_takes_first_connection():
    trainer = make_trainer()
    rules = make_rules(trainer)

    act(rules, trainer, "travel", "atlantis")

    assert trainer.pending_travel_to == "town_arena"


def test_pve_win_pays_out_without_touching_elo():
    champion = create_automon("pyrofang", 20, random.Random(6))
    champion.stats = Stats(attack=200, defense=100, speed=200, stamina=40)
    champion.max_health = champion.health = 500
    trainer = make_trainer(location_id="dark_forest", automons=[champion])
    rules = make_rules(trainer, rng=random.Random(12))

    act(rules, trainer, "battle_pve")

    assert trainer.elo == 1000
    assert trainer.gold > 120
    assert trainer.energy == 78
    assert any(event.message.startswith("Vic won a PvE battle vs ") for event in rules.state.events)


def test_pve_fights_with_the_first_living_creature():
    fainted = create_automon("sparkit", 4, random.Random(8))
    fainted.health = 0
    champion = create_automon("pyrofang", 20, random.Random(6))
    champion.stats = Stats(attack=200, defense=100, speed=200, stamina=40)
    champion.max_health = champion.health = 500
    trainer = make_trainer(location_id="dark_forest", automons=[fainted, champion])
    rules = make_rules(trainer, rng=random.Random(12))

    act(rules, trainer, "battle_pve")

    assert any(event.message.startswith("Vic won a PvE battle vs ") for event in rules.state.events)
    assert champion.xp > 0
    assert fainted.health == 0 and fainted.xp == 0


def test_pve_without_a_living_creature_costs_nothing():
    fainted = create_automon("sparkit", 4, random.Random(8))
    fainted.health = 0
    trainer = make_trainer(location_id="dark_forest", automons=[fainted])
    rules = make_rules(trainer)

    act(rules, trainer, "battle_pve")

    assert trainer.energy == 90
    assert last_message(rules) == "Vic can't start PvE battle right now."


def _duelist(trainer_id, name, species_id, element, attack, speed):
    mon = create_automon(species_id, 5, random.Random(1))
    mon.id = f"am_{trainer_id}"
    mon.stats = Stats(attack=attack, defense=10, speed=speed, stamina=20)
    mon.abilities = ["stone_knuckle"]
    mon.element = element
    mon.stamina_current = 40
    return make_trainer(trainer_id, name, location_id="town_arena", automons=[mon])


def test_pvp_pays_the_pot_to_the_winner():
    ash = _duelist("tr_ash", "Ash", "cindercub", "fire", attack=20, speed=15)
    brock = _duelist("tr_brock", "Brock", "spriglet", "earth", attack=15, speed=10)
    rules = make_rules(ash, brock)
    gold_before = ash.gold + brock.gold

    act(rules, ash, "battle_pvp", "tr_brock")

    assert ash.gold + brock.gold == gold_before
    assert ash.elo + brock.elo == 2000
    assert ash.elo > brock.elo
    assert ash.energy == 75
    assert brock.energy == 82
    assert brock.gold < 120 - PVP_ENTRY_FEE
    assert any("Winner: Ash" in event.message for event in rules.state.events)


def test_arena_has_no_wild_opponents():
    trainer = make_trainer(location_id="town_arena")
    rules = make_rules(trainer)

    act(rules, trainer, "battle_pve")

    assert trainer.energy == 78
    assert last_message(rules) == "Vic found no suitable PvE opponent."


def test_pvp_needs_a_rival_nearby():
    trainer = make_trainer(location_id="town_arena")
    rules = make_rules(trainer)

    act(rules, trainer, "battle_pvp")

    assert trainer.gold == 120
    assert last_message(rules) == "Vic looked for PvP but found no rivals nearby."


def test_train_awards_xp_to_lead():
    trainer = make_trainer(location_id="town_arena")
    rules = make_rules(trainer)

    act(rules, trainer, "train_automon")

    assert trainer.automons[0].xp == 14
    assert trainer.energy == 80


def test_heal_and_potion_actions():
    trainer = make_trainer(gold=50, inventory={"minor_potion": 1})
    mon = trainer.automons[0]
    mon.health = 5
    rules = make_rules(trainer)

    act(rules, trainer, "use_item", mon.id)
    assert mon.health == 30

    act(rules, trainer, "heal_automon")
    assert mon.health == mon.max_health
    assert trainer.gold == 15
