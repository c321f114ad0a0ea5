"""Tests for the deterministic world physics."""

import random

import pytest

from automon.actions import SLEEP_TICKS, handle_sleep
from automon.catalog import ITEMS, LOCATION_BY_ID, STARTING_LOCATION, TIME_STATES
from automon.schemas import AgentDecision, GameConfig, GameState, MarketState, Trainer
from automon.seed import create_automon, create_initial_state, create_wild_automon
from automon import simulation_rules
from automon.simulation_rules import (
    RECENT_EVENT_WINDOW,
    WorldRules,
    catch_chance,
    evolve_if_eligible,
    fishing_chance,
    market_bounds,
    xp_to_next,
)


def make_trainer(trainer_id="tr_a", name="Vic", location_id="starter_town", **fields):
    fields.setdefault("automons", [create_automon("sparkit", 4, random.Random(8))])
    return Trainer(id=trainer_id, name=name, location_id=location_id, **fields)


def make_rules(*trainers, config=None, seed=4):
    state = GameState(trainers=list(trainers), market=MarketState())
    return WorldRules(state, config=config, rng=random.Random(seed))


def test_xp_curve():
    assert xp_to_next(1) == 58
    assert xp_to_next(10) == 220


def test_passive_needs_decay():
    trainer = make_trainer()
    rules = make_rules(trainer)

    rules.apply_passive_needs(trainer)

    assert trainer.hunger == 88
    assert trainer.energy == 89
    assert trainer.health == 100
    assert trainer.automons[0].hunger == 79


def test_starvation_and_exhaustion_cost_health():
    trainer = make_trainer(hunger=1, energy=1)
    rules = make_rules(trainer)

    rules.apply_passive_needs(trainer)

    assert trainer.hunger == 0 and trainer.energy == 0
    assert trainer.health == 94
    assert any("starving" in event.message for event in rules.state.events)


def test_neglected_creature_runs_away():
    trainer = make_trainer()
    mon = trainer.automons[0]
    mon.hunger = 0
    mon.loyalty = 3
    rules = make_rules(trainer)

    rules.apply_passive_needs(trainer)

    assert trainer.automons == []
    assert rules.state.events[-1].message == f"{mon.nickname} ran away from Vic due to neglect."


def test_collapse_rescues_trainer_and_clears_busy_state():
    trainer = make_trainer(
        location_id="dark_forest",
        health=3,
        hunger=1,
        busy_action="travel",
        busy_until_tick=9,
        pending_travel_to="crystal_caves",
    )
    rules = make_rules(trainer)

    rules.apply_passive_needs(trainer)

    assert trainer.health == 25
    assert trainer.hunger == 25
    assert trainer.energy == 30
    assert trainer.location_id == STARTING_LOCATION
    assert not trainer.busy
    assert trainer.pending_travel_to is None
    assert rules.state.events[-1].message == "Vic collapsed and was rescued back to Starter Town."


def test_sleep_window_completes_after_six_ticks():
    trainer = make_trainer(energy=20, health=50)
    rules = make_rules(trainer)
    handle_sleep(rules, trainer, AgentDecision(action="sleep", reasoning="Exhausted."))

    assert trainer.busy_until_tick == SLEEP_TICKS
    for tick in range(1, SLEEP_TICKS):
        rules.state.tick = tick
        assert rules.complete_busy_action(trainer) is True
        assert trainer.energy == 20

    rules.state.tick = SLEEP_TICKS
    assert rules.complete_busy_action(trainer) is False
    assert trainer.energy == 100
    assert trainer.health == 65
    assert not trainer.busy


def test_travel_window_moves_trainer_on_arrival():
    trainer = make_trainer(busy_action="travel", busy_until_tick=3, pending_travel_to="old_pond")
    rules = make_rules(trainer)
    rules.state.tick = 3

    assert rules.complete_busy_action(trainer) is False
    assert trainer.location_id == "old_pond"
    assert rules.state.events[-1].message == "Vic arrived at Old Pond."


def test_calendar_rolls_day_and_time():
    rules = make_rules(make_trainer(), config=GameConfig(ticks_per_day=4))

    for _ in range(4):
        rules.advance_calendar()

    assert rules.state.tick == 4
    assert rules.state.day == 2
    assert rules.state.time_of_day == TIME_STATES[4 % len(TIME_STATES)]


def test_market_drift_stays_within_bounds():
    rules = make_rules(make_trainer(), seed=21)

    for _ in range(300):
        rules.drift_market()

    for item in ITEMS:
        low, high = market_bounds(item.price)
        assert low <= rules.state.market.prices[item.id] <= high
        assert rules.state.market.trend[item.id] in ("up", "down", "steady")


def test_market_bounds_never_reach_zero():
    assert market_bounds(1) == (1, 1)
    assert market_bounds(10) == (6, 18)


def test_level_up_evolves_once():
    mon = create_automon("sparkit", 9, random.Random(3))
    trainer = make_trainer(automons=[mon])
    rules = make_rules(trainer)

    messages = rules.gain_xp(trainer, xp_to_next(9))

    assert mon.level == 10
    assert mon.xp == 0
    assert mon.species_id == "voltruff"
    assert mon.nickname == "Voltruff"
    assert "thunder_roll" in mon.abilities
    assert mon.stats.attack == 8 + 9 + 2 + 5
    assert mon.max_health == 132 + 8 + 18
    assert messages[0] == "Vic's Sparkit reached level 10."
    assert messages[-1] == "Vic: Sparkit evolved into Voltruff!"

    assert evolve_if_eligible(mon) is None
    assert mon.species_id == "voltruff"


def test_gain_xp_handles_multiple_levels_and_unlocks():
    mon = create_automon("pyrofang", 6, random.Random(3))
    assert "flare_lash" not in mon.abilities
    trainer = make_trainer(automons=[mon])
    rules = make_rules(trainer)

    messages = rules.gain_xp(trainer, xp_to_next(6) + xp_to_next(7))

    assert mon.level == 8
    assert "flare_lash" in mon.abilities
    assert "Vic's Pyrofang learned Flare Lash." in messages


def test_gain_xp_without_creatures_is_a_no_op():
    trainer = make_trainer(automons=[])
    assert make_rules(trainer).gain_xp(trainer, 500) == []


def test_catch_chance_is_clamped():
    rng = random.Random(1)
    strong = create_wild_automon("solaris", 24, rng)
    weak = create_wild_automon("sparkit", 2, rng)
    weak.health = 0

    assert catch_chance(strong, 1, "basic_trap") == pytest.approx(0.05)
    assert catch_chance(weak, 10, "pro_trap") == pytest.approx(0.9)


def test_fishing_chance_modifiers():
    assert fishing_chance("old_pond", "clear") == pytest.approx(0.58)
    assert fishing_chance("river_delta", "rain") == pytest.approx(0.80)
    assert fishing_chance("old_pond", "storm") == pytest.approx(0.43)


def test_event_log_keeps_newest_entries():
    rules = make_rules(make_trainer(), config=GameConfig(max_log_entries=5))

    for index in range(8):
        rules.add_event("system", f"event {index}")

    assert [event.message for event in rules.state.events] == [f"event {i}" for i in range(3, 8)]


def test_weather_and_night_boost_spawn_weights(monkeypatch):
    captured = {}

    def capture(entries, rng=None):
        captured["weights"] = {entry.species_id: entry.weight for entry in entries}
        return entries[0]

    monkeypatch.setattr(simulation_rules, "weighted_choice", capture)
    rules = make_rules(make_trainer())
    rules.state.weather = "fog"
    rules.state.time_of_day = "night"

    wild = rules.pick_wild_automon(LOCATION_BY_ID["dark_forest"])

    assert captured["weights"] == {"gloomimp": 10, "pyrofang": 2, "umbrahowl": 5}
    assert wild.species_id == "gloomimp"
    assert LOCATION_BY_ID["dark_forest"].spawn_table[0].weight == 6


def test_no_spawn_table_means_no_encounter():
    rules = make_rules(make_trainer())
    assert rules.pick_wild_automon(LOCATION_BY_ID["town_market"]) is None


def test_legal_actions_include_universal_actions():
    trainer = make_trainer(location_id="town_market")
    rules = make_rules(trainer)

    actions = rules.legal_actions(trainer)

    assert actions[:4] == ["buy", "sell", "craft", "travel"]
    assert {"feed_automon", "use_item", "release_automon"} <= set(actions)
    assert rules.validate_action(trainer, "craft")
    assert not rules.validate_action(trainer, "fish")


def test_context_lists_only_co_located_trainers():
    me = make_trainer("tr_me", "Me")
    here = make_trainer("tr_here", "Here")
    away = make_trainer("tr_away", "Away", location_id="old_pond")
    rules = make_rules(me, here, away)
    for index in range(RECENT_EVENT_WINDOW + 5):
        rules.add_event("system", f"event {index}")

    context = rules.build_context(me)

    assert [agent.id for agent in context.nearby_agents] == ["tr_here"]
    assert len(context.recent_events) == RECENT_EVENT_WINDOW
    assert context.recent_events[-1].message == f"event {RECENT_EVENT_WINDOW + 4}"
    assert context.location.id == "starter_town"


def test_leaderboard_orders_by_elo():
    state = create_initial_state(random.Random(2))
    state.trainers[1].elo = 1100
    state.trainers[2].elo = 900
    rules = WorldRules(state)

    rules.recompute_leaderboard()

    assert [entry.trainer_id for entry in state.leaderboard] == [
        state.trainers[1].id,
        state.trainers[0].id,
        state.trainers[2].id,
    ]
