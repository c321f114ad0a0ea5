"""Unit tests for the core schema building blocks."""

import random

import pytest
from pydantic import ValidationError

from automon.schemas import AgentDecision, GameState, Trainer, derive_status, inventory_add
from automon.seed import create_automon, create_initial_state


def test_status_is_derived_from_numbers():
    assert derive_status(0, 100, 30) == "fainted"
    assert derive_status(40, 100, 30) == "injured"
    assert derive_status(41, 100, 0) == "exhausted"
    assert derive_status(90, 100, 30) == "healthy"


def test_status_follows_mutation_and_is_serialized():
    mon = create_automon("lumina", 5, random.Random(1))
    assert mon.status == "healthy"

    mon.health = 0
    assert mon.status == "fainted"
    assert mon.model_dump(mode="json")["status"] == "fainted"


def test_trainer_gauges_are_bounded_on_load():
    with pytest.raises(ValidationError):
        Trainer(id="t", name="T", location_id="starter_town", hunger=101)
    with pytest.raises(ValidationError):
        Trainer(id="t", name="T", location_id="starter_town", gold=-1)


def test_inventory_add_prunes_empty_entries():
    inventory = {"bait": 1}
    inventory_add(inventory, "bait", -1)
    inventory_add(inventory, "ore", 2)
    assert inventory == {"ore": 2}


def test_decision_requires_action_and_reasoning():
    with pytest.raises(ValidationError):
        AgentDecision(action="", reasoning="x")
    with pytest.raises(ValidationError):
        AgentDecision.model_validate({"action": "rest"})

    decision = AgentDecision.model_validate({"action": "sell", "target": 7, "reasoning": "r"})
    assert decision.target == "7"
    assert AgentDecision(action="rest", target="", reasoning="r").target is None


def test_initial_state_round_trips_through_json():
    state = create_initial_state(random.Random(4))

    restored = GameState.model_validate_json(state.model_dump_json())

    assert restored.model_dump() == state.model_dump()
    assert restored.tick == 0 and restored.day == 1
    assert restored.weather == "clear" and restored.time_of_day == "dawn"
    assert [t.name for t in restored.trainers] == ["Astra", "Bram", "Cyra"]
    assert [entry.trainer_id for entry in restored.leaderboard] == [t.id for t in restored.trainers]
    for trainer in restored.trainers:
        assert trainer.location_id == "starter_town"
        assert len(trainer.automons) == 1
        assert 3 <= trainer.automons[0].level <= 5
