"""Prompt templates for the trainer decision call."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from automon.schemas import AgentContext


@dataclass
class PromptTemplate:
    """System + user prompt pair with ``{{placeholder}}`` slots in the user part."""

    name: str
    system: str
    user: str

    def render(self, **values: str) -> tuple[str, str]:
        user = self.user
        for key, value in values.items():
            user = user.replace("{{" + key + "}}", value)
        return self.system, user


DECISION_PROMPT = PromptTemplate(
    name="decide",
    system=(
        "You are a strategic survival game agent playing one trainer in AutoMon. "
        'Return valid JSON only: {"action": string, "target": string|null, "reasoning": string}.'
    ),
    user=(
        "You are an autonomous trainer in AutoMon.\n"
        "Choose exactly one best action for this tick based on survival and progression.\n"
        "Pick the action from availableActions; anything else is ignored and you idle.\n"
        "Output STRICT JSON only with keys: action, target, reasoning.\n"
        "target can be null or a short id depending on action "
        "(location id, item id, trainer id, automon id).\n"
        "Keep reasoning to one sentence.\n"
        "Game snapshot:\n"
        "{{context_json}}"
    ),
)


def context_payload(context: AgentContext) -> Dict[str, Any]:
    """The slice of the world the reasoning service gets to see."""
    trainer = context.trainer
    location = context.location
    return {
        "tick": context.world_tick,
        "day": context.day,
        "weather": context.weather,
        "timeOfDay": context.time_of_day,
        "trainer": {
            "id": trainer.id,
            "name": trainer.name,
            "health": trainer.health,
            "energy": trainer.energy,
            "hunger": trainer.hunger,
            "gold": trainer.gold,
            "locationId": trainer.location_id,
            "inventory": trainer.inventory,
            "stableCapacity": trainer.stable_capacity,
            "automons": [mon.model_dump(mode="json") for mon in trainer.automons],
        },
        "nearbyAgents": [agent.model_dump(mode="json") for agent in context.nearby_agents],
        "location": {
            "id": location.id,
            "name": location.name,
            "dangerLevel": location.danger_level,
            "actions": location.actions,
            "connections": [edge.model_dump(mode="json") for edge in location.connections],
        },
        "availableActions": context.available_actions,
        "recentEvents": [event.model_dump(mode="json") for event in context.recent_events],
        "market": context.market.model_dump(mode="json"),
    }


def build_prompts(context: AgentContext) -> tuple[str, str]:
    """Return the (system, user) prompts for one trainer's decision."""
    return DECISION_PROMPT.render(context_json=json.dumps(context_payload(context)))
