"""Deterministic need-driven fallback ladder.

The first rung whose condition holds wins. Only the travel rung draws from
the rng, so two calls over an unchanged context with identically seeded
rngs return identical decisions.
"""

from __future__ import annotations

import random
from typing import Optional

from automon.battle import HEAL_COST
from automon.rng import sample
from automon.schemas import AgentContext, AgentDecision

CRITICAL_HEALTH = 35
HUNGRY = 25
TIRED = 20
CREATURE_HUNGRY = 30
RATION_PRICE = 12


def fallback_decision(context: AgentContext, rng: Optional[random.Random] = None) -> AgentDecision:
    trainer = context.trainer
    legal = set(context.available_actions)

    if (
        trainer.health < CRITICAL_HEALTH
        and "heal_automon" in legal
        and trainer.gold >= HEAL_COST
        and any(mon.health < mon.max_health * 0.5 for mon in trainer.automons)
    ):
        return AgentDecision(
            action="heal_automon",
            reasoning="Critical roster health; restore the team now.",
        )

    if trainer.hunger < HUNGRY:
        if trainer.has_item("trail_ration") and "eat" in legal:
            return AgentDecision(
                action="eat",
                target="trail_ration",
                reasoning="Hunger is low and food is available.",
            )
        if "buy" in legal and trainer.gold >= RATION_PRICE:
            return AgentDecision(
                action="buy",
                target="trail_ration",
                reasoning="Buy food to avoid starvation damage.",
            )

    if trainer.energy < TIRED and "rest" in legal:
        return AgentDecision(action="rest", reasoning="Energy is low; recover to keep options open.")

    hungry = [mon for mon in trainer.automons if mon.hunger < CREATURE_HUNGRY]
    if hungry and trainer.has_item("automon_chow") and "feed_automon" in legal:
        target = min(hungry, key=lambda mon: mon.hunger)
        return AgentDecision(
            action="feed_automon",
            target=target.id,
            reasoning="Feed AutoMon to protect loyalty.",
        )

    if (
        "battle_pve" in legal
        and trainer.energy >= 15
        and any(mon.health > mon.max_health * 0.4 for mon in trainer.automons)
    ):
        return AgentDecision(action="battle_pve", reasoning="Safe XP and gold gains from PvE battle.")

    if "fish" in legal and trainer.has_item("bait") and trainer.energy >= 10:
        return AgentDecision(action="fish", reasoning="Fishing converts bait into sellable resources.")

    if "explore" in legal and trainer.energy >= 10:
        return AgentDecision(action="explore", reasoning="Exploring can find resources and encounters.")

    if "travel" in legal and context.location.connections:
        connection = sample(context.location.connections, rng)
        return AgentDecision(
            action="travel",
            target=connection.to,
            reasoning="Repositioning for fresh opportunities.",
        )

    if "rest" in legal:
        return AgentDecision(action="rest", reasoning="Fallback recovery action.")

    first = context.available_actions[0] if context.available_actions else "rest"
    return AgentDecision(action=first, reasoning="Default fallback action.")
