"""Decision policy protocol and the rule-based implementation."""

from __future__ import annotations

import random
from typing import Optional, Protocol

from automon.schemas import AgentContext, AgentDecision

from .fallback import fallback_decision


class DecisionPolicy(Protocol):
    """Chooses one action per trainer per tick."""

    async def decide(self, context: AgentContext) -> AgentDecision:
        """Return a decision for ``context.trainer``.

        Implementations must not raise for service failures; the engine
        treats an exception here as a failed tick.
        """

        ...

    def uses_llm(self) -> bool:
        """Return True if this policy calls the external reasoning service."""
        ...


class RuleBasedPolicy:
    """Always answers with the deterministic fallback ladder (no LLM calls)."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng

    def uses_llm(self) -> bool:
        return False

    async def decide(self, context: AgentContext) -> AgentDecision:
        return fallback_decision(context, self.rng)
