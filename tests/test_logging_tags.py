"""Tests for truthful console tags ([AI] vs [•]) in tick output.

Decision lines carry [AI] only when the policy calls the reasoning service.
"""

from __future__ import annotations

import contextlib
import io
import random

import pytest

from automon.engine import WorldEngine
from automon.logging_utils import Color, LOG_TAG_DETERMINISTIC, LOG_TAG_LLM, colored
from automon.policy import RuleBasedPolicy
from automon.schemas import AgentDecision, GameConfig


class ScriptedServicePolicy:
    """Stands in for a reasoning-service policy without any network."""

    def uses_llm(self) -> bool:
        return True

    async def decide(self, context):
        return AgentDecision(action="rest", reasoning="Scripted answer.")


async def _tick_output(policy) -> str:
    engine = WorldEngine(
        policy=policy,
        config=GameConfig(),
        rng=random.Random(5),
        verbose=True,
    )
    await engine.initialize()

    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        await engine.tick()
    return buf.getvalue()


@pytest.mark.asyncio
async def test_rule_based_decisions_use_deterministic_tag(monkeypatch):
    monkeypatch.setenv("AUTOMON_NO_COLOR", "1")

    out = await _tick_output(RuleBasedPolicy(random.Random(5)))

    assert f"{LOG_TAG_DETERMINISTIC} Tick 1 | Day 1" in out
    assert f"  {LOG_TAG_DETERMINISTIC} Astra:" in out
    assert LOG_TAG_LLM not in out


@pytest.mark.asyncio
async def test_service_decisions_use_ai_tag(monkeypatch):
    monkeypatch.setenv("AUTOMON_NO_COLOR", "1")

    out = await _tick_output(ScriptedServicePolicy())

    assert f"  {LOG_TAG_LLM} Astra: rest - Scripted answer." in out


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.delenv("AUTOMON_NO_COLOR", raising=False)
    assert colored("hi", Color.RED) == f"{Color.RED.value}hi{Color.RESET.value}"

    monkeypatch.setenv("AUTOMON_NO_COLOR", "1")
    assert colored("hi", Color.RED, bold=True) == "hi"
