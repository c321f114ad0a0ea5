"""
Reasoning-service backed decision policy.

``LLMDecisionPolicy.request`` turns every way the call can go wrong into a
``PolicyError`` value instead of an exception. ``resolve_policy_result`` is
the pure mapping from that result to the decision the trainer acts on: the
service's answer when there is one, otherwise the fallback ladder with a
reasoning suffix that records why.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from automon.config import Config
from automon.llm_utils import call_llm_with_retries, parse_model_text
from automon.logging_utils import debug_enabled, log_error, log_llm
from automon.schemas import AgentContext, AgentDecision

from .fallback import fallback_decision
from .prompts import build_prompts

PROVIDER_LABELS = {"openai": "OpenAI", "anthropic": "Anthropic", "ollama": "Ollama"}


class PolicyErrorKind(str, Enum):
    MISSING_CREDENTIALS = "missing_credentials"
    NON_OK_STATUS = "non_ok_status"
    PARSE_FAILURE = "parse_failure"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class PolicyError:
    """Why the reasoning service produced no usable decision."""

    kind: PolicyErrorKind
    provider: str
    detail: str = ""
    status: Optional[int] = None

    def annotation(self) -> str:
        """Reasoning suffix appended to the fallback decision."""
        if self.kind is PolicyErrorKind.MISSING_CREDENTIALS:
            env_name = Config.api_key_env_name(self.provider) or "API key"
            return f"(fallback: missing {env_name})"
        if self.kind is PolicyErrorKind.NON_OK_STATUS:
            label = PROVIDER_LABELS.get(self.provider.lower(), self.provider)
            return f"(fallback: {label} {self.status})"
        if self.kind is PolicyErrorKind.PARSE_FAILURE:
            return "(fallback: parse failure)"
        return "(fallback: request error)"


@dataclass(frozen=True)
class PolicyResult:
    """Exactly one of ``decision`` and ``error`` is set."""

    decision: Optional[AgentDecision] = None
    error: Optional[PolicyError] = None

    def __post_init__(self) -> None:
        if (self.decision is None) == (self.error is None):
            raise ValueError("PolicyResult needs exactly one of decision or error")

    @property
    def ok(self) -> bool:
        return self.decision is not None


def resolve_policy_result(
    result: PolicyResult,
    context: AgentContext,
    rng: Optional[random.Random] = None,
) -> AgentDecision:
    if result.decision is not None:
        return result.decision

    fallback = fallback_decision(context, rng)
    return fallback.model_copy(
        update={"reasoning": f"{fallback.reasoning} {result.error.annotation()}"}
    )


def parse_decision_text(text: str) -> Optional[AgentDecision]:
    """Parse raw model text into a decision, or None if it has no valid JSON decision."""
    try:
        return parse_model_text(text, AgentDecision)
    except ValueError:
        return None


def classify_exception(exc: BaseException, provider: str) -> PolicyError:
    """Map an exception raised by the service call to a ``PolicyError``."""
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return PolicyError(PolicyErrorKind.TRANSPORT_ERROR, provider, "timed out")
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return PolicyError(PolicyErrorKind.NON_OK_STATUS, provider, str(exc), status=status)
    if isinstance(exc, ValueError):
        # pydantic ValidationError and json decode errors are both ValueErrors
        return PolicyError(PolicyErrorKind.PARSE_FAILURE, provider, str(exc))
    return PolicyError(PolicyErrorKind.TRANSPORT_ERROR, provider, f"{type(exc).__name__}: {exc}")


class LLMDecisionPolicy:
    """Asks the configured provider for a decision, degrading to the fallback ladder."""

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ):
        self.provider = (provider or Config.LLM_PROVIDER).lower()
        self.model = model or Config.LLM_MODEL
        self.api_key = api_key if api_key is not None else Config.api_key_for(self.provider)
        self.timeout = timeout if timeout is not None else Config.LLM_TIMEOUT_SECONDS
        self.max_attempts = max_attempts if max_attempts is not None else Config.LLM_MAX_ATTEMPTS
        self.rng = rng

    def uses_llm(self) -> bool:
        return True

    @property
    def requires_credentials(self) -> bool:
        return Config.api_key_env_name(self.provider) is not None

    async def request(self, context: AgentContext) -> PolicyResult:
        """Call the service once (plus schema retries). Never raises."""
        if self.requires_credentials and not self.api_key:
            return PolicyResult(
                error=PolicyError(PolicyErrorKind.MISSING_CREDENTIALS, self.provider)
            )

        system_prompt, user_prompt = build_prompts(context)
        if debug_enabled("DEBUG_LLM"):
            log_llm(f"Decision prompt for {context.trainer.name}:\n{system_prompt}\n\n{user_prompt}")

        try:
            decision = await call_llm_with_retries(
                system_prompt=system_prompt,
                user_prompt=user_prompt,
                llm_provider=self.provider,
                llm_model=self.model,
                response_model=AgentDecision,
                max_attempts=self.max_attempts,
                timeout=self.timeout,
            )
        except Exception as exc:
            error = classify_exception(exc, self.provider)
            log_error(f"Decision call for {context.trainer.name} failed: {error.kind.value} {error.detail}")
            return PolicyResult(error=error)

        if debug_enabled("DEBUG_LLM"):
            log_llm(f"{context.trainer.name} -> {decision.model_dump_json()}")
        return PolicyResult(decision=decision)

    async def decide(self, context: AgentContext) -> AgentDecision:
        result = await self.request(context)
        return resolve_policy_result(result, context, self.rng)
