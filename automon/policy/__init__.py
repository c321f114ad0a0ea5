"""Decision policies: who picks each trainer's action every tick."""

from .base import DecisionPolicy, RuleBasedPolicy
from .fallback import fallback_decision
from .llm import (
    LLMDecisionPolicy,
    PolicyError,
    PolicyErrorKind,
    PolicyResult,
    classify_exception,
    parse_decision_text,
    resolve_policy_result,
)
from .prompts import DECISION_PROMPT, build_prompts, context_payload

__all__ = [
    "DecisionPolicy",
    "RuleBasedPolicy",
    "LLMDecisionPolicy",
    "PolicyError",
    "PolicyErrorKind",
    "PolicyResult",
    "resolve_policy_result",
    "parse_decision_text",
    "classify_exception",
    "fallback_decision",
    "DECISION_PROMPT",
    "build_prompts",
    "context_payload",
]
