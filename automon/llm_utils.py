"""Structured reasoning-service calls with timeout and validation-aware retries."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence, TypeVar

from mirascope import llm
from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from automon.local_llm import call_ollama_chat
from automon.logging_utils import log_error, log_llm


ModelT = TypeVar("ModelT", bound=BaseModel)
DEFAULT_TIMEOUT_SECONDS = 8.0

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(slots=True)
class ValidationFeedback:
    """Correction text appended to the prompt after a schema failure."""

    llm_text: str
    issues: Sequence[str]


def _truncate_preview(value: Any, *, limit: int = 80) -> str:
    if value is None:
        return "null"
    text = repr(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def inject_validation_feedback(error: ValidationError) -> ValidationFeedback:
    """Turn a pydantic ValidationError into per-field correction guidance."""

    issues: list[str] = []
    for err in error.errors(include_url=False):
        loc = ".".join(str(part) for part in err.get("loc", [])) or "root"
        details = f"{loc}: {err.get('msg', 'validation error')}"
        if err.get("type"):
            details += f" [type={err['type']}]"
        if "input" in err:
            details += f" | received={_truncate_preview(err.get('input'))}"
        issues.append(details)

    if not issues:
        issues.append("root: response did not match the expected schema")

    instructions = [
        "Your previous JSON response failed to validate against the required schema.",
        "Return only a corrected JSON object with no explanation and no code fences.",
        "Issues detected:",
    ]
    instructions.extend(f"- {issue}" for issue in issues)
    return ValidationFeedback(llm_text="\n".join(instructions), issues=issues)


def extract_json_block(text: str) -> str:
    """Return the outermost ``{...}`` span of ``text``, or the text unchanged."""
    match = _JSON_BLOCK.search(text or "")
    return match.group(0) if match else (text or "")


def parse_model_text(text: str, response_model: type[ModelT]) -> ModelT:
    """Validate free-form model output (possibly wrapped in prose) as ``response_model``.

    Raises ValidationError when no valid JSON object of the right shape is present.
    """

    return response_model.model_validate_json(extract_json_block(text))


async def call_llm_with_retries(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_provider: str,
    llm_model: str,
    response_model: type[ModelT],
    max_attempts: int = 1,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    feedback_builder: Callable[[ValidationError], ValidationFeedback] = inject_validation_feedback,
) -> ModelT:
    """Invoke a structured call, retrying only on schema validation failures.

    Every attempt is bounded by ``timeout`` seconds. Timeouts and provider
    errors propagate immediately; the last ValidationError propagates once
    ``max_attempts`` is used up. Callers decide how to degrade.
    """

    system_prompt = system_prompt.strip()
    base_user_prompt = user_prompt.strip()
    feedback_payload: ValidationFeedback | None = None

    def _user_section() -> str:
        sections = [base_user_prompt]
        if feedback_payload is not None:
            sections.append(feedback_payload.llm_text)
        return "\n\n".join(section for section in sections if section)

    use_local_llm = llm_provider.lower() == "ollama"

    remote_invoke: Callable[[str], Any] | None = None
    if not use_local_llm:
        @llm.call(provider=llm_provider, model=llm_model, response_model=response_model)
        async def _invoke(prompt: str) -> str:
            return prompt

        remote_invoke = _invoke

    attempt_number = 0
    async for attempt in AsyncRetrying(
        retry=retry_if_exception_type(ValidationError),
        stop=stop_after_attempt(max(1, max_attempts)),
        reraise=True,
    ):
        with attempt:
            attempt_number += 1
            if attempt_number > 1:
                log_llm(
                    f"Retry {attempt_number}/{max_attempts} for {response_model.__name__};"
                    " attempting schema correction."
                )
            user_section = _user_section()
            try:
                if use_local_llm:
                    raw_response = await asyncio.wait_for(
                        call_ollama_chat(
                            system_prompt=system_prompt,
                            user_prompt=user_section,
                            llm_model=llm_model,
                            response_schema=response_model.model_json_schema(),
                            timeout=timeout,
                        ),
                        timeout=timeout,
                    )
                    return parse_model_text(raw_response, response_model)

                if remote_invoke is None:
                    raise RuntimeError("Remote LLM invoke is not initialized.")

                final_prompt = "\n\n".join(s for s in (system_prompt, user_section) if s)
                return await asyncio.wait_for(remote_invoke(final_prompt), timeout=timeout)
            except ValidationError as exc:
                feedback_payload = feedback_builder(exc)
                log_error(
                    f"Schema validation failed for {response_model.__name__} "
                    f"(attempt {attempt_number}/{max_attempts}): {'; '.join(feedback_payload.issues)}"
                )
                raise

    raise RuntimeError("LLM retry mechanism exited unexpectedly")
