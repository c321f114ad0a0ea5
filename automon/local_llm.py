"""Calls to a locally hosted model server (Ollama) for trainer decisions.

The server is asked for structured output: when a response schema is given
(normally ``AgentDecision.model_json_schema()``) Ollama constrains its
answer to that schema, otherwise it only guarantees a JSON object. Either
way the caller still validates the text, since small local models drift.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional
from urllib import error, request

from automon.config import Config

_CHAT_ENDPOINT = "/api/chat"

# Decisions are short; a capped reply keeps a rambling model from eating the tick
DECISION_MAX_TOKENS = 256
DECISION_TEMPERATURE = 0.6


class LocalLLMError(RuntimeError):
    """Raised when a local model call fails.

    ``status_code`` is set when the server answered with a non-success HTTP
    status, and is None when it could not be reached or answered garbage.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def build_chat_payload(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_model: str,
    response_schema: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Assemble the non-streaming ``/api/chat`` body for one decision."""

    messages: list[dict[str, str]] = []
    if system_prompt.strip():
        messages.append({"role": "system", "content": system_prompt.strip()})
    messages.append({"role": "user", "content": user_prompt.strip()})

    return {
        "model": llm_model,
        "messages": messages,
        "stream": False,
        "format": response_schema or "json",
        "options": {
            "temperature": DECISION_TEMPERATURE,
            "num_predict": DECISION_MAX_TOKENS,
        },
    }


def read_chat_reply(raw: str) -> str:
    """Pull the assistant text out of an ``/api/chat`` response body.

    A reply cut off at the token cap is rejected outright; its JSON would be
    unterminated anyway.
    """

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise LocalLLMError("Ollama returned non-JSON response.") from exc

    if parsed.get("error"):
        raise LocalLLMError(f"Ollama reported an error: {parsed['error']}")

    content = (parsed.get("message") or {}).get("content")
    if not content:
        raise LocalLLMError("Ollama response did not include assistant content.")
    if parsed.get("done_reason") == "length":
        raise LocalLLMError(f"Ollama reply hit the {DECISION_MAX_TOKENS}-token cap before finishing.")
    return content


def _perform_ollama_request(
    payload: dict[str, Any],
    base_url: str,
    timeout: float,
) -> str:
    """Blocking POST to the Ollama chat API; returns the raw response body."""

    url = f"{base_url.rstrip('/')}{_CHAT_ENDPOINT}"
    req = request.Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with request.urlopen(req, timeout=timeout) as resp:
            return resp.read().decode("utf-8")
    except error.HTTPError as exc:
        body = exc.read().decode("utf-8", errors="ignore") if exc.fp else ""
        raise LocalLLMError(
            f"Ollama chat request failed with status {exc.code}: {body or exc.reason}",
            status_code=exc.code,
        ) from exc
    except error.URLError as exc:
        raise LocalLLMError(f"Could not reach Ollama at {url}: {exc.reason}") from exc


async def call_ollama_chat(
    *,
    system_prompt: str,
    user_prompt: str,
    llm_model: str,
    response_schema: Optional[dict[str, Any]] = None,
    base_url: str | None = None,
    timeout: float = 30.0,
) -> str:
    """Ask a local Ollama model for a decision and return its raw JSON text."""

    if not user_prompt.strip():
        raise LocalLLMError("Cannot call Ollama with an empty user prompt.")

    payload = build_chat_payload(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        llm_model=llm_model,
        response_schema=response_schema,
    )
    resolved_base = (base_url or Config.OLLAMA_BASE_URL).rstrip("/")
    raw = await asyncio.to_thread(_perform_ollama_request, payload, resolved_base, timeout)
    return read_chat_reply(raw)


__all__ = [
    "LocalLLMError",
    "build_chat_payload",
    "read_chat_reply",
    "call_ollama_chat",
]
