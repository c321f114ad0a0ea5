"""
AutoMon configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from automon.schemas import GameConfig

# Load .env file if it exists
load_dotenv()

SUPPORTED_PROVIDERS = ("openai", "anthropic", "ollama")


class Config:
    """Application configuration loaded from environment variables."""

    # Reasoning service
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")
    # Per-decision time budget; a slower answer is treated as a transport error
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "8"))
    # Schema-correction attempts. 1 means a malformed answer falls back immediately.
    LLM_MAX_ATTEMPTS: int = int(os.getenv("LLM_MAX_ATTEMPTS", "1"))

    # API Keys (absent key => deterministic fallback, not an error)
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    ANTHROPIC_API_KEY: str | None = os.getenv("ANTHROPIC_API_KEY")

    # Local models served by Ollama
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://127.0.0.1:11434")

    # Snapshot storage
    SAVE_PATH: Path = Path(os.getenv("SAVE_PATH", "save/game-state.json"))
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://localhost/automon")

    # World cadence
    TICK_MS: int = int(os.getenv("TICK_MS", "10000"))
    TICKS_PER_DAY: int = int(os.getenv("TICKS_PER_DAY", "24"))
    MAX_LOG_ENTRIES: int = int(os.getenv("MAX_LOG_ENTRIES", "250"))

    @classmethod
    def api_key_for(cls, provider: str) -> str | None:
        """Return the credential a provider needs, or None when it needs none."""
        provider = provider.lower()
        if provider == "openai":
            return cls.OPENAI_API_KEY
        if provider == "anthropic":
            return cls.ANTHROPIC_API_KEY
        return None

    @classmethod
    def api_key_env_name(cls, provider: str) -> str | None:
        return {
            "openai": "OPENAI_API_KEY",
            "anthropic": "ANTHROPIC_API_KEY",
        }.get(provider.lower())

    @classmethod
    def game_config(cls) -> GameConfig:
        return GameConfig(
            tick_ms=cls.TICK_MS,
            base_tick_ms=cls.TICK_MS,
            ticks_per_day=cls.TICKS_PER_DAY,
            max_log_entries=cls.MAX_LOG_ENTRIES,
        )

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for values the engine cannot run with.

        Missing API keys are deliberately not checked here: the decision policy
        degrades to its rule-based fallback when credentials are absent.
        """
        if cls.LLM_PROVIDER.lower() not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unknown LLM_PROVIDER '{cls.LLM_PROVIDER}'. "
                f"Use one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        if cls.TICK_MS <= 0:
            raise ValueError("TICK_MS must be a positive number of milliseconds")
        if cls.TICKS_PER_DAY <= 0:
            raise ValueError("TICKS_PER_DAY must be positive")
        if cls.LLM_TIMEOUT_SECONDS <= 0:
            raise ValueError("LLM_TIMEOUT_SECONDS must be positive")

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        key_state = "set" if cls.api_key_for(cls.LLM_PROVIDER) else "missing (fallback policy)"
        lines = [
            "AutoMon Configuration:",
            f"  LLM Provider: {cls.LLM_PROVIDER}",
            f"  LLM Model: {cls.LLM_MODEL}",
            f"  API Key: {key_state}",
            f"  Decision Timeout: {cls.LLM_TIMEOUT_SECONDS}s",
            f"  Tick Interval: {cls.TICK_MS}ms",
            f"  Ticks per Day: {cls.TICKS_PER_DAY}",
            f"  Save Path: {cls.SAVE_PATH}",
        ]
        return "\n".join(lines)
