"""Console logging for AutoMon simulations.

Color-coded output separates deterministic world rules from reasoning-service
calls. Game outcomes themselves go to the in-world event log; this module
only covers operator-facing console output.
"""

import os
from enum import Enum


class Color(Enum):
    """ANSI color codes for terminal output."""

    BLUE = "\033[94m"      # Deterministic rules (calendar, needs, battles)
    YELLOW = "\033[93m"    # Reasoning-service calls
    RED = "\033[91m"       # Errors, fallbacks, failed ticks
    GREEN = "\033[92m"     # Success/completion
    CYAN = "\033[96m"      # Info/metadata

    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes unless AUTOMON_NO_COLOR is set."""
    if os.getenv("AUTOMON_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def debug_enabled(flag: str) -> bool:
    """True when an env flag such as DEBUG_LLM is set to 1/true/yes."""
    return os.getenv(flag, "").lower() in ("1", "true", "yes")


def log_deterministic(message: str) -> None:
    print(colored(f"{LOG_TAG_DETERMINISTIC} {message}", Color.BLUE))


def log_llm(message: str) -> None:
    print(colored(f"{LOG_TAG_LLM} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    print(colored(f"{LOG_TAG_ERROR} {message}", Color.RED))


def log_success(message: str) -> None:
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))


# Markers for operation types (color-blind accessible)
LOG_TAG_DETERMINISTIC = "[•]"
LOG_TAG_LLM = "[AI]"
LOG_TAG_ERROR = "[!]"
LOG_TAG_SUCCESS = "[✓]"
LOG_TAG_INFO = "[i]"
