"""Control commands: the only way outside code steers a running world."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from automon.engine import WorldEngine
from automon.schemas import WorldSnapshot

ALLOWED_SPEEDS = (1, 2, 5, 10)


class ControlCommand(str, Enum):
    PAUSE = "pause"
    RESUME = "resume"
    SPEED = "speed"
    RESET = "reset"


class UnknownCommandError(ValueError):
    """Raised for a command name outside pause/resume/speed/reset."""

    def __init__(self, command: str) -> None:
        self.command = command
        valid = ", ".join(c.value for c in ControlCommand)
        super().__init__(f"Unknown control command '{command}'. Use one of: {valid}")


class InvalidSpeedError(ValueError):
    """Raised when a speed command carries a multiplier outside ALLOWED_SPEEDS."""

    def __init__(self, value: object) -> None:
        self.value = value
        allowed = ", ".join(str(s) for s in ALLOWED_SPEEDS)
        super().__init__(f"Invalid speed multiplier {value!r}. Allowed: {allowed}")


def parse_command(command: str | ControlCommand) -> ControlCommand:
    if isinstance(command, ControlCommand):
        return command
    try:
        return ControlCommand(str(command).strip().lower())
    except ValueError:
        raise UnknownCommandError(str(command)) from None


def parse_speed(value: object) -> int:
    try:
        multiplier = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise InvalidSpeedError(value) from None
    if multiplier not in ALLOWED_SPEEDS or str(multiplier) != str(value).strip():
        raise InvalidSpeedError(value)
    return multiplier


async def apply_command(
    engine: WorldEngine,
    command: str | ControlCommand,
    value: Optional[object] = None,
) -> WorldSnapshot:
    """Apply one command and return the resulting snapshot."""
    kind = parse_command(command)

    if kind is ControlCommand.PAUSE:
        await engine.stop()
    elif kind is ControlCommand.RESUME:
        await engine.start()
    elif kind is ControlCommand.SPEED:
        await engine.set_speed(parse_speed(value))
    elif kind is ControlCommand.RESET:
        await engine.reset()

    return engine.snapshot()
