"""Randomness and small numeric helpers shared by the world rules.

Every sampling helper accepts an injectable ``random.Random`` so a seeded
engine (or test) replays exactly the same draws. When ``rng`` is omitted the
module-level ``random`` generator is used.
"""

from __future__ import annotations

import math
import random
from typing import Any, Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")


class Weighted(Protocol):
    weight: float


W = TypeVar("W", bound=Weighted)


def _resolve(rng: Optional[random.Random]) -> Any:
    # The random module exposes the same randint/random API as its hidden instance
    return rng if rng is not None else random


def rand_int(lo: int, hi: int, rng: Optional[random.Random] = None) -> int:
    """Return an integer in the inclusive range [lo, hi]."""
    return _resolve(rng).randint(lo, hi)


def sample(items: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Pick one element uniformly. Raises IndexError on an empty sequence."""
    if not items:
        raise IndexError("Cannot sample from an empty sequence")
    return items[rand_int(0, len(items) - 1, rng)]


def weighted_choice(entries: Sequence[W], rng: Optional[random.Random] = None) -> Optional[W]:
    """Pick one entry with probability proportional to its ``weight``.

    Returns None for an empty sequence. Falls back to the last entry if
    floating point drift leaves a sliver of the roll unconsumed.
    """

    if not entries:
        return None
    total = sum(entry.weight for entry in entries)
    roll = _resolve(rng).random() * total
    for entry in entries:
        roll -= entry.weight
        if roll <= 0:
            return entry
    return entries[-1]


def roll(rng: Optional[random.Random] = None) -> float:
    """Uniform float in [0, 1)."""
    return _resolve(rng).random()


def clamp(value: float, lo: float, hi: float) -> float:
    """Bound ``value`` to [lo, hi], preserving int-ness when all inputs are ints."""
    return max(lo, min(hi, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (no banker's rounding)."""
    return math.floor(value + 0.5)


__all__ = ["rand_int", "sample", "weighted_choice", "roll", "clamp", "round_half_up"]
