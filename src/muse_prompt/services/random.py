"""Seedable pseudo-random source and the selection helpers built on it.

Every randomized decision in the engine takes an ``Rng`` explicitly; the helpers here
consume it in a fixed, documented way so a seed always reproduces the same prompt.
"""

from __future__ import annotations

import math
import random
from typing import Callable, Optional, Sequence, TypeVar

from .exceptions import InvariantError

Rng = Callable[[], float]

T = TypeVar("T")

_UINT32_MASK = 0xFFFFFFFF
_UINT32_RANGE = 4294967296
_MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    return (a * b) & _UINT32_MASK


def create_seeded_rng(seed: int) -> Rng:
    """Return a Mulberry32 generator producing floats in [0, 1)."""
    state = seed & _UINT32_MASK

    def _next() -> float:
        nonlocal state
        state = (state + _MULBERRY_INCREMENT) & _UINT32_MASK
        x = _imul(state ^ (state >> 15), 1 | state)
        x ^= (x + _imul(x ^ (x >> 7), 61 | x)) & _UINT32_MASK
        return ((x ^ (x >> 14)) & _UINT32_MASK) / _UINT32_RANGE

    return _next


def system_rng() -> Rng:
    return random.random


def select_random(items: Sequence[T], rng: Rng) -> T:
    if not items:
        raise InvariantError("cannot select from an empty sequence")
    return items[math.floor(rng() * len(items))]


def pick_random(items: Sequence[T], rng: Rng) -> Optional[T]:
    if not items:
        return None
    return items[math.floor(rng() * len(items))]


def shuffle(items: Sequence[T], rng: Rng) -> list[T]:
    """Fisher-Yates shuffle on a copy; the input is left untouched."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = math.floor(rng() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def select_random_n(items: Sequence[T], count: int, rng: Rng) -> list[T]:
    if count > len(items):
        raise InvariantError(
            f"cannot select {count} distinct items from a sequence of {len(items)}"
        )
    return shuffle(items, rng)[:count]


def random_int_inclusive(lo: int, hi: int, rng: Rng) -> int:
    return lo + math.floor(rng() * (hi - lo + 1))


def roll_chance(chance: Optional[float], rng: Rng) -> bool:
    # An absent chance always succeeds and leaves the generator untouched.
    if chance is None:
        return True
    return rng() <= chance
