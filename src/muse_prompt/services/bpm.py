"""Tempo ranges blended across the components of a (possibly compound) genre."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from .genres import GENRE_REGISTRY
from .random import Rng, random_int_inclusive
from .resolver import parse_genre_components

DEFAULT_BPM_RANGE = "between 90 and 140"
NARROW_RANGE_SPREAD = 60

_MAX_MODE_BPM = re.compile(r'^bpm:\s*"[^"]*"', re.IGNORECASE | re.MULTILINE)
_STANDARD_MODE_BPM = re.compile(r"^BPM:.*$", re.MULTILINE)


@dataclass(frozen=True)
class BlendedBpmRange:
    min: int
    max: int
    is_intersection: bool

    def format(self) -> str:
        return f"between {self.min} and {self.max}"


def get_blended_bpm_range(genre_text: str) -> Optional[BlendedBpmRange]:
    """Intersect the component tempo ranges.

    Disjoint ranges fall back to the union, narrowed to ``NARROW_RANGE_SPREAD`` BPM
    around its midpoint.
    """
    ranges = [
        (GENRE_REGISTRY[key].bpm.min, GENRE_REGISTRY[key].bpm.max)
        for key in parse_genre_components(genre_text)
    ]
    if not ranges:
        return None
    if len(ranges) == 1:
        return BlendedBpmRange(min=ranges[0][0], max=ranges[0][1], is_intersection=True)

    intersect_min = max(low for low, _ in ranges)
    intersect_max = min(high for _, high in ranges)
    if intersect_min <= intersect_max:
        return BlendedBpmRange(min=intersect_min, max=intersect_max, is_intersection=True)

    union_min = min(low for low, _ in ranges)
    union_max = max(high for _, high in ranges)
    midpoint = (union_min + union_max) / 2
    return BlendedBpmRange(
        min=max(union_min, math.floor(midpoint - NARROW_RANGE_SPREAD / 2)),
        max=min(union_max, math.ceil(midpoint + NARROW_RANGE_SPREAD / 2)),
        is_intersection=False,
    )


def blended_bpm_range(genre_text: str) -> str:
    blended = get_blended_bpm_range(genre_text)
    return blended.format() if blended is not None else DEFAULT_BPM_RANGE


def get_random_bpm(genre_text: str, rng: Rng) -> Optional[int]:
    blended = get_blended_bpm_range(genre_text)
    if blended is None:
        return None
    return random_int_inclusive(blended.min, blended.max, rng)


def inject_bpm_range(prompt: str, genre_text: str) -> str:
    blended = get_blended_bpm_range(genre_text)
    if blended is None:
        return prompt
    value = blended.format()
    if _MAX_MODE_BPM.search(prompt):
        return _MAX_MODE_BPM.sub(f'bpm: "{value}"', prompt, count=1)
    if _STANDARD_MODE_BPM.search(prompt):
        return _STANDARD_MODE_BPM.sub(f"BPM: {value}", prompt, count=1)
    return prompt
