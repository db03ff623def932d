"""Resolve the genre a prompt is built around.

Explicit choices beat inferred ones: an override wins over direct styles, which win over
seed genres, which win over keyword detection. Only the final random fallback consumes
the RNG, so the explicit branches never shift the random sequence used downstream.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from loguru import logger

from .genres import ALL_GENRE_KEYS, DEFAULT_GENRE, GENRE_REGISTRY, display_name, is_genre_key
from .random import Rng

# Specific sub-genres come before the broad families whose keywords they contain.
DETECTION_PRIORITY: tuple[str, ...] = (
    "melodictechno",
    "hyperpop",
    "dreampop",
    "synthwave",
    "chillwave",
    "lofi",
    "newage",
    "downtempo",
    "videogame",
    "symphonic",
    "cinematic",
    "drill",
    "trap",
    "afrobeat",
    "reggae",
    "latin",
    "disco",
    "funk",
    "house",
    "trance",
    "metal",
    "punk",
    "indie",
    "rnb",
    "soul",
    "blues",
    "jazz",
    "country",
    "folk",
    "classical",
    "retro",
    "ambient",
    "electronic",
    "rock",
    "pop",
)

_COMPONENT_SPLIT = re.compile(r"[\s,\-/]+|\s+and\s+|\s*&\s*")


class ResolutionSource(str, Enum):
    OVERRIDE = "override"
    DIRECT_STYLES = "direct_styles"
    SEED_GENRES = "seed_genres"
    DETECTED = "detected"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class GenreResolution:
    for_output: str
    for_lookup: str
    components: list[str] = field(default_factory=list)
    source: ResolutionSource = ResolutionSource.FALLBACK


def parse_genre_components(text: str) -> list[str]:
    """Extract registry genre keys from a compound label such as ``"jazz rock"``."""
    normalized = text.strip().lower()
    if not normalized:
        return []
    if is_genre_key(normalized):
        return [normalized]
    components: list[str] = []
    for part in _COMPONENT_SPLIT.split(normalized):
        if part and is_genre_key(part) and part not in components:
            components.append(part)
    return components


def detect_genre(text: str) -> Optional[str]:
    if not text:
        return None
    folded = text.casefold()
    for key in DETECTION_PRIORITY:
        if any(keyword in folded for keyword in GENRE_REGISTRY[key].keywords):
            return key
    return None


def select_random_genre(rng: Rng) -> str:
    index = math.floor(rng() * len(ALL_GENRE_KEYS))
    if 0 <= index < len(ALL_GENRE_KEYS):
        return ALL_GENRE_KEYS[index]
    return DEFAULT_GENRE


def _first_token(value: str) -> str:
    tokens = value.strip().lower().split()
    return tokens[0] if tokens else DEFAULT_GENRE


def resolve_genre(
    detected_text: str,
    rng: Rng,
    *,
    override: Optional[str] = None,
    seed_genres: Optional[Sequence[str]] = None,
    direct_styles: Optional[Sequence[str]] = None,
) -> GenreResolution:
    if override and override.strip():
        components = parse_genre_components(override)
        if not components:
            logger.warning("Genre override '{}' has no recognised genre components", override)
        for_lookup = components[0] if components else _first_token(override)
        logger.debug("Genre resolved from override: {}", components or for_lookup)
        return GenreResolution(
            for_output=override.strip().lower(),
            for_lookup=for_lookup,
            components=components,
            source=ResolutionSource.OVERRIDE,
        )

    raw_styles = list(direct_styles or [])
    styles = [style.strip() for style in raw_styles if style.strip()]
    if styles:
        style_components: list[str] = []
        for style in styles:
            for component in parse_genre_components(style):
                if component not in style_components:
                    style_components.append(component)
        logger.debug("Genre resolved from {} direct style(s)", len(styles))
        return GenreResolution(
            for_output=", ".join(raw_styles),
            for_lookup=_first_token(styles[0]),
            components=style_components,
            source=ResolutionSource.DIRECT_STYLES,
        )

    seeds = [seed.strip().lower() for seed in seed_genres or [] if seed.strip()]
    if seeds:
        logger.debug("Genre resolved from seed genres: {}", seeds)
        return GenreResolution(
            for_output=", ".join(display_name(seed) for seed in seeds),
            for_lookup=seeds[0],
            components=[seed for seed in seeds if is_genre_key(seed)],
            source=ResolutionSource.SEED_GENRES,
        )

    detected = detect_genre(detected_text)
    if detected is not None:
        logger.debug("Genre detected from description: {}", detected)
        return GenreResolution(
            for_output=detected,
            for_lookup=detected,
            components=[detected],
            source=ResolutionSource.DETECTED,
        )

    fallback = select_random_genre(rng)
    logger.debug("No genre keywords matched; falling back to {}", fallback)
    return GenreResolution(
        for_output=fallback,
        for_lookup=fallback,
        components=[fallback],
        source=ResolutionSource.FALLBACK,
    )
