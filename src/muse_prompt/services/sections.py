"""Song-section lines (``[INTRO]`` through ``[OUTRO]``) for the standard prompt shape."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from .articulation import articulate_instrument
from .genres import get_genre_or_default
from .random import Rng, select_random, shuffle
from .selector import SelectionOptions, select_instruments_for_genre


class SectionType(str, Enum):
    INTRO = "INTRO"
    VERSE = "VERSE"
    CHORUS = "CHORUS"
    BRIDGE = "BRIDGE"
    OUTRO = "OUTRO"


class SectionEnergy(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SectionTemplate:
    type: SectionType
    templates: tuple[str, ...]
    instrument_count: int
    energy: SectionEnergy


@dataclass(frozen=True)
class SectionResult:
    type: SectionType
    text: str
    instruments: list[str]
    moods: list[str]


@dataclass(frozen=True)
class AllSectionsResult:
    sections: list[SectionResult]
    text: str
    all_instruments: list[str]


SECTION_TEMPLATES: dict[SectionType, SectionTemplate] = {
    SectionType.INTRO: SectionTemplate(
        type=SectionType.INTRO,
        templates=(
            "Sparse {instrument1} setting a {mood} scene",
            "{descriptor} {instrument1} introduces the {mood} atmosphere",
            "Ambient {instrument1} fades in with {mood} undertones",
            "{mood} {instrument1} opens with {descriptor} tones",
            "Gentle {instrument1} establishes {mood} mood",
            "{instrument1} sets the stage with {descriptor} textures",
        ),
        instrument_count=1,
        energy=SectionEnergy.LOW,
    ),
    SectionType.VERSE: SectionTemplate(
        type=SectionType.VERSE,
        templates=(
            "{instrument1} enters as {instrument2} weaves {mood} melodic lines",
            "{descriptor} {instrument1} drives the narrative with {instrument2} support",
            "{mood} groove builds with {instrument1} and {instrument2}",
            "{instrument1} lays the foundation while {instrument2} adds {descriptor} color",
            "Storytelling {instrument1} leads with {mood} {instrument2} phrases",
            "{descriptor} interplay between {instrument1} and {instrument2}",
        ),
        instrument_count=2,
        energy=SectionEnergy.MEDIUM,
    ),
    SectionType.CHORUS: SectionTemplate(
        type=SectionType.CHORUS,
        templates=(
            "Full arrangement peaks with {descriptor} {instrument1} and {instrument2}",
            "{mood} energy surges as {instrument1} and {instrument2} unite",
            "Layered {instrument1} drives the {mood} hook with {instrument2}",
            "Anthemic {instrument1} soars over {descriptor} {instrument2}",
            "{mood} climax with powerful {instrument1} and {instrument2}",
            "{descriptor} full ensemble featuring {instrument1} and {instrument2}",
        ),
        instrument_count=2,
        energy=SectionEnergy.HIGH,
    ),
    SectionType.BRIDGE: SectionTemplate(
        type=SectionType.BRIDGE,
        templates=(
            "Stripped down {instrument1} creates {mood} contrast",
            "{descriptor} {instrument1} solo offers introspection",
            "{mood} breakdown featuring intimate {instrument1}",
            "Contrasting {instrument1} provides {descriptor} texture",
            "Reflective {instrument1} moment with {mood} undertones",
            "{instrument1} break shifts to {descriptor} territory",
        ),
        instrument_count=1,
        energy=SectionEnergy.LOW,
    ),
    SectionType.OUTRO: SectionTemplate(
        type=SectionType.OUTRO,
        templates=(
            "Gentle fade with {mood} {instrument1} and {instrument2} swells",
            "{instrument1} resolves as {instrument2} provides {descriptor} closure",
            "{mood} resolution with lingering {instrument1}",
            "{descriptor} {instrument1} fades into {instrument2} echoes",
            "Peaceful {instrument1} brings {mood} conclusion",
            "{instrument1} and {instrument2} create {descriptor} final moments",
        ),
        instrument_count=2,
        energy=SectionEnergy.LOW,
    ),
}

SECTION_ORDER: tuple[SectionType, ...] = tuple(SECTION_TEMPLATES)

GENERIC_MOODS: tuple[str, ...] = (
    "expressive",
    "dynamic",
    "emotional",
    "compelling",
    "atmospheric",
    "evocative",
)

GENERIC_DESCRIPTORS: tuple[str, ...] = (
    "rich",
    "warm",
    "bright",
    "smooth",
    "textured",
    "resonant",
    "subtle",
    "bold",
    "delicate",
    "expansive",
)

RECENT_INSTRUMENT_WINDOW = 4


def _moods_for_genre(genre_key: str) -> tuple[str, ...]:
    genre = get_genre_or_default(genre_key)
    if genre.moods:
        return tuple(mood.lower() for mood in genre.moods)
    return GENERIC_MOODS


def _select_section_instruments(
    genre_key: str,
    count: int,
    recent: Sequence[str],
    rng: Rng,
) -> list[str]:
    pool_size = max(count * 3, 6)
    pool = select_instruments_for_genre(genre_key, SelectionOptions(rng=rng, max_tags=pool_size))
    fresh = [instrument for instrument in pool if instrument not in recent]
    candidates = fresh if len(fresh) >= count else pool
    return shuffle(candidates, rng)[:count]


def build_section(
    section_type: SectionType,
    genre_key: str,
    rng: Rng,
    recent_instruments: Sequence[str] = (),
) -> SectionResult:
    template = SECTION_TEMPLATES[section_type]
    template_text = select_random(template.templates, rng)

    raw_instruments = _select_section_instruments(
        genre_key, template.instrument_count, recent_instruments, rng
    )
    instruments = [articulate_instrument(instrument, rng) for instrument in raw_instruments]

    moods = shuffle(_moods_for_genre(genre_key), rng)[:2]
    descriptor = select_random(GENERIC_DESCRIPTORS, rng)

    first = instruments[0] if instruments else "instrumentation"
    second = instruments[1] if len(instruments) > 1 else (first if instruments else "accompaniment")
    text = template_text.format(
        instrument1=first,
        instrument2=second,
        mood=moods[0] if moods else "expressive",
        descriptor=descriptor,
    )
    return SectionResult(
        type=section_type,
        text=f"[{section_type.value}] {text}",
        instruments=raw_instruments,
        moods=moods,
    )


def build_all_sections(genre_key: str, rng: Rng) -> AllSectionsResult:
    """Build every section in order, steering away from the most recently used instruments."""
    sections: list[SectionResult] = []
    recent: list[str] = []
    all_instruments: list[str] = []
    for section_type in SECTION_ORDER:
        result = build_section(section_type, genre_key, rng, recent)
        sections.append(result)
        all_instruments.extend(result.instruments)
        recent = [*recent, *result.instruments][-RECENT_INSTRUMENT_WINDOW:]
    return AllSectionsResult(
        sections=sections,
        text="\n".join(section.text for section in sections),
        all_instruments=all_instruments,
    )
