"""Cross-genre instrument tiers used by the quota stage of instrument selection."""

from __future__ import annotations

from enum import Enum

from .genres import GENRE_REGISTRY
from .instruments import to_canonical


class InstrumentTier(str, Enum):
    FOUNDATIONAL = "foundational"
    MULTIGENRE = "multigenre"
    ORCHESTRAL_COLOR = "orchestral_color"
    GENRE = "genre"


FOUNDATIONAL_INSTRUMENTS: tuple[str, ...] = (
    "drums",
    "kick drum",
    "hi-hat",
    "snare drum",
    "bass",
    "sub-bass",
    "strings",
    "synth pad",
    "synth",
    "analog synth",
    "digital synth",
    "FM synth",
    "arpeggiator",
    "percussion",
)

ORCHESTRAL_COLOR_INSTRUMENTS: tuple[str, ...] = (
    "celesta",
    "glockenspiel",
    "harp",
    "violin",
    "cello",
    "french horn",
    "timpani",
    "taiko drums",
    "choir",
    "wordless choir",
    "piccolo",
    "english horn",
    "bass clarinet",
    "contrabassoon",
    "tuba",
    "bass trombone",
    "solo soprano",
    "suspended cymbal",
    "crash cymbal",
    "tam tam",
    "mark tree",
    "orchestral bass drum",
)

MULTIGENRE_FORCE_INCLUDE: tuple[str, ...] = (
    "808",
    "Clavinet",
    "Hammond organ",
    "Rhodes",
    "Wurlitzer",
    "electric piano",
    "vibraphone",
    "bells",
    "guitar",
    "acoustic guitar",
    "muted trumpet",
    "mellotron",
    "marimba",
    "pedal steel",
    "finger snaps",
    "synth choir",
)

# Too genre-specific to travel, even though several genres list them.
MULTIGENRE_FORCE_EXCLUDE: tuple[str, ...] = (
    "felt piano",
    "jazz brushes",
    "trumpet",
    "flute",
    "clarinet",
)

MULTIGENRE_THRESHOLD = 3

_FOUNDATIONAL_FOLDED = frozenset(name.casefold() for name in FOUNDATIONAL_INSTRUMENTS)
_ORCHESTRAL_FOLDED = frozenset(name.casefold() for name in ORCHESTRAL_COLOR_INSTRUMENTS)


def _canonical_fold(instrument: str) -> str:
    return (to_canonical(instrument) or instrument).casefold()


def build_instrument_to_genres_index() -> dict[str, set[str]]:
    index: dict[str, set[str]] = {}
    for key, genre in GENRE_REGISTRY.items():
        for instrument in genre.all_instruments():
            canonical = to_canonical(instrument) or instrument
            index.setdefault(canonical, set()).add(key)
    return index


def compute_multigenre_instruments(threshold: int = MULTIGENRE_THRESHOLD) -> list[str]:
    index = build_instrument_to_genres_index()
    excluded = {name.casefold() for name in MULTIGENRE_FORCE_EXCLUDE}
    result: set[str] = set()
    for instrument, genres in index.items():
        if len(genres) >= threshold:
            result.add(instrument)
    result.update(MULTIGENRE_FORCE_INCLUDE)
    return sorted(
        instrument
        for instrument in result
        if instrument.casefold() not in excluded
        and instrument.casefold() not in _FOUNDATIONAL_FOLDED
        and instrument.casefold() not in _ORCHESTRAL_FOLDED
    )


MULTIGENRE_INSTRUMENTS: tuple[str, ...] = tuple(compute_multigenre_instruments())

_MULTIGENRE_FOLDED = frozenset(name.casefold() for name in MULTIGENRE_INSTRUMENTS)


def is_foundational_instrument(instrument: str) -> bool:
    return _canonical_fold(instrument) in _FOUNDATIONAL_FOLDED


def is_orchestral_color_instrument(instrument: str) -> bool:
    return _canonical_fold(instrument) in _ORCHESTRAL_FOLDED


def is_multigenre_instrument(instrument: str) -> bool:
    return _canonical_fold(instrument) in _MULTIGENRE_FOLDED


def get_instrument_class(instrument: str) -> InstrumentTier:
    if is_foundational_instrument(instrument):
        return InstrumentTier.FOUNDATIONAL
    if is_orchestral_color_instrument(instrument):
        return InstrumentTier.ORCHESTRAL_COLOR
    if is_multigenre_instrument(instrument):
        return InstrumentTier.MULTIGENRE
    return InstrumentTier.GENRE


def tier_instruments(tier: InstrumentTier) -> tuple[str, ...]:
    if tier == InstrumentTier.FOUNDATIONAL:
        return FOUNDATIONAL_INSTRUMENTS
    if tier == InstrumentTier.ORCHESTRAL_COLOR:
        return ORCHESTRAL_COLOR_INSTRUMENTS
    if tier == InstrumentTier.MULTIGENRE:
        return MULTIGENRE_INSTRUMENTS
    return ()
