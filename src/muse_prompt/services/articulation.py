"""Playing-style descriptors that give instrument tags more character."""

from __future__ import annotations

from typing import Optional, Sequence

from .random import Rng, pick_random

ARTICULATION_CHANCE = 0.4
THEME_ARTICULATION_BIAS_CHANCE = 0.6

ARTICULATIONS: dict[str, tuple[str, ...]] = {
    "guitar": (
        "Arpeggiated",
        "Strummed",
        "Picked",
        "Palm Muted",
        "Fingerpicked",
        "Jangly",
        "Clean",
        "Overdriven",
        "Crunchy",
        "Chorus Drenched",
        "Reverb Soaked",
        "Tremolo",
        "Slide",
        "Wah",
    ),
    "piano": (
        "Comping",
        "Arpeggiated",
        "Block Chords",
        "Stride Style",
        "Sparse",
        "Rolling",
        "Gentle",
        "Dramatic",
    ),
    "bass": (
        "Walking",
        "Slapped",
        "Picked",
        "Round",
        "Deep",
        "Punchy",
        "Subby",
        "Groovy",
        "Syncopated",
        "Root Note",
    ),
    "drums": (
        "Brushed",
        "Tight",
        "Punchy",
        "Laid Back",
        "Driving",
        "Snappy",
        "Tom Heavy",
        "Minimal",
        "Busy",
        "Loose",
    ),
    "strings": (
        "Legato",
        "Staccato",
        "Pizzicato",
        "Tremolo",
        "Swelling",
        "Lush",
        "Warm",
        "Soaring",
        "Mournful",
    ),
    "brass": ("Muted", "Bold", "Fanfare", "Stabs", "Swells", "Punchy", "Warm", "Bright"),
    "woodwind": ("Legato", "Staccato", "Soft", "Bright", "Warm", "Solo", "Ornamented", "Runs"),
    "synth": (
        "Sidechained",
        "Evolving",
        "Plucky",
        "Warm",
        "Bright",
        "Detuned",
        "Filtered",
        "Pulsing",
        "Shimmering",
    ),
    "organ": ("Swelling", "Comping", "Warm", "Bright", "Full", "Sparse", "Churchy"),
    "percussion": ("Tight", "Loose", "Syncopated", "Soft", "Driving", "Minimal", "Busy", "Latin"),
}

_CATEGORY_MEMBERS: dict[str, tuple[str, ...]] = {
    "guitar": (
        "guitar",
        "acoustic guitar",
        "electric guitar",
        "nylon string guitar",
        "hollowbody guitar",
        "Fender Stratocaster",
        "Telecaster",
        "distorted guitar",
        "clean guitar",
        "fretless guitar",
    ),
    "piano": (
        "piano",
        "grand piano",
        "felt piano",
        "prepared piano",
        "Rhodes",
        "Wurlitzer",
        "electric piano",
        "synth piano",
    ),
    "bass": ("bass", "upright bass", "walking bass", "electric bass", "synth bass", "808"),
    "drums": ("drums", "jazz brushes", "kick drum", "snare", "hi-hat", "ride cymbal", "toms"),
    "strings": ("strings", "violin", "viola", "cello", "string ensemble"),
    "brass": ("trumpet", "muted trumpet", "trombone", "french horn", "tuba", "brass section"),
    "woodwind": ("saxophone", "tenor sax", "alto sax", "clarinet", "flute", "oboe"),
    "synth": (
        "synth",
        "synth pad",
        "analog synth",
        "FM synth",
        "Moog synth",
        "arpeggiator",
        "supersaw",
    ),
    "organ": ("organ", "Hammond organ", "pipe organ"),
    "percussion": ("congas", "bongos", "shaker", "tambourine", "handclaps", "timpani"),
}

INSTRUMENT_CATEGORIES: dict[str, str] = {
    name.casefold(): category
    for category, members in _CATEGORY_MEMBERS.items()
    for name in members
}

THEME_ARTICULATION_BIAS: dict[str, dict[str, tuple[str, ...]]] = {
    "gentle": {"guitar": ("Fingerpicked", "Clean"), "piano": ("Gentle", "Sparse")},
    "aggressive": {"guitar": ("Crunchy", "Overdriven"), "drums": ("Punchy", "Driving")},
    "dreamy": {
        "guitar": ("Reverb Soaked", "Chorus Drenched"),
        "synth": ("Shimmering", "Evolving"),
    },
    "intimate": {"piano": ("Sparse", "Gentle"), "strings": ("Warm", "Legato")},
    "soft": {"guitar": ("Clean", "Fingerpicked"), "piano": ("Gentle", "Sparse")},
    "hard": {"guitar": ("Crunchy", "Overdriven"), "drums": ("Punchy", "Driving")},
    "ethereal": {"synth": ("Shimmering", "Evolving"), "strings": ("Swelling", "Lush")},
    "warm": {
        "piano": ("Gentle",),
        "strings": ("Warm", "Legato"),
        "bass": ("Round", "Deep"),
    },
    "energetic": {"drums": ("Driving", "Punchy"), "bass": ("Punchy", "Groovy")},
    "melancholic": {"piano": ("Sparse", "Gentle"), "strings": ("Mournful", "Legato")},
}


def get_instrument_category(instrument: str) -> Optional[str]:
    return INSTRUMENT_CATEGORIES.get(instrument.strip().casefold())


def get_articulation_for_instrument(instrument: str, rng: Rng) -> Optional[str]:
    category = get_instrument_category(instrument)
    if category is None:
        return None
    return pick_random(ARTICULATIONS[category], rng)


def articulate_instrument(
    instrument: str,
    rng: Rng,
    chance: float = ARTICULATION_CHANCE,
) -> str:
    if rng() > chance:
        return instrument
    articulation = get_articulation_for_instrument(instrument, rng)
    if articulation is None:
        return instrument
    return f"{articulation} {instrument}"


def articulate_instrument_with_themes(
    instrument: str,
    rng: Rng,
    themes: Optional[Sequence[str]] = None,
    chance: float = ARTICULATION_CHANCE,
) -> str:
    """Articulate ``instrument``, leaning towards descriptors that suit the themes.

    Only the first theme with a bias list for the instrument's category is considered.
    It wins the bias roll with probability ``THEME_ARTICULATION_BIAS_CHANCE``; otherwise
    the uniform descriptor pick applies.
    """
    if rng() > chance:
        return instrument
    category = get_instrument_category(instrument)
    if category is None:
        return instrument

    for theme in themes or ():
        bias = THEME_ARTICULATION_BIAS.get(theme.strip().lower(), {}).get(category)
        if not bias:
            continue
        if rng() < THEME_ARTICULATION_BIAS_CHANCE:
            selected = pick_random(bias, rng)
            if selected is not None:
                return f"{selected} {instrument}"
        break

    articulation = pick_random(ARTICULATIONS[category], rng)
    if articulation is None:
        return instrument
    return f"{articulation} {instrument}"
