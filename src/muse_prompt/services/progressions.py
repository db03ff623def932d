"""Chord progression catalog, genre mapping and lexical progression detection."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

from .random import Rng


@dataclass(frozen=True)
class ChordProgression:
    key: str
    name: str
    pattern: str
    numerals: str
    moods: tuple[str, ...]
    genres: tuple[str, ...]
    description: str

    @property
    def short(self) -> str:
        return f"{self.name} ({self.pattern})"

    @property
    def harmony_tag(self) -> str:
        return f"{self.short} harmony"


def _progression(
    key: str,
    name: str,
    pattern: str,
    numerals: str,
    moods: tuple[str, ...],
    genres: tuple[str, ...],
    description: str,
) -> ChordProgression:
    return ChordProgression(key, name, pattern, numerals, moods, genres, description)


POP_PROGRESSIONS: dict[str, ChordProgression] = {
    p.key: p
    for p in (
        _progression(
            "the_standard",
            "The Standard",
            "I-V-vi-IV",
            "I - V - vi - IV",
            ("uplifting", "anthemic", "energetic", "hopeful"),
            ("pop", "rock", "country", "folk"),
            "The most popular progression in modern music - uplifting and versatile",
        ),
        _progression(
            "the_doo_wop",
            "The Doo-Wop",
            "I-vi-IV-V",
            "I - vi - IV - V",
            ("romantic", "nostalgic", "warm", "tender"),
            ("pop", "soul", "retro", "rnb"),
            "Classic 50s/60s progression - romantic and timeless",
        ),
        _progression(
            "the_sensitive",
            "The Sensitive",
            "vi-IV-I-V",
            "vi - IV - I - V",
            ("emotional", "vulnerable", "melancholic", "bittersweet"),
            ("pop", "punk", "rock", "emo"),
            "Starting on minor creates emotional depth - perfect for ballads",
        ),
        _progression(
            "the_emotional_ballad",
            "The Emotional Ballad",
            "vi-V-IV-V",
            "vi - V - IV - V",
            ("heartfelt", "intimate", "romantic", "tender"),
            ("pop", "soul", "rnb", "country"),
            "Tender progression for emotional storytelling",
        ),
        _progression(
            "the_canon",
            "The Canon",
            "I-V-vi-iii",
            "I - V - vi - iii",
            ("cheerful", "playful", "nostalgic", "uplifting"),
            ("pop", "rock", "folk", "classical"),
            "Based on Pachelbel's Canon - elegant and flowing",
        ),
        _progression(
            "the_empowerment",
            "The Empowerment Anthem",
            "IV-I-V-vi",
            "IV - I - V - vi",
            ("uplifting", "powerful", "triumphant", "hopeful"),
            ("pop", "rock", "country"),
            "Starting on IV creates a lifting feeling - great for anthems",
        ),
        _progression(
            "the_rock_and_roll",
            "The Rock & Roll",
            "I-IV-V",
            "I - IV - V",
            ("energetic", "driving", "fun", "party"),
            ("rock", "blues", "country", "punk"),
            "The classic three-chord progression - raw and powerful",
        ),
        _progression(
            "the_jazz_pop",
            "The Jazz Pop",
            "ii-V-I",
            "ii - V - I",
            ("smooth", "sophisticated", "warm", "elegant"),
            ("jazz", "rnb", "soul", "lofi"),
            "The essential jazz cadence - sophisticated and resolved",
        ),
        _progression(
            "the_turnaround",
            "The Turnaround",
            "I-vi-ii-V",
            "I - vi - ii - V",
            ("romantic", "nostalgic", "smooth", "warm"),
            ("jazz", "soul", "retro", "lofi"),
            "Classic jazz turnaround - keeps the harmony moving",
        ),
        _progression(
            "the_plagal",
            "The Plagal",
            "I-IV-I-V",
            "I - IV - I - V",
            ("hopeful", "uplifting", "spiritual", "warm"),
            ("gospel", "country", "folk", "soul"),
            'Church-like "Amen" cadence - spiritual and resolved',
        ),
    )
}

DARK_PROGRESSIONS: dict[str, ChordProgression] = {
    p.key: p
    for p in (
        _progression(
            "the_andalusian",
            "The Andalusian",
            "i-VII-VI-V",
            "i - bVII - bVI - V",
            ("dramatic", "tense", "passionate", "exotic"),
            ("cinematic", "latin", "metal", "flamenco"),
            "Spanish/Flamenco progression - dramatic and passionate",
        ),
        _progression(
            "the_phrygian",
            "The Phrygian",
            "i-bII-i",
            "i - bII - i",
            ("ominous", "tense", "dark", "exotic"),
            ("metal", "cinematic", "electronic"),
            "Phrygian mode movement - dark and mysterious",
        ),
        _progression(
            "the_dramatic_minor",
            "The Dramatic Minor",
            "i-iv-V",
            "i - iv - V",
            ("dramatic", "tense", "passionate", "intense"),
            ("classical", "cinematic", "rock", "metal"),
            "Classic minor progression - dramatic tension and release",
        ),
        _progression(
            "the_creep",
            "The Creep",
            "I-III-IV-iv",
            "I - III - IV - iv",
            ("melancholic", "introspective", "haunting", "bittersweet"),
            ("rock", "alternative", "indie"),
            "Major to borrowed minor iv - haunting and memorable",
        ),
        _progression(
            "the_minor_pop",
            "The Minor Pop",
            "i-VI-V-i",
            "i - bVI - V - i",
            ("powerful", "dramatic", "dark", "emotional"),
            ("pop", "electronic", "rock"),
            "Minor key with strong resolution - dark but catchy",
        ),
        _progression(
            "the_sad_loop",
            "The Sad Loop",
            "i-VI-i-VII",
            "i - bVI - i - bVII",
            ("melancholic", "brooding", "haunting", "numb"),
            ("trap", "rnb", "electronic", "lofi"),
            "Hypnotic minor loop - modern and melancholic",
        ),
        _progression(
            "the_suspense",
            "The Suspense",
            "V-VI-V-VI",
            "V - bVI - V - bVI",
            ("tense", "ominous", "building", "suspenseful"),
            ("cinematic", "electronic", "ambient"),
            "Tension-building oscillation - perfect for suspense",
        ),
        _progression(
            "the_picardy",
            "The Picardy",
            "i-VII-VI-I",
            "i - bVII - bVI - I",
            ("bittersweet", "hopeful", "triumphant", "resolving"),
            ("classical", "cinematic", "rock"),
            "Minor to major resolution - dark journey to light",
        ),
    )
}

JAZZ_PROGRESSIONS: dict[str, ChordProgression] = {
    p.key: p
    for p in (
        _progression(
            "the_two_five_one",
            "The 2-5-1",
            "ii-V-I",
            "ii7 - V7 - Imaj7",
            ("smooth", "sophisticated", "warm", "resolved"),
            ("jazz", "soul", "rnb", "lofi"),
            "The cornerstone of jazz harmony - smooth and sophisticated",
        ),
        _progression(
            "the_soul_vamp",
            "The Soul Vamp",
            "i-IV",
            "i7 - IV7",
            ("groovy", "hypnotic", "soulful", "warm"),
            ("soul", "funk", "rnb", "jazz"),
            "Two-chord soul groove - hypnotic and timeless",
        ),
        _progression(
            "the_minor_plagal",
            "The Minor Plagal",
            "IV-iv-I",
            "IV - iv - I",
            ("melancholic", "beautiful", "bittersweet", "emotional"),
            ("jazz", "soul", "pop", "rock"),
            "Major IV to minor iv - beautiful melancholy",
        ),
        _progression(
            "the_blues",
            "The Blues",
            "I-IV-I-V",
            "I7 - IV7 - I7 - V7",
            ("soulful", "gritty", "emotional", "groovy"),
            ("blues", "jazz", "rock", "soul"),
            "Essential blues changes - raw and expressive",
        ),
        _progression(
            "the_neo_soul",
            "The Neo-Soul Walk",
            "I-iii-IV-V",
            "Imaj7 - iii7 - IVmaj7 - V7",
            ("smooth", "romantic", "warm", "uplifting"),
            ("rnb", "soul", "jazz", "lofi"),
            "Smooth walking progression - modern soul classic",
        ),
        _progression(
            "the_gospel",
            "The Gospel Turn",
            "I-IV-I-V",
            "I - IV - I - V",
            ("uplifting", "joyful", "spiritual", "powerful"),
            ("gospel", "soul", "rnb"),
            "Church progression with gospel voicings - uplifting and spiritual",
        ),
        _progression(
            "the_smooth",
            "The Smooth Operator",
            "i-iv-v",
            "i7 - iv7 - v7",
            ("smooth", "sultry", "intimate", "sophisticated"),
            ("jazz", "rnb", "lofi", "soul"),
            "Minor smooth jazz vamp - intimate and seductive",
        ),
        _progression(
            "the_bossa",
            "The Bossa Nova",
            "Imaj7-ii7-V7-Imaj7",
            "Imaj7 - ii7 - V7 - Imaj7",
            ("relaxed", "romantic", "breezy", "warm"),
            ("jazz", "latin", "lofi"),
            "Brazilian jazz harmony - relaxed and romantic",
        ),
        _progression(
            "the_lydian",
            "The Lydian Dream",
            "Imaj7#11-II7",
            "Imaj7#11 - II7",
            ("dreamy", "floating", "ethereal", "wonder"),
            ("jazz", "ambient", "cinematic", "electronic"),
            "Lydian color - dreamy and floating",
        ),
    )
}

ALL_PROGRESSIONS: dict[str, ChordProgression] = {
    **POP_PROGRESSIONS,
    **DARK_PROGRESSIONS,
    **JAZZ_PROGRESSIONS,
}

DEFAULT_PROGRESSION = ALL_PROGRESSIONS["the_standard"]

GENRE_PROGRESSIONS: dict[str, tuple[str, ...]] = {
    "jazz": (
        "the_two_five_one",
        "the_turnaround",
        "the_bossa",
        "the_soul_vamp",
        "the_smooth",
        "the_lydian",
    ),
    "pop": ("the_standard", "the_sensitive", "the_doo_wop", "the_empowerment", "the_canon"),
    "rock": (
        "the_rock_and_roll",
        "the_standard",
        "the_creep",
        "the_sensitive",
        "the_dramatic_minor",
    ),
    "electronic": ("the_minor_pop", "the_sad_loop", "the_suspense", "the_phrygian"),
    "rnb": ("the_two_five_one", "the_neo_soul", "the_soul_vamp", "the_doo_wop", "the_smooth"),
    "soul": ("the_soul_vamp", "the_gospel", "the_blues", "the_neo_soul", "the_two_five_one"),
    "blues": ("the_blues", "the_rock_and_roll", "the_soul_vamp", "the_dramatic_minor"),
    "country": ("the_standard", "the_rock_and_roll", "the_plagal", "the_doo_wop"),
    "folk": ("the_standard", "the_canon", "the_plagal", "the_rock_and_roll"),
    "classical": ("the_dramatic_minor", "the_picardy", "the_canon", "the_andalusian"),
    "cinematic": (
        "the_andalusian",
        "the_suspense",
        "the_picardy",
        "the_dramatic_minor",
        "the_lydian",
    ),
    "ambient": ("the_lydian", "the_suspense", "the_minor_plagal", "the_sad_loop"),
    "lofi": ("the_two_five_one", "the_smooth", "the_neo_soul", "the_sad_loop", "the_bossa"),
    "metal": ("the_phrygian", "the_andalusian", "the_dramatic_minor", "the_minor_pop"),
    "punk": ("the_rock_and_roll", "the_sensitive", "the_standard"),
    "trap": ("the_sad_loop", "the_minor_pop", "the_phrygian"),
    "latin": ("the_andalusian", "the_bossa", "the_two_five_one"),
    "retro": ("the_doo_wop", "the_turnaround", "the_rock_and_roll", "the_standard"),
    "synthwave": ("the_minor_pop", "the_sad_loop", "the_standard", "the_sensitive"),
    "videogame": ("the_lydian", "the_standard", "the_dramatic_minor", "the_picardy"),
    "symphonic": ("the_dramatic_minor", "the_picardy", "the_andalusian", "the_empowerment"),
}

# First matching cue wins, so the more specific phrasings are listed first.
PROGRESSION_CUES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("2-5-1", "ii-v-i", "two five one"), "the_two_five_one"),
    (("andalusian", "flamenco"), "the_andalusian"),
    (("doo-wop", "doo wop"), "the_doo_wop"),
    (("i-v-vi-iv", "four chord"), "the_standard"),
    (("blues progression", "12 bar", "twelve bar"), "the_blues"),
    (("bossa nova", "bossa"), "the_bossa"),
    (("lydian",), "the_lydian"),
    (("phrygian",), "the_phrygian"),
)

_HARMONY_TAG = re.compile(r"\([IViv\d\-#maj]+\)\s*harmony", re.IGNORECASE)
_QUOTED_INSTRUMENTS = re.compile(r'^(instruments:\s*")([^"]*)"', re.IGNORECASE | re.MULTILINE)


def get_progression(key: str) -> Optional[ChordProgression]:
    return ALL_PROGRESSIONS.get(key)


def get_progressions_for_genre(genre: str) -> list[ChordProgression]:
    keys = GENRE_PROGRESSIONS.get(genre.strip().lower(), GENRE_PROGRESSIONS["pop"])
    return [ALL_PROGRESSIONS[key] for key in keys if key in ALL_PROGRESSIONS]


def get_random_progression_for_genre(genre: str, rng: Rng) -> ChordProgression:
    progressions = get_progressions_for_genre(genre)
    if not progressions:
        return DEFAULT_PROGRESSION
    index = math.floor(rng() * len(progressions))
    if index >= len(progressions):
        return DEFAULT_PROGRESSION
    return progressions[index]


def build_progression_descriptor(genre: str, rng: Rng) -> str:
    progression = get_random_progression_for_genre(genre, rng)
    return f"{progression.short}: {progression.description}"


def build_progression_short(genre: str, rng: Rng) -> str:
    return get_random_progression_for_genre(genre, rng).short


def detect_progression(text: str) -> Optional[ChordProgression]:
    folded = text.casefold()
    for cues, key in PROGRESSION_CUES:
        if any(cue in folded for cue in cues):
            return ALL_PROGRESSIONS.get(key)
    return None


def has_chord_progression(prompt: str) -> bool:
    return _HARMONY_TAG.search(prompt) is not None


def inject_chord_progression(prompt: str, genre: str, rng: Rng) -> str:
    """Append a harmony tag to a quoted ``instruments:`` line when none is present.

    Prompts without a quoted instruments line are returned unchanged, and the RNG is only
    consumed when a tag is actually about to be written.
    """
    if has_chord_progression(prompt):
        return prompt
    match = _QUOTED_INSTRUMENTS.search(prompt)
    if match is None:
        return prompt
    progression = get_random_progression_for_genre(genre, rng)
    existing = match.group(2).strip()
    value = f"{existing}, {progression.harmony_tag}" if existing else progression.harmony_tag
    return prompt[: match.start()] + f"{match.group(1)}{value}\"" + prompt[match.end() :]
