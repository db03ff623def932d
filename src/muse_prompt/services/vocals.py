"""Vocal style catalog: range, delivery and technique suggestions per genre."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .random import Rng, select_random, select_random_n


@dataclass(frozen=True)
class VocalStyleProfile:
    ranges: tuple[str, ...]
    deliveries: tuple[str, ...]
    techniques: tuple[str, ...]


@dataclass(frozen=True)
class VocalSuggestion:
    range: str
    delivery: str
    technique: str


@dataclass(frozen=True)
class BackingVocalProfile:
    adlibs: tuple[str, ...]
    echo_styles: tuple[str, ...]


@dataclass(frozen=True)
class BackingVocals:
    adlibs: list[str]
    echo_style: str


GENRE_VOCAL_STYLES: dict[str, VocalStyleProfile] = {
    "jazz": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Alto", "Mezzo Soprano"),
        deliveries=("Smooth", "Crooner Style", "Laid Back", "Intimate", "Melismatic"),
        techniques=("Scat Fills", "Stacked Harmonies", "Ad Libs"),
    ),
    "pop": VocalStyleProfile(
        ranges=("Tenor", "Mezzo Soprano", "Alto"),
        deliveries=("Belting", "Powerful", "Confident", "Emotional", "Breathy"),
        techniques=("Stacked Harmonies", "Singalong Chorus", "Ad Libs", "Layered Ooh Harmonies"),
    ),
    "rock": VocalStyleProfile(
        ranges=("Tenor", "Baritone"),
        deliveries=("Raspy", "Powerful", "Belting", "Urgent", "Emotional"),
        techniques=("Gang Vocals", "Shouted Hooks", "Call And Response"),
    ),
    "electronic": VocalStyleProfile(
        ranges=("Soprano", "Mezzo Soprano", "Alto"),
        deliveries=("Airy", "Breathy", "Smooth", "Intimate"),
        techniques=("Layered Ooh Harmonies", "Wordless Vocalise", "Ad Libs"),
    ),
    "rnb": VocalStyleProfile(
        ranges=("Tenor", "Alto", "Mezzo Soprano"),
        deliveries=("Smooth", "Melismatic", "Soulful", "Intimate", "Falsetto"),
        techniques=("Stacked Harmonies", "Ad Libs", "Call And Response", "Occasional Falsetto"),
    ),
    "soul": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Alto", "Mezzo Soprano"),
        deliveries=("Soulful", "Powerful", "Belting", "Emotional", "Melismatic"),
        techniques=("Gospel Style Backing", "Call And Response", "Ad Libs", "Stacked Harmonies"),
    ),
    "country": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Mezzo Soprano"),
        deliveries=("Storytelling", "Warm", "Honest", "Emotional", "Gentle"),
        techniques=("Tight Three Part Harmonies", "Singalong Chorus", "Call And Response"),
    ),
    "folk": VocalStyleProfile(
        ranges=("Tenor", "Alto", "Baritone"),
        deliveries=("Intimate", "Storytelling", "Warm", "Gentle", "Close Mic"),
        techniques=("Tight Three Part Harmonies", "Singalong Chorus", "Group Backing Vocals"),
    ),
    "metal": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Bass"),
        deliveries=("Powerful", "Aggressive", "Raspy", "Theatrical"),
        techniques=("Shouted Hooks", "Gang Vocals", "Wordless Vocalise"),
    ),
    "punk": VocalStyleProfile(
        ranges=("Tenor", "Alto"),
        deliveries=("Raspy", "Urgent", "Raw", "Shouting", "Melodic"),
        techniques=("Gang Vocals", "Shouted Hooks", "Singalong Chorus"),
    ),
    "classical": VocalStyleProfile(
        ranges=("Soprano", "Tenor", "Baritone", "Bass"),
        deliveries=("Theatrical", "Powerful", "Dramatic", "Operatic"),
        techniques=("Wordless Vocalise", "Stacked Harmonies"),
    ),
    "ambient": VocalStyleProfile(
        ranges=("Soprano", "Alto"),
        deliveries=("Airy", "Breathy", "Ethereal", "Soft", "Intimate"),
        techniques=("Wordless Vocalise", "Layered Ooh Harmonies"),
    ),
    "lofi": VocalStyleProfile(
        ranges=("Tenor", "Alto"),
        deliveries=("Intimate", "Breathy", "Soft", "Laid Back", "Close Mic"),
        techniques=("Layered Ooh Harmonies", "Ad Libs"),
    ),
    "blues": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Alto"),
        deliveries=("Soulful", "Raspy", "Emotional", "Melismatic", "Storytelling"),
        techniques=("Call And Response", "Ad Libs", "Shouted Hooks"),
    ),
    "latin": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Alto", "Mezzo Soprano"),
        deliveries=("Smooth", "Passionate", "Romantic", "Warm"),
        techniques=("Call And Response", "Stacked Harmonies", "Ad Libs"),
    ),
    "retro": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Mezzo Soprano"),
        deliveries=("Crooner Style", "Smooth", "Warm", "Theatrical"),
        techniques=("Doo Wop Backing", "Tight Three Part Harmonies", "Singalong Chorus"),
    ),
    "synthwave": VocalStyleProfile(
        ranges=("Tenor", "Baritone", "Alto"),
        deliveries=("Smooth", "Breathy", "Dramatic", "Airy"),
        techniques=("Layered Ooh Harmonies", "Double Tracked Lead"),
    ),
    "cinematic": VocalStyleProfile(
        ranges=("Soprano", "Tenor", "Baritone"),
        deliveries=("Theatrical", "Powerful", "Dramatic", "Ethereal"),
        techniques=("Wordless Vocalise", "Stacked Harmonies", "Gospel Style Backing"),
    ),
    "trap": VocalStyleProfile(
        ranges=("Tenor", "Baritone"),
        deliveries=("Laid Back", "Melismatic", "Emotional", "Smooth"),
        techniques=("Ad Libs", "Layered Ooh Harmonies", "Double Tracked Lead"),
    ),
    "videogame": VocalStyleProfile(
        ranges=("Soprano", "Tenor", "Alto"),
        deliveries=("Theatrical", "Dramatic", "Ethereal", "Powerful"),
        techniques=("Wordless Vocalise", "Stacked Harmonies"),
    ),
    "symphonic": VocalStyleProfile(
        ranges=("Soprano", "Tenor", "Baritone"),
        deliveries=("Theatrical", "Powerful", "Dramatic", "Operatic"),
        techniques=("Wordless Vocalise", "Stacked Harmonies", "Gospel Style Backing"),
    ),
}

DEFAULT_VOCAL_STYLE = VocalStyleProfile(
    ranges=("Tenor", "Alto", "Mezzo Soprano"),
    deliveries=("Smooth", "Emotional", "Warm"),
    techniques=("Stacked Harmonies", "Ad Libs"),
)

GENRE_BACKING_VOCALS: dict[str, BackingVocalProfile] = {
    "jazz": BackingVocalProfile(
        adlibs=("doo", "ba-da", "shoo-bee", "mmm"),
        echo_styles=("scatted answer", "soft echo of the last word"),
    ),
    "pop": BackingVocalProfile(
        adlibs=("ooh", "oh-oh", "hey", "yeah"),
        echo_styles=("repeat the hook word", "stacked echo of the last line"),
    ),
    "rock": BackingVocalProfile(
        adlibs=("whoa", "hey", "yeah", "oh"),
        echo_styles=("shouted echo of the key word", "gang answer"),
    ),
    "rnb": BackingVocalProfile(
        adlibs=("ooh", "yeah", "mmm", "oh-whoa"),
        echo_styles=("falsetto echo of the last word", "harmonized answer"),
    ),
    "soul": BackingVocalProfile(
        adlibs=("ooh", "oh yeah", "mmm", "hallelujah"),
        echo_styles=("choir answer", "call-and-response echo"),
    ),
    "country": BackingVocalProfile(
        adlibs=("ooh", "ahh", "whoa"),
        echo_styles=("harmony echo of the last line", "soft repeat of the key word"),
    ),
    "folk": BackingVocalProfile(
        adlibs=("ooh", "ahh", "la-la", "hmm"),
        echo_styles=("group echo of the refrain", "soft repeat of the key word"),
    ),
    "ambient": BackingVocalProfile(
        adlibs=("ahh", "ooh", "mmm"),
        echo_styles=("distant reverb echo", "whispered repeat"),
    ),
    "retro": BackingVocalProfile(
        adlibs=("doo-wop", "sha-la-la", "ooh", "bom-bom"),
        echo_styles=("doo-wop answer", "close-harmony echo"),
    ),
    "trap": BackingVocalProfile(
        adlibs=("yeah", "uh", "skrrt", "woo"),
        echo_styles=("pitched-down echo", "ad-lib repeat of the last word"),
    ),
    "punk": BackingVocalProfile(
        adlibs=("hey", "oi", "whoa"),
        echo_styles=("gang shout of the key word", "shouted answer"),
    ),
}

DEFAULT_BACKING_VOCALS = BackingVocalProfile(
    adlibs=("ooh", "ahh", "mmm", "oh"),
    echo_styles=("echo of the last word", "soft repeat of the key phrase"),
)

ADLIB_COUNT = 2


def get_vocal_style(genre: str) -> VocalStyleProfile:
    return GENRE_VOCAL_STYLES.get(genre.strip().lower(), DEFAULT_VOCAL_STYLE)


def _suggest(style: VocalStyleProfile, rng: Rng) -> VocalSuggestion:
    return VocalSuggestion(
        range=select_random(style.ranges, rng),
        delivery=select_random(style.deliveries, rng),
        technique=select_random(style.techniques, rng),
    )


def get_vocal_suggestions_for_genre(genre: str, rng: Rng) -> VocalSuggestion:
    return _suggest(get_vocal_style(genre), rng)


def build_vocal_descriptor(genre: str, rng: Rng) -> str:
    suggestion = get_vocal_suggestions_for_genre(genre, rng)
    return f"{suggestion.range}, {suggestion.delivery} Delivery, {suggestion.technique}"


def _union(groups: Sequence[tuple[str, ...]]) -> tuple[str, ...]:
    merged: list[str] = []
    for group in groups:
        for item in group:
            if item not in merged:
                merged.append(item)
    return tuple(merged)


def build_blended_vocal_descriptor(genres: Sequence[str], rng: Rng) -> str:
    """Blend the vocal vocabularies of several genre components into one descriptor."""
    styles = [get_vocal_style(genre) for genre in genres] or [DEFAULT_VOCAL_STYLE]
    blended = VocalStyleProfile(
        ranges=_union([style.ranges for style in styles]),
        deliveries=_union([style.deliveries for style in styles]),
        techniques=_union([style.techniques for style in styles]),
    )
    suggestion = _suggest(blended, rng)
    return f"{suggestion.range}, {suggestion.delivery} Delivery, {suggestion.technique}"


def get_backing_vocals_for_genre(genre: str, rng: Rng) -> BackingVocals:
    profile = GENRE_BACKING_VOCALS.get(genre.strip().lower(), DEFAULT_BACKING_VOCALS)
    adlibs = select_random_n(profile.adlibs, min(ADLIB_COUNT, len(profile.adlibs)), rng)
    return BackingVocals(adlibs=adlibs, echo_style=select_random(profile.echo_styles, rng))
