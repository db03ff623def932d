"""Deterministic prompt assembly.

Every randomized decision draws from the ``rng`` passed in, in a fixed order:

1. genre resolution;
2. instruments (selection, then per-instrument articulation);
3. chord progression, then vocals;
4. style tags;
5. standard mode only: key, mode, section lines, display articulation;
6. recording context.

A seeded generator therefore always reproduces the same prompt for the same request.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from ..app.models import PromptMetadata, PromptMode, PromptRequest, PromptResponse
from .articulation import (
    ARTICULATION_CHANCE,
    articulate_instrument,
    articulate_instrument_with_themes,
)
from .bpm import DEFAULT_BPM_RANGE, blended_bpm_range
from .genres import ALL_GENRE_KEYS, GENRE_REGISTRY, get_genre_or_default
from .instruments import extract_instruments, to_canonical
from .progressions import detect_progression, get_random_progression_for_genre
from .random import Rng, select_random, select_random_n, shuffle
from .resolver import GenreResolution, display_name, resolve_genre
from .sections import build_all_sections
from .selector import (
    SelectionOptions,
    blend_multi_genre_instruments,
    select_instruments_for_genre,
)
from .vocals import get_vocal_suggestions_for_genre

MAX_MODE_HEADER = (
    "[Is_MAX_MODE: MAX](MAX)\n"
    "[QUALITY: MAX](MAX)\n"
    "[REALISM: MAX](MAX)\n"
    "[REAL_INSTRUMENTS: MAX](MAX)"
)

MAX_PROMPT_CHARS = 1000
MAX_INSTRUMENT_TAGS = 4
MIN_GENRE_COUNT = 1
MAX_GENRE_COUNT = 4
MOODS_PER_COMPONENT = 2
STANDARD_MOOD_COUNT = 3
DEFAULT_MOOD = "Energetic"
RECORDING_DESCRIPTOR_COUNT = 2

MUSICAL_KEYS: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "Eb",
    "E",
    "F",
    "F#",
    "G",
    "Ab",
    "A",
    "Bb",
    "B",
)

MUSICAL_MODES: tuple[str, ...] = (
    "major",
    "minor",
    "dorian",
    "mixolydian",
    "lydian",
    "phrygian",
    "aeolian",
)

RECORDING_DESCRIPTORS: tuple[str, ...] = (
    "live symphonic venue capture with atmospheric miking",
    "tape recorder, close-up, raw performance texture",
    "studio session, warm analog console",
    "intimate bedroom recording, DIY aesthetic",
    "outdoor field recording ambience",
    "vintage vinyl warmth, needle crackle",
    "radio broadcast compression character",
    "concert hall natural acoustics",
    "basement jam session energy",
    "late night studio session vibe",
    "bootleg live recording character",
    "demo tape roughness",
    "rehearsal room authenticity",
    "home studio intimacy",
    "professional mastering polish",
    "analog four-track warmth",
    "cassette tape saturation",
    "direct-to-disc recording",
    "single microphone capture",
)


@dataclass(frozen=True)
class TagCategory:
    name: str
    probability: float
    max_picks: int
    tags: tuple[str, ...]


TAG_CATEGORIES: tuple[TagCategory, ...] = (
    TagCategory(
        name="vocal",
        probability=0.6,
        max_picks=2,
        tags=(
            "breathy delivery",
            "airy vocals",
            "powerful vocals",
            "vocal doubles",
            "harmony layers",
            "close-mic intimacy",
            "falsetto lifts",
            "stacked chorus vocals",
        ),
    ),
    TagCategory(
        name="spatial",
        probability=0.5,
        max_picks=1,
        tags=(
            "wide stereo image",
            "intimate room sound",
            "cavernous reverb",
            "dry and upfront",
            "spacious mix",
            "tight mono center",
        ),
    ),
    TagCategory(
        name="harmonic",
        probability=0.4,
        max_picks=1,
        tags=(
            "rich harmonics",
            "modal color",
            "lush extended chords",
            "sparse voicings",
            "drone undertone",
            "bittersweet harmony",
        ),
    ),
    TagCategory(
        name="dynamic",
        probability=0.4,
        max_picks=1,
        tags=(
            "dynamic swells",
            "gradual build",
            "punchy transients",
            "soft-loud contrast",
            "steady intensity",
            "explosive climax",
        ),
    ),
    TagCategory(
        name="temporal",
        probability=0.3,
        max_picks=1,
        tags=(
            "laid-back groove",
            "driving pulse",
            "swing feel",
            "half-time feel",
            "rubato phrasing",
            "syncopated rhythm",
        ),
    ),
)

_QUOTED_GENRE_LINE = re.compile(r'^(genre:\s*)"([^"\n]*)"', re.IGNORECASE | re.MULTILINE)
_PLAIN_GENRE_LINE = re.compile(r"^(Genre:\s*)([^\n]*)$", re.MULTILINE)

_GENRE_BY_NAME: dict[str, str] = {
    **{key: key for key in GENRE_REGISTRY},
    **{genre.name.casefold(): key for key, genre in GENRE_REGISTRY.items()},
}
_GENRE_NAME_PATTERN = re.compile(
    r"(?<![\w&])("
    + "|".join(re.escape(name) for name in sorted(_GENRE_BY_NAME, key=len, reverse=True))
    + r")(?![\w&])"
)


@dataclass(frozen=True)
class InstrumentAssembly:
    instruments: list[str]
    formatted: str
    progression: str
    vocals: str


@dataclass(frozen=True)
class AssembledPrompt:
    mode: PromptMode
    text: str
    resolution: GenreResolution
    bpm_range: str
    instruments: list[str]
    style_tags: list[str]
    recording: str
    progression: Optional[str] = None
    vocals: Optional[str] = None
    key: Optional[str] = None
    sections: list[str] = field(default_factory=list)

    def metadata(self, *, enhanced: bool = False) -> PromptMetadata:
        return PromptMetadata(
            genre=self.resolution.for_output,
            genre_components=list(self.resolution.components),
            genre_source=self.resolution.source.value,
            bpm_range=self.bpm_range,
            instruments=list(self.instruments),
            progression=self.progression,
            vocals=self.vocals,
            style_tags=list(self.style_tags),
            recording=self.recording,
            key=self.key,
            enhanced=enhanced,
        )

    def to_response(self, *, seed: Optional[int] = None, enhanced: bool = False) -> PromptResponse:
        return PromptResponse(
            mode=self.mode,
            prompt=self.text,
            metadata=self.metadata(enhanced=enhanced),
            seed=seed,
        )


def assemble_instruments(
    components: Sequence[str],
    rng: Rng,
    *,
    description: str = "",
    user_instruments: Sequence[str] = (),
    themes: Optional[Sequence[str]] = None,
    articulation_chance: float = ARTICULATION_CHANCE,
) -> InstrumentAssembly:
    """Select, articulate and decorate the instrument list for the resolved genre.

    Pinned instruments always lead the list, for blends as well as single genres.
    A chord progression named in ``description`` wins over a random pick for the
    primary genre; neither consumes the RNG when detection succeeds.
    """
    primary = components[0]
    if len(components) > 1:
        pinned = list(user_instruments)[:MAX_INSTRUMENT_TAGS]
        pinned_folded = {(to_canonical(item) or item).casefold() for item in pinned}
        blended = [
            item
            for item in blend_multi_genre_instruments(components, rng, MAX_INSTRUMENT_TAGS)
            if (to_canonical(item) or item).casefold() not in pinned_folded
        ]
        raw = [*pinned, *blended][:MAX_INSTRUMENT_TAGS]
    else:
        raw = select_instruments_for_genre(
            primary,
            SelectionOptions(
                rng=rng,
                max_tags=MAX_INSTRUMENT_TAGS,
                user_instruments=list(user_instruments),
            ),
        )
    if themes:
        articulated = [
            articulate_instrument_with_themes(item, rng, themes, articulation_chance)
            for item in raw
        ]
    else:
        articulated = [articulate_instrument(item, rng, articulation_chance) for item in raw]

    progression = detect_progression(description) or get_random_progression_for_genre(
        primary, rng
    )
    vocal = get_vocal_suggestions_for_genre(primary, rng)
    vocal_tag = f"{vocal.range} vocals, {vocal.delivery} delivery"

    formatted = ", ".join([*articulated, progression.harmony_tag, vocal_tag])
    return InstrumentAssembly(
        instruments=raw,
        formatted=formatted,
        progression=progression.harmony_tag,
        vocals=vocal_tag,
    )


def assemble_style_tags(components: Sequence[str], rng: Rng) -> list[str]:
    tags: list[str] = []
    for component in components:
        moods = get_genre_or_default(component).moods
        tags.extend(shuffle(moods, rng)[:MOODS_PER_COMPONENT])
    for category in TAG_CATEGORIES:
        if rng() < category.probability:
            count = min(category.max_picks, len(category.tags))
            tags.extend(select_random_n(category.tags, count, rng))

    unique: list[str] = []
    for tag in tags:
        lowered = tag.lower()
        if lowered not in unique:
            unique.append(lowered)
    return unique


def select_recording_context(rng: Rng) -> str:
    return ", ".join(select_random_n(RECORDING_DESCRIPTORS, RECORDING_DESCRIPTOR_COUNT, rng))


def select_key_and_mode(rng: Rng) -> str:
    key = select_random(MUSICAL_KEYS, rng)
    mode = select_random(MUSICAL_MODES, rng)
    return f"{key} {mode}"


def truncate_prompt(text: str, max_len: int = MAX_PROMPT_CHARS) -> str:
    """Cut ``text`` to ``max_len``, preferring to end on a quote or line break."""
    if len(text) <= max_len:
        return text
    truncated = text[:max_len]
    break_point = max(truncated.rfind('"'), truncated.rfind("\n"))
    if break_point > max_len * 0.8:
        truncated = truncated[: break_point + 1]
    return truncated


def _genre_keys_from_field(value: str) -> list[str]:
    # Longest names win, so "Dream Pop" is one genre and not dream + pop.
    keys: list[str] = []
    for match in _GENRE_NAME_PATTERN.finditer(value.casefold()):
        key = _GENRE_BY_NAME[match.group(1)]
        if key not in keys:
            keys.append(key)
    return keys


def extract_genres_from_prompt(prompt: str) -> list[str]:
    """Registry keys named on the prompt's genre line, in order of appearance.

    Both the quoted ``genre: "..."`` and the plain ``Genre: ...`` forms are read. Display
    names such as ``R&B`` map back to their keys; unknown labels are dropped.
    """
    match = _QUOTED_GENRE_LINE.search(prompt) or _PLAIN_GENRE_LINE.search(prompt)
    if match is None:
        return []
    return _genre_keys_from_field(match.group(2))


def _replace_genre_line(prompt: str, genres: Sequence[str]) -> Optional[str]:
    value = ", ".join(genres)
    quoted = _QUOTED_GENRE_LINE.search(prompt)
    if quoted is not None:
        return prompt[: quoted.start()] + f'{quoted.group(1)}"{value}"' + prompt[quoted.end() :]
    plain = _PLAIN_GENRE_LINE.search(prompt)
    if plain is not None:
        return prompt[: plain.start()] + f"{plain.group(1)}{value}" + prompt[plain.end() :]
    return None


def enforce_genre_count(prompt: str, target: int, rng: Rng) -> str:
    """Rewrite the prompt's genre line so that it names exactly ``target`` genres.

    ``target`` is clamped to 1-4. Extra genres are trimmed from the end; missing ones are
    filled with registry genres not already present, in shuffled order. When the prompt
    has no genre line, a quoted one is prepended. Every other line is left untouched.
    """
    clamped = max(MIN_GENRE_COUNT, min(MAX_GENRE_COUNT, target))
    current = extract_genres_from_prompt(prompt)
    if len(current) == clamped:
        return prompt

    if len(current) > clamped:
        genres = current[:clamped]
        logger.info("Genre count trimmed from {} to {}: kept {}", len(current), clamped, genres)
    else:
        available = [key for key in ALL_GENRE_KEYS if key not in current]
        added = shuffle(available, rng)[: clamped - len(current)]
        genres = [*current, *added]
        logger.info("Genre count raised from {} to {}: added {}", len(current), clamped, added)

    rewritten = _replace_genre_line(prompt, genres)
    if rewritten is not None:
        return rewritten
    logger.info("Prompt had no genre field; prepending {}", genres)
    return f'genre: "{", ".join(genres)}"\n{prompt}'


def _pinned_instruments(request: PromptRequest) -> list[str]:
    """Explicit user instruments first, then instruments named in the description."""
    pinned = list(request.user_instruments)
    seen = {(to_canonical(item) or item).casefold() for item in pinned}
    for name in extract_instruments(request.description):
        if name.casefold() not in seen:
            seen.add(name.casefold())
            pinned.append(name)
    return pinned


class PromptAssembler:
    """Build complete prompts from a :class:`PromptRequest` without any network call."""

    def __init__(
        self,
        *,
        max_prompt_chars: int = MAX_PROMPT_CHARS,
        articulation_chance: float = ARTICULATION_CHANCE,
    ) -> None:
        self._max_prompt_chars = max_prompt_chars
        self._articulation_chance = articulation_chance

    def build(self, request: PromptRequest, rng: Rng) -> AssembledPrompt:
        resolution = resolve_genre(
            request.description,
            rng,
            override=request.genre,
            seed_genres=request.seed_genres,
            direct_styles=request.direct_styles,
        )
        components = list(resolution.components) or [
            get_genre_or_default(resolution.for_lookup).key
        ]
        pinned = _pinned_instruments(request)

        if request.mode == PromptMode.STANDARD:
            assembled = self._build_standard(request, resolution, components, pinned, rng)
        else:
            assembled = self._build_max(request, resolution, components, pinned, rng)

        logger.info(
            "Assembled {} prompt for '{}' ({} chars, {} instrument(s))",
            assembled.mode.value,
            resolution.for_output,
            len(assembled.text),
            len(assembled.instruments),
        )
        return assembled

    def _bpm_for(self, resolution: GenreResolution) -> str:
        if not resolution.components:
            return DEFAULT_BPM_RANGE
        return blended_bpm_range(" ".join(resolution.components))

    def _finish(self, text: str, request: PromptRequest, rng: Rng) -> str:
        if request.genre_count is not None:
            text = enforce_genre_count(text, request.genre_count, rng)
        return truncate_prompt(text, self._max_prompt_chars)

    def _build_max(
        self,
        request: PromptRequest,
        resolution: GenreResolution,
        components: list[str],
        pinned: list[str],
        rng: Rng,
    ) -> AssembledPrompt:
        instruments = assemble_instruments(
            components,
            rng,
            description=request.description,
            user_instruments=pinned,
            themes=request.themes,
            articulation_chance=self._articulation_chance,
        )
        style_tags = assemble_style_tags(components, rng)
        recording = select_recording_context(rng)
        bpm = self._bpm_for(resolution)

        lines = [
            MAX_MODE_HEADER,
            "",
            f'genre: "{resolution.for_output}"',
            f'bpm: "{bpm}"',
            f'instruments: "{instruments.formatted}"',
            f'style tags: "{", ".join(style_tags)}"',
            f'recording: "{recording}"',
        ]
        return AssembledPrompt(
            mode=PromptMode.MAX,
            text=self._finish("\n".join(lines), request, rng),
            resolution=resolution,
            bpm_range=bpm,
            instruments=instruments.instruments,
            style_tags=style_tags,
            recording=recording,
            progression=instruments.progression,
            vocals=instruments.vocals,
        )

    def _build_standard(
        self,
        request: PromptRequest,
        resolution: GenreResolution,
        components: list[str],
        pinned: list[str],
        rng: Rng,
    ) -> AssembledPrompt:
        instruments = assemble_instruments(
            components,
            rng,
            description=request.description,
            user_instruments=pinned,
            themes=request.themes,
            articulation_chance=self._articulation_chance,
        )
        style_tags = assemble_style_tags(components, rng)
        moods = style_tags[:STANDARD_MOOD_COUNT]
        bpm = self._bpm_for(resolution)
        if resolution.components:
            genre_display = ", ".join(display_name(key) for key in resolution.components)
        else:
            genre_display = resolution.for_output

        key = select_key_and_mode(rng)
        sections = build_all_sections(components[0], rng)
        mood = moods[0].capitalize() if moods else DEFAULT_MOOD
        display_instruments = [
            articulate_instrument(item, rng, self._articulation_chance)
            for item in instruments.instruments
        ]
        recording = select_recording_context(rng)

        lines = [
            f"[{mood}, {genre_display}, Key: {key}]",
            "",
            f"Genre: {genre_display}",
            f"BPM: {bpm}",
            f"Mood: {', '.join(moods)}",
            f"Instruments: {', '.join(display_instruments)}",
            f"Style Tags: {', '.join(style_tags)}",
            f"Recording: {recording}",
            "",
            sections.text,
        ]
        return AssembledPrompt(
            mode=PromptMode.STANDARD,
            text=self._finish("\n".join(lines), request, rng),
            resolution=resolution,
            bpm_range=bpm,
            instruments=instruments.instruments,
            style_tags=style_tags,
            recording=recording,
            progression=instruments.progression,
            vocals=instruments.vocals,
            key=key,
            sections=[section.text for section in sections.sections],
        )
