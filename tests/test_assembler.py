from __future__ import annotations

from itertools import permutations

from muse_prompt.app.models import PromptMode, PromptRequest
from muse_prompt.services.assembler import (
    MAX_MODE_HEADER,
    MUSICAL_KEYS,
    MUSICAL_MODES,
    RECORDING_DESCRIPTORS,
    PromptAssembler,
    assemble_instruments,
    assemble_style_tags,
    enforce_genre_count,
    extract_genres_from_prompt,
    select_key_and_mode,
    select_recording_context,
    truncate_prompt,
)
from muse_prompt.services.genres import ALL_GENRE_KEYS, GENRE_REGISTRY
from muse_prompt.services.random import create_seeded_rng
from muse_prompt.services.resolver import ResolutionSource


def test_max_prompt_shape() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(description="smoky jazz club at midnight"), create_seeded_rng(7)
    )
    assert assembled.mode == PromptMode.MAX
    assert assembled.text.startswith(MAX_MODE_HEADER + "\n\n")
    lines = assembled.text.splitlines()
    assert lines[5] == 'genre: "jazz"'
    assert lines[6] == 'bpm: "between 80 and 160"'
    assert lines[7].startswith('instruments: "')
    assert " harmony, " in lines[7]
    assert " vocals, " in lines[7]
    assert lines[8].startswith('style tags: "')
    assert lines[9].startswith('recording: "')
    assert len(assembled.text) <= 1000
    assert assembled.resolution.source == ResolutionSource.DETECTED


def test_same_seed_reproduces_the_prompt() -> None:
    request = PromptRequest(description="neon synthwave night drive")
    assembler = PromptAssembler()
    first = assembler.build(request, create_seeded_rng(99))
    second = assembler.build(request, create_seeded_rng(99))
    assert first.text == second.text
    assert first.instruments == second.instruments


def test_standard_prompt_shape() -> None:
    assembled = PromptAssembler(max_prompt_chars=4000).build(
        PromptRequest(description="smoky jazz club", mode=PromptMode.STANDARD),
        create_seeded_rng(21),
    )
    lines = assembled.text.splitlines()
    mood = assembled.style_tags[0].capitalize()
    assert lines[0] == f"[{mood}, Jazz, Key: {assembled.key}]"
    assert lines[2] == "Genre: Jazz"
    assert lines[3] == "BPM: between 80 and 160"
    assert lines[4] == f"Mood: {', '.join(assembled.style_tags[:3])}"
    assert lines[5].startswith("Instruments: ")
    assert lines[6] == f"Style Tags: {', '.join(assembled.style_tags)}"
    assert lines[7] == f"Recording: {assembled.recording}"
    tags = [line.split("]")[0] + "]" for line in lines[9:]]
    assert tags == ["[INTRO]", "[VERSE]", "[CHORUS]", "[BRIDGE]", "[OUTRO]"]

    assert assembled.key is not None
    key, mode = assembled.key.split(" ")
    assert key in MUSICAL_KEYS
    assert mode in MUSICAL_MODES


def test_progression_named_in_description_wins() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(description="late night jazz ii-V-I ballad"), create_seeded_rng(2)
    )
    assert assembled.progression == "The 2-5-1 (ii-V-I) harmony"


def test_compound_override_blends_tempo() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(description="anything", genre="Jazz Rock"), create_seeded_rng(4)
    )
    assert 'genre: "jazz rock"' in assembled.text
    assert assembled.bpm_range == "between 100 and 150"


def test_unknown_seed_genre_degrades_to_defaults() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(seed_genres=["polka"]), create_seeded_rng(4)
    )
    assert assembled.resolution.for_output == "polka"
    assert assembled.bpm_range == "between 90 and 140"
    assert assembled.instruments


def test_pinned_instrument_survives_assembly() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(genre="jazz", user_instruments=["Rhodes"]), create_seeded_rng(8)
    )
    assert assembled.instruments[0] == "Rhodes"
    assert len(assembled.instruments) <= 4


def test_requested_genre_count_is_enforced() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(genre="jazz", genre_count=3), create_seeded_rng(10)
    )
    genres = extract_genres_from_prompt(assembled.text)
    assert len(genres) == 3
    assert genres[0] == "jazz"


def test_prompt_is_truncated_to_the_configured_limit() -> None:
    assembled = PromptAssembler(max_prompt_chars=200).build(
        PromptRequest(description="epic film score"), create_seeded_rng(1)
    )
    assert len(assembled.text) <= 200


def test_assemble_instruments_single_genre() -> None:
    result = assemble_instruments(["jazz"], create_seeded_rng(3))
    assert 0 < len(result.instruments) <= 4
    assert result.progression.endswith(" harmony")
    assert result.vocals.endswith(" delivery")
    assert result.formatted.endswith(f"{result.progression}, {result.vocals}")


def test_style_tags_are_lowercase_and_unique() -> None:
    tags = assemble_style_tags(["jazz"], create_seeded_rng(17))
    jazz_moods = {mood.lower() for mood in GENRE_REGISTRY["jazz"].moods}
    assert len(tags) == len(set(tags))
    assert all(tag == tag.lower() for tag in tags)
    assert set(tags[:2]) <= jazz_moods


def test_recording_context_joins_two_distinct_descriptors() -> None:
    context = select_recording_context(create_seeded_rng(5))
    joined = {", ".join(pair) for pair in permutations(RECORDING_DESCRIPTORS, 2)}
    assert context in joined


def test_key_and_mode() -> None:
    key, mode = select_key_and_mode(create_seeded_rng(30)).split(" ")
    assert key in MUSICAL_KEYS
    assert mode in MUSICAL_MODES


def test_truncate_prefers_line_breaks() -> None:
    assert truncate_prompt("short", 1000) == "short"
    text = "a" * 900 + "\n" + "b" * 300
    assert truncate_prompt(text, 1000) == "a" * 900 + "\n"
    assert len(truncate_prompt("x" * 1200, 1000)) == 1000


def test_extract_genres_reads_both_field_styles() -> None:
    assert extract_genres_from_prompt('genre: "Jazz Rock, polka"') == ["jazz", "rock"]
    assert extract_genres_from_prompt("Genre: R&B, Dream Pop\nBPM: 90") == ["rnb", "dreampop"]
    assert extract_genres_from_prompt("Mood: calm") == []


def test_enforce_genre_count_trims_from_the_end() -> None:
    prompt = 'genre: "rock, jazz, funk, pop"\nbpm: "between 100 and 150"'
    trimmed = enforce_genre_count(prompt, 2, create_seeded_rng(1))
    assert trimmed == 'genre: "rock, jazz"\nbpm: "between 100 and 150"'
    assert enforce_genre_count(trimmed, 2, create_seeded_rng(2)) == trimmed


def test_enforce_genre_count_fills_plain_genre_line() -> None:
    prompt = "Genre: Rock\nBPM: between 100 and 150\nMood: loud"
    filled = enforce_genre_count(prompt, 3, create_seeded_rng(6))
    lines = filled.splitlines()
    assert lines[1:] == ["BPM: between 100 and 150", "Mood: loud"]
    genres = lines[0].removeprefix("Genre: ").split(", ")
    assert genres[0] == "rock"
    assert len(set(genres)) == 3
    assert all(genre in ALL_GENRE_KEYS for genre in genres)
    assert enforce_genre_count(filled, 3, create_seeded_rng(7)) == filled
    assert filled == enforce_genre_count(prompt, 3, create_seeded_rng(6))


def test_enforce_genre_count_prepends_missing_field_and_clamps() -> None:
    prompt = "Mood: calm"
    result = enforce_genre_count(prompt, 9, create_seeded_rng(3))
    first, rest = result.split("\n", 1)
    assert rest == prompt
    assert first.startswith('genre: "')
    assert len(extract_genres_from_prompt(result)) == 4

    single = enforce_genre_count('genre: "rock, jazz"', 0, create_seeded_rng(3))
    assert single == 'genre: "rock"'


def test_standard_seed_genres_round_trip_through_genre_count() -> None:
    assembled = PromptAssembler(max_prompt_chars=4000).build(
        PromptRequest(seed_genres=["jazz", "rnb"], mode=PromptMode.STANDARD),
        create_seeded_rng(12),
    )
    lines = assembled.text.splitlines()
    assert lines[2] == "Genre: Jazz, R&B"
    assert ", Jazz, R&B, Key: " in lines[0]
    assert extract_genres_from_prompt(assembled.text) == ["jazz", "rnb"]
    assert enforce_genre_count(assembled.text, 2, create_seeded_rng(1)) == assembled.text


def test_multi_word_display_names_stay_whole() -> None:
    assert extract_genres_from_prompt("Genre: Dream Pop Jazz") == ["dreampop", "jazz"]
    assert extract_genres_from_prompt('genre: "hyperpop, Lo-Fi"') == ["hyperpop", "lofi"]

    assembled = PromptAssembler(max_prompt_chars=4000).build(
        PromptRequest(genre="dreampop jazz", mode=PromptMode.STANDARD), create_seeded_rng(4)
    )
    assert assembled.text.splitlines()[2] == "Genre: Dream Pop, Jazz"
    assert extract_genres_from_prompt(assembled.text) == ["dreampop", "jazz"]


def test_pinned_instrument_leads_multi_genre_blend() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(genre="jazz rock", user_instruments=["harmonica"]), create_seeded_rng(8)
    )
    assert assembled.resolution.components == ["jazz", "rock"]
    assert assembled.instruments[0] == "harmonica"
    assert len(assembled.instruments) <= 4
    assert len({item.casefold() for item in assembled.instruments}) == len(assembled.instruments)


def test_instruments_named_in_description_are_pinned() -> None:
    assembled = PromptAssembler().build(
        PromptRequest(description="jazz tune featuring a tenor sax"), create_seeded_rng(5)
    )
    assert assembled.resolution.components == ["jazz"]
    assert assembled.instruments[0] == "tenor sax"

    explicit = PromptAssembler().build(
        PromptRequest(
            description="jazz tune featuring a tenor saxophone",
            user_instruments=["Rhodes", "Tenor Sax"],
        ),
        create_seeded_rng(5),
    )
    assert explicit.instruments[:2] == ["Rhodes", "Tenor Sax"]
    assert "tenor sax" not in explicit.instruments
