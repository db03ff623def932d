from __future__ import annotations

from muse_prompt.services.genres import ALL_GENRE_KEYS
from muse_prompt.services.random import create_seeded_rng
from muse_prompt.services.resolver import (
    ResolutionSource,
    detect_genre,
    parse_genre_components,
    resolve_genre,
)


class CountingRng:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return 0.25


def test_override_beats_seed_genres() -> None:
    result = resolve_genre(
        "heavy metal riffs",
        create_seeded_rng(1),
        override="  Jazz Rock ",
        seed_genres=["pop", "rnb"],
    )
    assert result.source == ResolutionSource.OVERRIDE
    assert result.for_output == "jazz rock"
    assert result.for_lookup == "jazz"
    assert result.components == ["jazz", "rock"]


def test_direct_styles_are_joined_verbatim() -> None:
    result = resolve_genre(
        "smoky jazz club at midnight",
        create_seeded_rng(1),
        seed_genres=["pop"],
        direct_styles=["Dark Jazz", "Neo Soul"],
    )
    assert result.source == ResolutionSource.DIRECT_STYLES
    assert result.for_output == "Dark Jazz, Neo Soul"
    assert result.components == ["jazz", "soul"]


def test_direct_styles_keep_surrounding_whitespace() -> None:
    result = resolve_genre("", create_seeded_rng(1), direct_styles=[" Dark Jazz", "Neo Soul "])
    assert result.for_output == " Dark Jazz, Neo Soul "
    assert result.for_lookup == "dark"
    assert result.components == ["jazz", "soul"]


def test_seed_genres_use_display_names() -> None:
    result = resolve_genre("", create_seeded_rng(1), seed_genres=["jazz", "RNB"])
    assert result.source == ResolutionSource.SEED_GENRES
    assert result.for_output == "Jazz, R&B"
    assert result.for_lookup == "jazz"
    assert result.components == ["jazz", "rnb"]


def test_keyword_detection_consumes_no_randomness() -> None:
    rng = CountingRng()
    result = resolve_genre("heavy metal riffs", rng)
    assert result.source == ResolutionSource.DETECTED
    assert result.for_output == "metal"
    assert rng.calls == 0


def test_detection_prefers_specific_subgenres() -> None:
    assert detect_genre("lofi beats to study") == "lofi"
    assert detect_genre("smoky jazz club at midnight") == "jazz"
    assert detect_genre("dreamy shoegaze guitars") == "dreampop"
    assert detect_genre("") is None


def test_fallback_picks_a_registry_genre() -> None:
    rng = CountingRng()
    result = resolve_genre("xyzzy plugh", rng)
    assert result.source == ResolutionSource.FALLBACK
    assert result.for_output in ALL_GENRE_KEYS
    assert rng.calls == 1
    assert resolve_genre("xyzzy", create_seeded_rng(5)) == resolve_genre(
        "xyzzy", create_seeded_rng(5)
    )


def test_parse_genre_components() -> None:
    assert parse_genre_components("jazz rock") == ["jazz", "rock"]
    assert parse_genre_components("Jazz, jazz & funk/soul") == ["jazz", "funk", "soul"]
    assert parse_genre_components("melodictechno") == ["melodictechno"]
    assert parse_genre_components("polka") == []
    assert parse_genre_components("   ") == []
