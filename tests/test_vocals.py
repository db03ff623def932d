from __future__ import annotations

from muse_prompt.services.random import create_seeded_rng
from muse_prompt.services.vocals import (
    DEFAULT_BACKING_VOCALS,
    DEFAULT_VOCAL_STYLE,
    GENRE_BACKING_VOCALS,
    GENRE_VOCAL_STYLES,
    build_blended_vocal_descriptor,
    build_vocal_descriptor,
    get_backing_vocals_for_genre,
    get_vocal_style,
    get_vocal_suggestions_for_genre,
)


class CountingRng:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return 0.0


def test_style_lookup_and_default() -> None:
    assert get_vocal_style(" JAZZ ") is GENRE_VOCAL_STYLES["jazz"]
    assert get_vocal_style("polka") is DEFAULT_VOCAL_STYLE


def test_suggestion_draws_one_value_per_list() -> None:
    rng = CountingRng()
    suggestion = get_vocal_suggestions_for_genre("jazz", rng)
    style = GENRE_VOCAL_STYLES["jazz"]
    assert rng.calls == 3
    assert suggestion.range == style.ranges[0]
    assert suggestion.delivery == style.deliveries[0]
    assert suggestion.technique == style.techniques[0]


def test_suggestions_are_reproducible() -> None:
    first = get_vocal_suggestions_for_genre("soul", create_seeded_rng(8))
    second = get_vocal_suggestions_for_genre("soul", create_seeded_rng(8))
    assert first == second


def test_descriptor_format() -> None:
    descriptor = build_vocal_descriptor("jazz", CountingRng())
    assert descriptor == "Tenor, Smooth Delivery, Scat Fills"


def test_blended_descriptor_draws_from_every_component() -> None:
    pop = GENRE_VOCAL_STYLES["pop"]
    metal = GENRE_VOCAL_STYLES["metal"]
    rng = create_seeded_rng(12)
    for _ in range(10):
        vocal_range, delivery, technique = build_blended_vocal_descriptor(
            ["pop", "metal"], rng
        ).split(", ")
        assert vocal_range in pop.ranges + metal.ranges
        assert delivery.removesuffix(" Delivery") in pop.deliveries + metal.deliveries
        assert technique in pop.techniques + metal.techniques


def test_backing_vocals() -> None:
    backing = get_backing_vocals_for_genre("retro", create_seeded_rng(2))
    profile = GENRE_BACKING_VOCALS["retro"]
    assert len(backing.adlibs) == 2
    assert len(set(backing.adlibs)) == 2
    assert set(backing.adlibs) <= set(profile.adlibs)
    assert backing.echo_style in profile.echo_styles

    fallback = get_backing_vocals_for_genre("polka", create_seeded_rng(2))
    assert set(fallback.adlibs) <= set(DEFAULT_BACKING_VOCALS.adlibs)
