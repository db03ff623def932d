from __future__ import annotations

from muse_prompt.services.genres import (
    ALL_GENRE_KEYS,
    GENRE_REGISTRY,
    ExclusionRule,
    InstrumentPool,
    PickRange,
)
from muse_prompt.services.instruments import to_canonical
from muse_prompt.services.random import create_seeded_rng
from muse_prompt.services.selector import (
    QuotaWindow,
    SelectionOptions,
    _fill_tier_quotas,
    _pick_from_pool,
    blend_multi_genre_instruments,
    select_instruments_for_genre,
    select_instruments_for_multi_genre,
)
from muse_prompt.services.tiers import (
    InstrumentTier,
    get_instrument_class,
    is_orchestral_color_instrument,
)


def _has_conflict(genre_key: str, instruments: list[str]) -> bool:
    rules = GENRE_REGISTRY[genre_key].exclusion_rules
    return any(
        rule.conflicts(a, b)
        for i, a in enumerate(instruments)
        for b in instruments[i + 1 :]
        for rule in rules
    )


def _folded(instruments: list[str]) -> list[str]:
    return [(to_canonical(item) or item).casefold() for item in instruments]


def test_jazz_selection_is_reproducible_and_bounded() -> None:
    first = select_instruments_for_genre(
        "jazz", SelectionOptions(rng=create_seeded_rng(42), max_tags=5)
    )
    second = select_instruments_for_genre(
        "jazz", SelectionOptions(rng=create_seeded_rng(42), max_tags=5)
    )
    assert first == second
    assert 0 < len(first) <= 5
    assert len(set(_folded(first))) == len(first)
    assert not _has_conflict("jazz", first)


def test_every_genre_respects_quota_and_exclusions() -> None:
    for key in ALL_GENRE_KEYS:
        for seed in range(15):
            picks = select_instruments_for_genre(key, SelectionOptions(rng=create_seeded_rng(seed)))
            assert len(picks) <= GENRE_REGISTRY[key].max_tags, (key, seed)
            assert len(set(_folded(picks))) == len(picks), (key, seed)
            assert not _has_conflict(key, picks), (key, seed, picks)


def test_pinned_instruments_lead_and_truncate_from_the_end() -> None:
    picks = select_instruments_for_genre(
        "jazz",
        SelectionOptions(
            rng=create_seeded_rng(9),
            max_tags=4,
            user_instruments=["Rhodes", "upright bass"],
        ),
    )
    assert picks[:2] == ["Rhodes", "upright bass"]
    assert "Wurlitzer" not in picks
    assert "walking bass" not in picks

    truncated = select_instruments_for_genre(
        "jazz",
        SelectionOptions(
            rng=create_seeded_rng(9),
            max_tags=1,
            user_instruments=["Rhodes", "upright bass"],
        ),
    )
    assert truncated == ["Rhodes"]


def test_orchestral_color_stays_out_of_band_genres() -> None:
    for seed in range(40):
        picks = select_instruments_for_genre("rock", SelectionOptions(rng=create_seeded_rng(seed)))
        assert not any(is_orchestral_color_instrument(item) for item in picks)


def test_disabled_quota_windows_leave_pool_picks_alone() -> None:
    disabled = QuotaWindow(enabled=False)
    options = SelectionOptions(
        rng=create_seeded_rng(3),
        multi_genre=disabled,
        foundational=disabled,
        orchestral_color=disabled,
    )
    assert options.window_for(InstrumentTier.FOUNDATIONAL) is disabled
    pool_instruments = set(GENRE_REGISTRY["jazz"].all_instruments())
    picks = select_instruments_for_genre("jazz", options)
    assert set(picks) <= pool_instruments


def test_multi_genre_blend() -> None:
    raw = blend_multi_genre_instruments(["jazz", "rock"], create_seeded_rng(5), 4)
    assert 0 < len(raw) <= 4
    assert len(set(_folded(raw))) == len(raw)

    articulated = select_instruments_for_multi_genre(["jazz", "rock"], create_seeded_rng(5))
    assert articulated == select_instruments_for_multi_genre(
        ["jazz", "rock"], create_seeded_rng(5)
    )
    assert len(articulated) <= 6


class CountingRng:
    def __init__(self, value: float) -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> float:
        self.calls += 1
        return self.value


def _tier_options(
    rng: CountingRng,
    *,
    multi: bool = False,
    foundational: bool = False,
    orchestral: bool = False,
) -> SelectionOptions:
    return SelectionOptions(
        rng=rng,
        multi_genre=QuotaWindow(enabled=multi, min=1, max=1),
        foundational=QuotaWindow(enabled=foundational, min=1, max=1),
        orchestral_color=QuotaWindow(enabled=orchestral, min=1, max=1),
    )


def test_multi_genre_quota_picks_exactly_one() -> None:
    options = _tier_options(CountingRng(0.3), multi=True)
    picks = _fill_tier_quotas(
        GENRE_REGISTRY["jazz"], [], 5, options, orchestral_eligible=False
    )
    assert len(picks) == 1
    assert get_instrument_class(picks[0]) == InstrumentTier.MULTIGENRE


def test_tier_fill_order_with_one_slot() -> None:
    jazz = GENRE_REGISTRY["jazz"]

    both = _tier_options(CountingRng(0.3), multi=True, foundational=True)
    picks = _fill_tier_quotas(jazz, [], 1, both, orchestral_eligible=False)
    assert [get_instrument_class(item) for item in picks] == [InstrumentTier.MULTIGENRE]

    foundational_only = _tier_options(CountingRng(0.3), foundational=True)
    picks = _fill_tier_quotas(jazz, [], 1, foundational_only, orchestral_eligible=False)
    assert [get_instrument_class(item) for item in picks] == [InstrumentTier.FOUNDATIONAL]

    orchestral_only = _tier_options(CountingRng(0.3), orchestral=True)
    picks = _fill_tier_quotas(jazz, [], 1, orchestral_only, orchestral_eligible=True)
    assert [get_instrument_class(item) for item in picks] == [InstrumentTier.ORCHESTRAL_COLOR]


def test_ambient_orchestral_roll_consumes_one_draw() -> None:
    ambient_rng = CountingRng(0.99)
    picks = _fill_tier_quotas(
        GENRE_REGISTRY["ambient"],
        [],
        3,
        _tier_options(ambient_rng, orchestral=True),
        orchestral_eligible=False,
    )
    assert picks == []
    assert ambient_rng.calls == 1

    rock_rng = CountingRng(0.99)
    picks = _fill_tier_quotas(
        GENRE_REGISTRY["rock"],
        [],
        3,
        _tier_options(rock_rng, orchestral=True),
        orchestral_eligible=False,
    )
    assert picks == []
    assert rock_rng.calls == 0


def test_ambient_orchestral_roll_can_admit_color() -> None:
    picks = _fill_tier_quotas(
        GENRE_REGISTRY["ambient"],
        [],
        3,
        _tier_options(CountingRng(0.0), orchestral=True),
        orchestral_eligible=False,
    )
    assert len(picks) == 1
    assert is_orchestral_color_instrument(picks[0])


def test_pool_pick_skips_excluded_and_duplicate_candidates() -> None:
    pool = InstrumentPool("keys", ("Wurlitzer", "Rhodes"), PickRange(1, 2))
    picks = _pick_from_pool(
        pool,
        ["Rhodes"],
        3,
        (ExclusionRule("Rhodes", "Wurlitzer"),),
        CountingRng(0.5),
        orchestral_eligible=False,
    )
    assert picks == []
