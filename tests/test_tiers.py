from __future__ import annotations

from muse_prompt.services.tiers import (
    FOUNDATIONAL_INSTRUMENTS,
    MULTIGENRE_INSTRUMENTS,
    ORCHESTRAL_COLOR_INSTRUMENTS,
    InstrumentTier,
    build_instrument_to_genres_index,
    get_instrument_class,
    is_multigenre_instrument,
    tier_instruments,
)


def _folded(names: tuple[str, ...]) -> set[str]:
    return {name.casefold() for name in names}


def test_tier_sets_are_disjoint() -> None:
    foundational = _folded(FOUNDATIONAL_INSTRUMENTS)
    orchestral = _folded(ORCHESTRAL_COLOR_INSTRUMENTS)
    multigenre = _folded(MULTIGENRE_INSTRUMENTS)
    assert not foundational & orchestral
    assert not foundational & multigenre
    assert not orchestral & multigenre


def test_instrument_classes() -> None:
    assert get_instrument_class("drums") == InstrumentTier.FOUNDATIONAL
    assert get_instrument_class("celesta") == InstrumentTier.ORCHESTRAL_COLOR
    assert get_instrument_class("Rhodes") == InstrumentTier.MULTIGENRE
    assert get_instrument_class("kazoo orchestra") == InstrumentTier.GENRE


def test_force_excluded_instruments_never_travel() -> None:
    assert not is_multigenre_instrument("felt piano")
    assert not is_multigenre_instrument("jazz brushes")


def test_genre_index_and_tier_lookup() -> None:
    index = build_instrument_to_genres_index()
    assert "jazz" in index["upright bass"]
    assert tier_instruments(InstrumentTier.GENRE) == ()
    assert tier_instruments(InstrumentTier.MULTIGENRE) == MULTIGENRE_INSTRUMENTS
    assert list(MULTIGENRE_INSTRUMENTS) == sorted(MULTIGENRE_INSTRUMENTS)
