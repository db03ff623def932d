"""Pool- and tier-driven instrument selection for a genre.

Selection runs in two stages. The pool stage walks the genre's pools in their declared
order, rolling each pool's inclusion chance, drawing a pick count and shuffling the
eligible candidates. The quota stage then tops the list up from the cross-genre tiers
(multi-genre, foundational, orchestral color, always in that order) until each tier's
drawn target is met or the list is full. Neither stage ever admits a pair of instruments
that matches one of the genre's exclusion rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from .articulation import articulate_instrument
from .genres import ExclusionRule, GenreDefinition, InstrumentPool, get_genre_or_default, has_exclusion
from .instruments import to_canonical
from .random import Rng, random_int_inclusive, roll_chance, shuffle
from .tiers import (
    InstrumentTier,
    get_instrument_class,
    is_orchestral_color_instrument,
    tier_instruments,
)

ORCHESTRAL_GENRES = frozenset({"classical", "symphonic", "cinematic"})
AMBIENT_ORCHESTRAL_CHANCE = 0.15
MULTI_GENRE_PICKS_PER_GENRE = 2
DEFAULT_MULTI_GENRE_MAX_INSTRUMENTS = 6

TIER_FILL_ORDER: tuple[InstrumentTier, ...] = (
    InstrumentTier.MULTIGENRE,
    InstrumentTier.FOUNDATIONAL,
    InstrumentTier.ORCHESTRAL_COLOR,
)


@dataclass(frozen=True)
class QuotaWindow:
    enabled: bool = True
    min: int = 0
    max: int = 1
    chance: Optional[float] = None


@dataclass
class SelectionOptions:
    rng: Rng
    max_tags: Optional[int] = None
    user_instruments: Sequence[str] = ()
    multi_genre: QuotaWindow = field(default_factory=lambda: QuotaWindow(min=1, max=2))
    foundational: QuotaWindow = field(default_factory=lambda: QuotaWindow(min=0, max=1))
    orchestral_color: QuotaWindow = field(default_factory=lambda: QuotaWindow(min=0, max=1))

    def window_for(self, tier: InstrumentTier) -> QuotaWindow:
        if tier == InstrumentTier.MULTIGENRE:
            return self.multi_genre
        if tier == InstrumentTier.FOUNDATIONAL:
            return self.foundational
        return self.orchestral_color


def _fold(instrument: str) -> str:
    return (to_canonical(instrument) or instrument).casefold()


def _pick_unique(
    candidates: Sequence[str],
    selected: Sequence[str],
    count: int,
    rules: tuple[ExclusionRule, ...],
) -> list[str]:
    if count <= 0:
        return []
    picks: list[str] = []
    seen = {_fold(item) for item in selected}
    for candidate in candidates:
        if len(picks) >= count:
            break
        folded = _fold(candidate)
        if folded in seen:
            continue
        if has_exclusion(candidate, [*selected, *picks], rules):
            continue
        picks.append(candidate)
        seen.add(folded)
    return picks


def _pick_from_pool(
    pool: InstrumentPool,
    selected: list[str],
    remaining: int,
    rules: tuple[ExclusionRule, ...],
    rng: Rng,
    *,
    orchestral_eligible: bool,
) -> list[str]:
    if not roll_chance(pool.chance_to_include, rng):
        return []
    count = min(random_int_inclusive(pool.pick.min, pool.pick.max, rng), remaining)
    if count <= 0:
        return []
    available = [
        instrument
        for instrument in pool.instruments
        if not has_exclusion(instrument, selected, rules)
        and (orchestral_eligible or not is_orchestral_color_instrument(instrument))
    ]
    return _pick_unique(shuffle(available, rng), selected, count, rules)


def _fill_tier_quotas(
    genre: GenreDefinition,
    selected: list[str],
    max_tags: int,
    options: SelectionOptions,
    *,
    orchestral_eligible: bool,
) -> list[str]:
    rng = options.rng
    rules = genre.exclusion_rules

    if (
        options.orchestral_color.enabled
        and not orchestral_eligible
        and genre.key == "ambient"
    ):
        orchestral_eligible = roll_chance(AMBIENT_ORCHESTRAL_CHANCE, rng)

    for tier in TIER_FILL_ORDER:
        if len(selected) >= max_tags:
            break
        window = options.window_for(tier)
        if not window.enabled:
            continue
        if tier == InstrumentTier.ORCHESTRAL_COLOR and not orchestral_eligible:
            continue
        if not roll_chance(window.chance, rng):
            continue
        target = random_int_inclusive(window.min, window.max, rng)
        existing = sum(1 for item in selected if get_instrument_class(item) == tier)
        shortfall = max(0, target - existing)
        if shortfall == 0:
            continue
        count = min(shortfall, max_tags - len(selected))
        picks = _pick_unique(shuffle(tier_instruments(tier), rng), selected, count, rules)
        logger.debug("Tier {} filled {} of {} instrument(s)", tier.value, len(picks), shortfall)
        selected = [*selected, *picks]
    return selected


def select_instruments_for_genre(genre_key: str, options: SelectionOptions) -> list[str]:
    genre = get_genre_or_default(genre_key)
    max_tags = options.max_tags if options.max_tags is not None else genre.max_tags
    rules = genre.exclusion_rules

    selected = list(options.user_instruments)[:max_tags]
    orchestral_eligible = genre.key in ORCHESTRAL_GENRES or any(
        is_orchestral_color_instrument(item) for item in selected
    )

    for pool in genre.ordered_pools():
        if len(selected) >= max_tags:
            break
        picks = _pick_from_pool(
            pool,
            selected,
            max_tags - len(selected),
            rules,
            options.rng,
            orchestral_eligible=orchestral_eligible,
        )
        if picks:
            logger.debug("Pool {}/{} contributed {}", genre.key, pool.name, picks)
        selected = [*selected, *picks][:max_tags]

    return _fill_tier_quotas(
        genre,
        selected,
        max_tags,
        options,
        orchestral_eligible=orchestral_eligible,
    )


def blend_multi_genre_instruments(
    genres: Sequence[str],
    rng: Rng,
    max_instruments: int = DEFAULT_MULTI_GENRE_MAX_INSTRUMENTS,
) -> list[str]:
    """Blend the lead instruments of several genres, without articulation."""
    combined: list[str] = []
    seen: set[str] = set()
    for genre_key in genres:
        picks = select_instruments_for_genre(genre_key, SelectionOptions(rng=rng))
        for instrument in picks[:MULTI_GENRE_PICKS_PER_GENRE]:
            folded = _fold(instrument)
            if folded in seen:
                continue
            seen.add(folded)
            combined.append(instrument)
    return shuffle(combined, rng)[:max_instruments]


def select_instruments_for_multi_genre(
    genres: Sequence[str],
    rng: Rng,
    max_instruments: int = DEFAULT_MULTI_GENRE_MAX_INSTRUMENTS,
) -> list[str]:
    blended = blend_multi_genre_instruments(genres, rng, max_instruments)
    return [articulate_instrument(instrument, rng) for instrument in blended]
