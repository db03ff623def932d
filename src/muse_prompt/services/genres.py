"""Genre registry: pools, exclusion rules, tempo ranges and moods per genre."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import InvariantError
from .instruments import is_valid_instrument

_GENRES_PATH = Path(__file__).resolve().parents[1] / "data" / "genres.json"

DEFAULT_GENRE = "pop"

ALL_GENRE_KEYS: tuple[str, ...] = (
    "ambient",
    "jazz",
    "electronic",
    "rock",
    "pop",
    "classical",
    "lofi",
    "synthwave",
    "cinematic",
    "folk",
    "rnb",
    "videogame",
    "country",
    "soul",
    "blues",
    "punk",
    "latin",
    "metal",
    "trap",
    "retro",
    "symphonic",
    "disco",
    "funk",
    "reggae",
    "afrobeat",
    "house",
    "trance",
    "downtempo",
    "dreampop",
    "chillwave",
    "newage",
    "hyperpop",
    "drill",
    "melodictechno",
    "indie",
)


@dataclass(frozen=True)
class PickRange:
    min: int
    max: int


@dataclass(frozen=True)
class InstrumentPool:
    name: str
    instruments: tuple[str, ...]
    pick: PickRange
    chance_to_include: Optional[float] = None


@dataclass(frozen=True)
class ExclusionRule:
    first: str
    second: str

    def conflicts(self, a: str, b: str) -> bool:
        a_fold = a.casefold()
        b_fold = b.casefold()
        first = self.first.casefold()
        second = self.second.casefold()
        return (first in a_fold and second in b_fold) or (
            second in a_fold and first in b_fold
        )


@dataclass(frozen=True)
class BpmRange:
    min: int
    max: int
    typical: int


@dataclass(frozen=True)
class GenreDefinition:
    key: str
    name: str
    keywords: tuple[str, ...]
    description: str
    pools: dict[str, InstrumentPool]
    pool_order: tuple[str, ...]
    max_tags: int
    exclusion_rules: tuple[ExclusionRule, ...]
    bpm: BpmRange
    moods: tuple[str, ...]

    def ordered_pools(self) -> list[InstrumentPool]:
        return [self.pools[name] for name in self.pool_order]

    def all_instruments(self) -> list[str]:
        seen: list[str] = []
        for pool in self.ordered_pools():
            for instrument in pool.instruments:
                if instrument not in seen:
                    seen.append(instrument)
        return seen


def _build_pool(name: str, entry: dict) -> InstrumentPool:
    pick = PickRange(min=int(entry["pick"]["min"]), max=int(entry["pick"]["max"]))
    if pick.min < 0 or pick.max < pick.min:
        raise InvariantError(f"pool '{name}' has an invalid pick range {pick}")
    chance = entry.get("chance_to_include")
    if chance is not None and not 0.0 <= float(chance) <= 1.0:
        raise InvariantError(f"pool '{name}' has chance_to_include outside [0, 1]")
    instruments = tuple(entry["instruments"])
    for instrument in instruments:
        if not is_valid_instrument(instrument):
            raise InvariantError(f"pool '{name}' lists unknown instrument '{instrument}'")
    return InstrumentPool(
        name=name,
        instruments=instruments,
        pick=pick,
        chance_to_include=float(chance) if chance is not None else None,
    )


def _build_genre(entry: dict) -> GenreDefinition:
    key = entry["key"]
    pools = {name: _build_pool(name, pool) for name, pool in entry["pools"].items()}
    pool_order = tuple(entry["pool_order"])
    for name in pool_order:
        if name not in pools:
            raise InvariantError(f"genre '{key}' orders unknown pool '{name}'")
    bpm_raw = entry["bpm"]
    return GenreDefinition(
        key=key,
        name=entry["name"],
        keywords=tuple(keyword.casefold() for keyword in entry["keywords"]),
        description=entry["description"],
        pools=pools,
        pool_order=pool_order,
        max_tags=int(entry["max_tags"]),
        exclusion_rules=tuple(
            ExclusionRule(first=pair[0], second=pair[1]) for pair in entry["exclusion_rules"]
        ),
        bpm=BpmRange(
            min=int(bpm_raw["min"]), max=int(bpm_raw["max"]), typical=int(bpm_raw["typical"])
        ),
        moods=tuple(entry["moods"]),
    )


def _load_genres() -> dict[str, GenreDefinition]:
    try:
        raw = json.loads(_GENRES_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:  # pragma: no cover - packaging error
        raise RuntimeError(f"genre registry missing at {_GENRES_PATH}") from exc

    genres = {entry["key"]: _build_genre(entry) for entry in raw["genres"]}
    if tuple(genres) != ALL_GENRE_KEYS:
        raise InvariantError("genre registry keys do not match the fixed genre order")
    return genres


GENRE_REGISTRY: dict[str, GenreDefinition] = _load_genres()


def get_genre(key: str) -> Optional[GenreDefinition]:
    return GENRE_REGISTRY.get(key.strip().lower())


def get_genre_or_default(key: str) -> GenreDefinition:
    return get_genre(key) or GENRE_REGISTRY[DEFAULT_GENRE]


def is_genre_key(value: str) -> bool:
    return value.strip().lower() in GENRE_REGISTRY


def display_name(key: str) -> str:
    genre = get_genre(key)
    return genre.name if genre is not None else key


def has_exclusion(candidate: str, selected: list[str], rules: tuple[ExclusionRule, ...]) -> bool:
    return any(rule.conflicts(candidate, existing) for existing in selected for rule in rules)
