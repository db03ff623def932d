"""Canonical instrument registry loaded from ``data/instruments.json``."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .exceptions import InvariantError

_REGISTRY_PATH = Path(__file__).resolve().parents[1] / "data" / "instruments.json"


class InstrumentCategory(str, Enum):
    HARMONIC = "harmonic"
    PAD = "pad"
    COLOR = "color"
    MOVEMENT = "movement"
    RARE = "rare"


@dataclass(frozen=True)
class InstrumentEntry:
    canonical: str
    category: InstrumentCategory
    aliases: tuple[str, ...]


@dataclass(frozen=True)
class InstrumentRegistry:
    version: int
    entries: tuple[InstrumentEntry, ...]
    by_folded_name: dict[str, InstrumentEntry]

    def lookup(self, name: str) -> Optional[InstrumentEntry]:
        return self.by_folded_name.get(name.strip().casefold())


def _load_registry() -> InstrumentRegistry:
    try:
        raw = json.loads(_REGISTRY_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:  # pragma: no cover - packaging error
        raise RuntimeError(f"instrument registry missing at {_REGISTRY_PATH}") from exc

    entries: list[InstrumentEntry] = []
    by_folded_name: dict[str, InstrumentEntry] = {}
    for item in raw["instruments"]:
        entry = InstrumentEntry(
            canonical=item["canonical"],
            category=InstrumentCategory(item["category"]),
            aliases=tuple(item.get("aliases", [])),
        )
        entries.append(entry)
        for name in (entry.canonical, *entry.aliases):
            folded = name.casefold()
            existing = by_folded_name.get(folded)
            if existing is not None and existing.canonical != entry.canonical:
                raise InvariantError(
                    f"instrument name '{name}' maps to both '{existing.canonical}' "
                    f"and '{entry.canonical}'"
                )
            by_folded_name[folded] = entry

    return InstrumentRegistry(
        version=int(raw["version"]),
        entries=tuple(entries),
        by_folded_name=by_folded_name,
    )


_REGISTRY = _load_registry()

CANONICAL_NAMES: tuple[str, ...] = tuple(entry.canonical for entry in _REGISTRY.entries)


def get_registry() -> InstrumentRegistry:
    return _REGISTRY


def is_valid_instrument(name: str) -> bool:
    return _REGISTRY.lookup(name) is not None


def to_canonical(name: str) -> Optional[str]:
    """Resolve a canonical name or alias (case-insensitive) to its canonical spelling."""
    entry = _REGISTRY.lookup(name)
    return entry.canonical if entry is not None else None


def get_category(name: str) -> Optional[InstrumentCategory]:
    entry = _REGISTRY.lookup(name)
    return entry.category if entry is not None else None


def get_instruments_by_category(category: InstrumentCategory) -> list[str]:
    return [entry.canonical for entry in _REGISTRY.entries if entry.category == category]


_NAME_PATTERN = re.compile(
    r"(?<![\w-])("
    + "|".join(re.escape(name) for name in sorted(_REGISTRY.by_folded_name, key=len, reverse=True))
    + r")(?![\w-])"
)


def extract_instruments(text: str) -> list[str]:
    """Canonical instruments named in free text, in order of first mention.

    Matching is case-insensitive on whole words and prefers the longest name, so
    ``"grand piano"`` resolves to one instrument rather than ``grand`` and ``piano``.
    """
    found: list[str] = []
    for match in _NAME_PATTERN.finditer(text.casefold()):
        canonical = _REGISTRY.by_folded_name[match.group(1)].canonical
        if canonical not in found:
            found.append(canonical)
    return found
