from __future__ import annotations

from muse_prompt.services.random import create_seeded_rng
from muse_prompt.services.sections import (
    SECTION_ORDER,
    SECTION_TEMPLATES,
    SectionType,
    build_all_sections,
    build_section,
)


def test_all_sections_in_order() -> None:
    result = build_all_sections("jazz", create_seeded_rng(13))
    assert [section.type for section in result.sections] == list(SECTION_ORDER)
    lines = result.text.splitlines()
    assert [line.split("]")[0] + "]" for line in lines] == [
        "[INTRO]",
        "[VERSE]",
        "[CHORUS]",
        "[BRIDGE]",
        "[OUTRO]",
    ]
    for section in result.sections:
        assert len(section.instruments) == SECTION_TEMPLATES[section.type].instrument_count
        assert "{" not in section.text
    assert result.all_instruments == [
        item for section in result.sections for item in section.instruments
    ]


def test_sections_are_reproducible() -> None:
    assert build_all_sections("rock", create_seeded_rng(3)) == build_all_sections(
        "rock", create_seeded_rng(3)
    )


def test_single_section_uses_genre_moods() -> None:
    section = build_section(SectionType.CHORUS, "jazz", create_seeded_rng(5))
    assert section.text.startswith("[CHORUS] ")
    assert len(section.moods) == 2
    assert all(mood == mood.lower() for mood in section.moods)
