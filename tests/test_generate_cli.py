from __future__ import annotations

import pytest

from muse_prompt.generate import _run
from muse_prompt.services.assembler import extract_genres_from_prompt


@pytest.mark.asyncio
async def test_generate_cli_prints_seeded_prompt(capsys: pytest.CaptureFixture[str]) -> None:
    await _run("smoky jazz club at midnight", mode="max", genre=None, seed=42, genre_count=None)
    first = capsys.readouterr().out
    assert "genre    : jazz" in first
    assert "source   : detected" in first
    assert "[Is_MAX_MODE: MAX](MAX)" in first

    await _run("smoky jazz club at midnight", mode="max", genre=None, seed=42, genre_count=None)
    assert capsys.readouterr().out == first


@pytest.mark.asyncio
async def test_generate_cli_standard_mode_with_genre_count(
    capsys: pytest.CaptureFixture[str],
) -> None:
    await _run("", mode="standard", genre="rock", seed=7, genre_count=2)
    out = capsys.readouterr().out
    assert "mode     : standard" in out
    assert "Genre: rock, " in out


@pytest.mark.asyncio
async def test_generate_cli_clamps_genre_count(capsys: pytest.CaptureFixture[str]) -> None:
    await _run("", mode="max", genre="jazz", seed=3, genre_count=9)
    assert len(extract_genres_from_prompt(capsys.readouterr().out)) == 4

    await _run("", mode="max", genre="jazz rock", seed=3, genre_count=0)
    assert extract_genres_from_prompt(capsys.readouterr().out) == ["jazz"]
