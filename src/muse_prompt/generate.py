"""
CLI entry point to assemble a single prompt without running the HTTP worker.

Example:
    python -m muse_prompt.generate --description "smoky late night jazz" --seed 42
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Optional

from .app.models import PromptMode, PromptRequest
from .app.settings import Settings
from .services.assembler import MAX_GENRE_COUNT, MIN_GENRE_COUNT, PromptAssembler
from .services.random import create_seeded_rng, system_rng


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assemble a music-generation prompt.")
    parser.add_argument(
        "--description",
        default="",
        help="Free-text description used for genre and progression detection.",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in PromptMode],
        default=None,
        help="Prompt shape (defaults to worker settings).",
    )
    parser.add_argument(
        "--genre",
        default=None,
        help="Genre override, e.g. 'jazz' or 'jazz rock'.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible output.",
    )
    parser.add_argument(
        "--genre-count",
        type=int,
        default=None,
        help="Force the genre line to name exactly this many genres (1-4).",
    )
    return parser.parse_args()


async def _run(
    description: str,
    *,
    mode: Optional[str],
    genre: Optional[str],
    seed: Optional[int],
    genre_count: Optional[int],
) -> None:
    settings = Settings()
    if genre_count is None:
        genre_count = settings.default_genre_count
    if genre_count is not None:
        genre_count = max(MIN_GENRE_COUNT, min(MAX_GENRE_COUNT, genre_count))
    request = PromptRequest(
        description=description,
        mode=PromptMode(mode) if mode is not None else settings.default_mode,
        genre=genre,
        seed=seed,
        genre_count=genre_count,
    )
    assembler = PromptAssembler(
        max_prompt_chars=settings.max_prompt_chars,
        articulation_chance=settings.articulation_chance,
    )
    rng = create_seeded_rng(seed) if seed is not None else system_rng()
    assembled = assembler.build(request, rng)

    print(f"mode     : {assembled.mode.value}")
    print(f"genre    : {assembled.resolution.for_output}")
    print(f"source   : {assembled.resolution.source.value}")
    print(f"bpm      : {assembled.bpm_range}")
    print(f"seed     : {seed if seed is not None else 'random'}")
    print()
    print(assembled.text)


def main() -> None:
    args = _parse_args()
    asyncio.run(
        _run(
            args.description,
            mode=args.mode,
            genre=args.genre,
            seed=args.seed,
            genre_count=args.genre_count,
        )
    )


if __name__ == "__main__":
    main()
