from __future__ import annotations

from typing import Optional, cast

from fastapi import APIRouter, HTTPException, Request

from ..services.assembler import PromptAssembler, enforce_genre_count
from ..services.compatibility import get_compatible_genres
from ..services.enhancer import PromptEnhancer
from ..services.genres import ALL_GENRE_KEYS, GENRE_REGISTRY, get_genre
from ..services.random import Rng, create_seeded_rng, system_rng
from .models import (
    BpmSummary,
    CompatibleGenre,
    GenreCountRequest,
    GenreCountResponse,
    GenreSummary,
    PromptRequest,
    PromptResponse,
)
from .settings import Settings

ENGINE_VERSION = "1"

router = APIRouter()


def get_assembler(request: Request) -> PromptAssembler:
    return cast(PromptAssembler, request.app.state.assembler)


def get_enhancer(request: Request) -> Optional[PromptEnhancer]:
    return cast(Optional[PromptEnhancer], getattr(request.app.state, "enhancer", None))


def _rng_for(seed: Optional[int]) -> Rng:
    return create_seeded_rng(seed) if seed is not None else system_rng()


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    settings = cast(Settings, request.app.state.settings)
    enhancer = get_enhancer(request)
    payload: dict[str, object] = {
        "status": "ok",
        "engine_version": ENGINE_VERSION,
        "genre_count": len(GENRE_REGISTRY),
        "default_mode": settings.default_mode.value,
        "llm_enabled": settings.llm_enabled and enhancer is not None and enhancer.available,
    }
    if enhancer is not None:
        payload["enhancer"] = await enhancer.stats()
    return payload


@router.get("/genres", response_model=list[GenreSummary])
async def genres() -> list[GenreSummary]:
    summaries: list[GenreSummary] = []
    for key in ALL_GENRE_KEYS:
        genre = GENRE_REGISTRY[key]
        summaries.append(
            GenreSummary(
                key=genre.key,
                name=genre.name,
                bpm=BpmSummary(min=genre.bpm.min, max=genre.bpm.max, typical=genre.bpm.typical),
                max_tags=genre.max_tags,
            )
        )
    return summaries


@router.get("/genres/{key}/compatible", response_model=list[CompatibleGenre])
async def compatible_genres(key: str) -> list[CompatibleGenre]:
    if get_genre(key) is None:
        raise HTTPException(status_code=404, detail=f"genre {key} not found")
    return [CompatibleGenre(key=other, score=score) for other, score in get_compatible_genres(key)]


@router.post("/prompt", response_model=PromptResponse)
async def build_prompt(payload: PromptRequest, request: Request) -> PromptResponse:
    settings = cast(Settings, request.app.state.settings)
    if payload.genre_count is None and settings.default_genre_count is not None:
        payload = payload.model_copy(update={"genre_count": settings.default_genre_count})
    if "mode" not in payload.model_fields_set:
        payload = payload.model_copy(update={"mode": settings.default_mode})

    assembled = get_assembler(request).build(payload, _rng_for(payload.seed))
    response = assembled.to_response(seed=payload.seed)

    enhancer = get_enhancer(request)
    if payload.enhance and settings.llm_enabled and enhancer is not None:
        result = await enhancer.enhance(assembled)
        response.prompt = result.prompt
        response.metadata.style_tags = result.style_tags
        response.metadata.recording = result.recording
        response.metadata.enhanced = result.enhanced
    return response


@router.post("/prompt/genre-count", response_model=GenreCountResponse)
async def genre_count(payload: GenreCountRequest) -> GenreCountResponse:
    prompt = enforce_genre_count(payload.prompt, payload.target_count, _rng_for(payload.seed))
    return GenreCountResponse(prompt=prompt)
