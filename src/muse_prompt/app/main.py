from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from loguru import logger

from ..services.assembler import PromptAssembler
from ..services.enhancer import PromptEnhancer, TextGenerator
from ..services.genres import GENRE_REGISTRY
from .routes import ENGINE_VERSION, router
from .settings import Settings, get_settings


def create_app(
    settings: Optional[Settings] = None,
    *,
    text_generator: Optional[TextGenerator] = None,
) -> FastAPI:
    """Create and configure FastAPI instance."""
    settings = settings or get_settings()
    assembler = PromptAssembler(
        max_prompt_chars=settings.max_prompt_chars,
        articulation_chance=settings.articulation_chance,
    )
    enhancer = PromptEnhancer(
        text_generator,
        timeout=settings.llm_timeout_seconds,
        max_retries=settings.llm_max_retries,
        max_prompt_chars=settings.max_prompt_chars,
    )

    @asynccontextmanager
    async def _lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Prompt worker ready: engine v{}, {} genres, llm {}",
            ENGINE_VERSION,
            len(GENRE_REGISTRY),
            "enabled" if settings.llm_enabled and enhancer.available else "disabled",
        )
        yield

    app = FastAPI(title="Muse Prompt Worker", version="0.1.0", lifespan=_lifespan)
    app.state.settings = settings
    app.state.assembler = assembler
    app.state.enhancer = enhancer
    app.include_router(router)
    return app


app = create_app()
