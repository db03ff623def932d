from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import PromptMode


class Settings(BaseSettings):
    """Runtime configuration for the prompt worker and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="MUSE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    default_mode: PromptMode = Field(default=PromptMode.MAX)
    max_prompt_chars: int = Field(
        default=1000,
        ge=200,
        le=4000,
        description="Hard cap on the length of an assembled prompt.",
    )
    articulation_chance: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Probability that an instrument tag gets a playing-style descriptor.",
    )
    default_genre_count: Optional[int] = Field(
        default=None,
        ge=1,
        le=4,
        description="Genre count enforced when a request does not ask for one.",
    )
    llm_enabled: bool = Field(default=False)
    llm_timeout_seconds: float = Field(default=30.0, gt=0.0, le=300.0)
    llm_max_retries: int = Field(default=2, ge=0, le=10)
    llm_model_id: Optional[str] = Field(default=None, max_length=128)

    @model_validator(mode="after")
    def _require_model_for_llm(self) -> "Settings":
        if self.llm_enabled and not (self.llm_model_id or "").strip():
            self.llm_enabled = False
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
