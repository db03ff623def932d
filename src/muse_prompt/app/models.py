from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PromptMode(str, Enum):
    MAX = "max"
    STANDARD = "standard"


class PromptRequest(BaseModel):
    description: str = Field(default="", max_length=2000)
    mode: PromptMode = Field(default=PromptMode.MAX)
    genre: Optional[str] = Field(
        default=None,
        max_length=128,
        description="Explicit genre override; wins over every other genre source.",
    )
    seed_genres: list[str] = Field(default_factory=list, max_length=4)
    direct_styles: list[str] = Field(default_factory=list, max_length=8)
    user_instruments: list[str] = Field(default_factory=list, max_length=8)
    themes: list[str] = Field(default_factory=list, max_length=8)
    seed: Optional[int] = Field(default=None, ge=0)
    genre_count: Optional[int] = Field(default=None, ge=1, le=4)
    enhance: bool = Field(default=False)


class PromptMetadata(BaseModel):
    genre: str
    genre_components: list[str] = Field(default_factory=list)
    genre_source: str
    bpm_range: str
    instruments: list[str] = Field(default_factory=list)
    progression: Optional[str] = Field(default=None)
    vocals: Optional[str] = Field(default=None)
    style_tags: list[str] = Field(default_factory=list)
    recording: str
    key: Optional[str] = Field(default=None)
    enhanced: bool = Field(default=False)


class PromptResponse(BaseModel):
    mode: PromptMode
    prompt: str
    metadata: PromptMetadata
    seed: Optional[int] = Field(default=None)


class GenreCountRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=4000)
    target_count: int = Field(..., ge=1, le=4)
    seed: Optional[int] = Field(default=None, ge=0)


class GenreCountResponse(BaseModel):
    prompt: str


class BpmSummary(BaseModel):
    min: int
    max: int
    typical: int


class GenreSummary(BaseModel):
    key: str
    name: str
    bpm: BpmSummary
    max_tags: int


class CompatibleGenre(BaseModel):
    key: str
    score: float = Field(..., ge=0.0, le=1.0)
