"""Optional LLM refinement of the style tags and recording line of an assembled prompt.

The language model is an injected collaborator; the engine never depends on it. Any
failure (no generator configured, timeout, exhausted retries, unusable response) falls
back to the deterministic values already present on the prompt.
"""

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

from loguru import logger

from .assembler import MAX_PROMPT_CHARS, AssembledPrompt, truncate_prompt
from .exceptions import EnhancementFailure

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 2
MAX_ENHANCED_TAGS = 8

ENHANCEMENT_SYSTEM_PROMPT = (
    "You refine prompts for a music generation service. Reply with a single JSON object "
    'holding "style_tags" (a list of short lower-case production descriptors) and '
    '"recording" (one sentence describing the recording context). Do not add any other text.'
)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_MAX_STYLE_LINE = re.compile(r'^(style tags:\s*)"[^"\n]*"', re.MULTILINE)
_MAX_RECORDING_LINE = re.compile(r'^(recording:\s*)"[^"\n]*"', re.MULTILINE)
_STANDARD_STYLE_LINE = re.compile(r"^(Style Tags:\s*)[^\n]*$", re.MULTILINE)
_STANDARD_RECORDING_LINE = re.compile(r"^(Recording:\s*)[^\n]*$", re.MULTILINE)


class TextGenerator(Protocol):
    async def generate_text(
        self,
        system: str,
        prompt: str,
        *,
        max_retries: int,
        timeout: float,
    ) -> str:
        ...


@dataclass(frozen=True)
class EnhancementFields:
    style_tags: list[str]
    recording: str


@dataclass(frozen=True)
class EnhancementResult:
    prompt: str
    style_tags: list[str]
    recording: str
    enhanced: bool
    reason: Optional[str] = None


@dataclass
class EnhancerStats:
    attempts: int = 0
    successes: int = 0
    fallbacks: int = 0
    reasons: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, object]:
        return {
            "attempts": self.attempts,
            "successes": self.successes,
            "fallbacks": self.fallbacks,
            "reasons": dict(self.reasons),
        }


def _coerce_tags(value: object) -> Optional[list[str]]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [item for item in value if isinstance(item, str)]
    else:
        return None
    tags: list[str] = []
    for item in items:
        tag = item.strip().lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:MAX_ENHANCED_TAGS] or None


def parse_enhancement_response(text: str) -> Optional[EnhancementFields]:
    """Parse the collaborator's reply, returning ``None`` when it is unusable.

    Accepts a bare JSON object, optionally wrapped in a Markdown code fence. Both
    ``style_tags`` and a non-empty ``recording`` string are required.
    """
    cleaned = _CODE_FENCE.sub("", text.strip())
    try:
        payload = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(payload, dict):
        return None

    tags = _coerce_tags(payload.get("style_tags"))
    recording = payload.get("recording")
    if tags is None or not isinstance(recording, str) or not recording.strip():
        return None
    return EnhancementFields(style_tags=tags, recording=recording.strip())


def apply_enhancement(prompt: str, fields: EnhancementFields) -> str:
    tags = ", ".join(fields.style_tags)
    if _MAX_STYLE_LINE.search(prompt) or _MAX_RECORDING_LINE.search(prompt):
        prompt = _MAX_STYLE_LINE.sub(lambda m: f'{m.group(1)}"{tags}"', prompt, count=1)
        return _MAX_RECORDING_LINE.sub(
            lambda m: f'{m.group(1)}"{fields.recording}"', prompt, count=1
        )
    prompt = _STANDARD_STYLE_LINE.sub(lambda m: f"{m.group(1)}{tags}", prompt, count=1)
    return _STANDARD_RECORDING_LINE.sub(
        lambda m: f"{m.group(1)}{fields.recording}", prompt, count=1
    )


def _build_user_prompt(assembled: AssembledPrompt) -> str:
    return "\n".join(
        [
            f"Genre: {assembled.resolution.for_output}",
            f"BPM: {assembled.bpm_range}",
            f"Instruments: {', '.join(assembled.instruments)}",
            f"Current style tags: {', '.join(assembled.style_tags)}",
            f"Current recording: {assembled.recording}",
        ]
    )


class PromptEnhancer:
    """Ask a :class:`TextGenerator` for richer style tags and recording text."""

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_prompt_chars: int = MAX_PROMPT_CHARS,
    ) -> None:
        self._generator = generator
        self._timeout = timeout
        self._max_retries = max_retries
        self._max_prompt_chars = max_prompt_chars
        self._lock = asyncio.Lock()
        self._stats = EnhancerStats()

    @property
    def available(self) -> bool:
        return self._generator is not None

    async def stats(self) -> dict[str, object]:
        async with self._lock:
            return self._stats.as_dict()

    async def enhance(self, assembled: AssembledPrompt) -> EnhancementResult:
        async with self._lock:
            self._stats.attempts += 1

        try:
            fields = await self._request(assembled)
        except EnhancementFailure as exc:
            return await self._fallback(assembled, str(exc))

        if fields is None:
            return await self._fallback(assembled, "unparsable_response")

        async with self._lock:
            self._stats.successes += 1
        logger.info("Enhanced prompt for '{}'", assembled.resolution.for_output)
        prompt = apply_enhancement(assembled.text, fields)
        return EnhancementResult(
            prompt=truncate_prompt(prompt, self._max_prompt_chars),
            style_tags=fields.style_tags,
            recording=fields.recording,
            enhanced=True,
        )

    async def _request(self, assembled: AssembledPrompt) -> Optional[EnhancementFields]:
        if self._generator is None:
            raise EnhancementFailure("generator_unavailable")
        try:
            text = await asyncio.wait_for(
                self._generator.generate_text(
                    ENHANCEMENT_SYSTEM_PROMPT,
                    _build_user_prompt(assembled),
                    max_retries=self._max_retries,
                    timeout=self._timeout,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise EnhancementFailure("timeout") from exc
        except EnhancementFailure:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EnhancementFailure(f"generator_error:{exc.__class__.__name__}") from exc
        return parse_enhancement_response(text)

    async def _fallback(self, assembled: AssembledPrompt, reason: str) -> EnhancementResult:
        async with self._lock:
            self._stats.fallbacks += 1
            self._stats.reasons[reason] = self._stats.reasons.get(reason, 0) + 1
        logger.warning("Prompt enhancement fell back to deterministic output: {}", reason)
        return EnhancementResult(
            prompt=assembled.text,
            style_tags=list(assembled.style_tags),
            recording=assembled.recording,
            enhanced=False,
            reason=reason,
        )
