"""Remote generative backend for image operations.

The operations client talks to Gemini through :class:`RemoteBackend`, a
small interface that accepts role-less content parts and returns the raw
``GenerateContentResponse``.  :class:`GeminiBackend` is the production
implementation built on the ``google-genai`` SDK; tests substitute a fake.

Safety Settings
---------------
One threshold, derived from the configured safety level, is applied to all
four harm categories:

===========  ==========================
Level        Threshold
===========  ==========================
LOW          BLOCK_ONLY_HIGH
MEDIUM       BLOCK_MEDIUM_AND_ABOVE
HIGH         BLOCK_LOW_AND_ABOVE
BLOCK_NONE   BLOCK_NONE
===========  ==========================

Response Decoding
-----------------
:func:`extract_images` collects every inline image part across all
candidates.  :func:`extract_text` joins the text parts.  Both raise
``RuntimeError`` when Gemini blocked the prompt or the candidate.
"""

from __future__ import annotations

import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

HARM_CATEGORIES: tuple[str, ...] = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)

SAFETY_THRESHOLDS: dict[str, str] = {
    "LOW": "BLOCK_ONLY_HIGH",
    "MEDIUM": "BLOCK_MEDIUM_AND_ABOVE",
    "HIGH": "BLOCK_LOW_AND_ABOVE",
    "BLOCK_NONE": "BLOCK_NONE",
}

IMAGE_MODALITIES: tuple[str, ...] = ("TEXT", "IMAGE")

_BLOCKED_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "IMAGE_SAFETY"}


@dataclass(frozen=True)
class ContentPart:
    """One part of a user turn: either text or inline image bytes."""

    text: str | None = None
    data: bytes | None = None
    mime_type: str | None = None

    @classmethod
    def from_text(cls, text: str) -> ContentPart:
        return cls(text=text)

    @classmethod
    def from_image(cls, data: bytes, mime_type: str) -> ContentPart:
        return cls(data=data, mime_type=mime_type)


@dataclass(frozen=True)
class InlineImage:
    """Image bytes extracted from a model response."""

    data: bytes
    mime_type: str


def safety_settings_for(level: str) -> list[types.SafetySetting]:
    """Build the safety settings for a named level (unknown levels use MEDIUM)."""
    threshold = SAFETY_THRESHOLDS.get(level, SAFETY_THRESHOLDS["MEDIUM"])
    return [
        types.SafetySetting(category=category, threshold=threshold)
        for category in HARM_CATEGORIES
    ]


class RemoteBackend(ABC):
    """Interface to the remote generative model."""

    model: str

    @abstractmethod
    async def generate_content(
        self,
        parts: list[ContentPart],
        *,
        candidate_count: int | None = None,
        seed: int | None = None,
        response_modalities: tuple[str, ...] | None = None,
    ) -> Any:
        """Send one user turn and return the raw model response."""


class GeminiBackend(RemoteBackend):
    """``google-genai`` implementation of :class:`RemoteBackend`.

    Attributes:
        model: Gemini model identifier.
        safety_level: Named safety level used for every request.
    """

    def __init__(self, api_key: str, model: str, safety_level: str = "MEDIUM") -> None:
        self.model = model
        self.safety_level = safety_level
        self._client = genai.Client(api_key=api_key)
        self._safety_settings = safety_settings_for(safety_level)

    async def generate_content(
        self,
        parts: list[ContentPart],
        *,
        candidate_count: int | None = None,
        seed: int | None = None,
        response_modalities: tuple[str, ...] | None = None,
    ) -> Any:
        contents = [types.Content(role="user", parts=[self._to_sdk_part(p) for p in parts])]
        generate_config = types.GenerateContentConfig(
            safety_settings=self._safety_settings,
            candidate_count=candidate_count,
            seed=seed,
            response_modalities=list(response_modalities) if response_modalities else None,
        )
        logger.debug(
            f"Calling {self.model} with {len(parts)} part(s) "
            f"(candidates={candidate_count}, seed={seed})"
        )
        return await self._client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=generate_config,
        )

    @staticmethod
    def _to_sdk_part(part: ContentPart) -> types.Part:
        if part.data is not None:
            return types.Part.from_bytes(data=part.data, mime_type=part.mime_type or "image/png")
        return types.Part.from_text(text=part.text or "")


def _check_blocked(response: Any) -> None:
    prompt_feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(prompt_feedback, "block_reason", None)
    if block_reason:
        raise RuntimeError(f"Prompt blocked by safety filter: {_enum_name(block_reason)}")

    for candidate in getattr(response, "candidates", None) or []:
        finish_reason = _enum_name(getattr(candidate, "finish_reason", None))
        if finish_reason in _BLOCKED_FINISH_REASONS:
            raise RuntimeError(f"Generation blocked: {finish_reason}")


def _enum_name(value: Any) -> str:
    if value is None:
        return ""
    return str(getattr(value, "name", value))


def _iter_parts(response: Any):
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        if not content:
            continue
        yield from getattr(content, "parts", None) or []


def extract_images(response: Any) -> list[InlineImage]:
    """Collect every inline image in a response, in candidate order.

    Raises:
        RuntimeError: If the request was blocked or no image was returned.
    """
    _check_blocked(response)

    images: list[InlineImage] = []
    collected_text: list[str] = []
    for part in _iter_parts(response):
        text_part = getattr(part, "text", None)
        if text_part:
            collected_text.append(text_part)

        inline_data = getattr(part, "inline_data", None)
        raw_data = getattr(inline_data, "data", None)
        if not raw_data:
            continue
        if isinstance(raw_data, str):
            image_bytes = base64.b64decode(raw_data)
        else:
            image_bytes = bytes(raw_data)
        mime_type = getattr(inline_data, "mime_type", None) or "image/png"
        images.append(InlineImage(data=image_bytes, mime_type=mime_type))

    if not images:
        excerpt = " ".join(collected_text).strip()[:200]
        if excerpt:
            logger.warning(f"Model returned text but no image output: {excerpt}")
            raise RuntimeError(f"Model returned no image data: {excerpt}")
        raise RuntimeError("Model response contained no image data")

    return images


def extract_text(response: Any) -> str:
    """Return the text of a response.

    Raises:
        RuntimeError: If the request was blocked.
    """
    _check_blocked(response)
    texts = [part.text for part in _iter_parts(response) if getattr(part, "text", None)]
    if texts:
        return "".join(texts)
    # Responses without candidates (e.g. simple fakes) may only expose .text
    return getattr(response, "text", None) or ""
