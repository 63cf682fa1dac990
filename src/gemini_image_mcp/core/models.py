"""Pydantic request and result models for the image operations.

These models are the typed boundary between the tool gateway and the
operations client.  Tool arguments arrive as camelCase JSON (``aspectRatio``,
``imageBase64``); every model accepts both the camelCase alias and the
snake_case field name.

Models
------
GenerationOptions
    Shared generation settings (everything except the prompt).
GenerationRequest
    Payload for ``generateImage``.
ModificationRequest
    Payload for ``modifyImage``.
AnalysisRequest
    Payload for ``analyzeImage``.
BatchRequest
    Payload for ``batchGenerate``.
StyleTransferRequest
    Payload for ``applyStyleTransfer``.
GeneratedImage
    One image produced by a generation or modification call.
AnalysisResult
    Structured result of an analysis call.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

AspectRatio = Literal["1:1", "16:9", "9:16", "4:3", "3:4"]
ImageStyle = Literal["realistic", "artistic", "cartoon", "sketch", "watercolor", "oil-painting"]
Quality = Literal["standard", "high", "ultra"]
AnalysisType = Literal["description", "objects", "text", "colors", "emotions", "comprehensive"]
DetailLevel = Literal["low", "medium", "high"]
ArtisticStyle = Literal[
    "anime", "renaissance", "impressionist", "cyberpunk", "minimalist", "vintage", "futuristic"
]

ASPECT_RATIOS: tuple[str, ...] = ("1:1", "16:9", "9:16", "4:3", "3:4")
IMAGE_STYLES: tuple[str, ...] = (
    "realistic",
    "artistic",
    "cartoon",
    "sketch",
    "watercolor",
    "oil-painting",
)
QUALITIES: tuple[str, ...] = ("standard", "high", "ultra")
ANALYSIS_TYPES: tuple[str, ...] = (
    "description",
    "objects",
    "text",
    "colors",
    "emotions",
    "comprehensive",
)
DETAIL_LEVELS: tuple[str, ...] = ("low", "medium", "high")
ARTISTIC_STYLES: tuple[str, ...] = (
    "anime",
    "renaissance",
    "impressionist",
    "cyberpunk",
    "minimalist",
    "vintage",
    "futuristic",
)


class _RequestModel(BaseModel):
    """Common configuration for all request payloads."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


def _require_text(value: str, field_name: str) -> str:
    if not value.strip():
        raise ValueError(f"{field_name} must not be empty")
    return value


class GenerationOptions(_RequestModel):
    """Generation settings shared by single and batch generation.

    Attributes:
        width: Requested width in pixels.
        height: Requested height in pixels.
        aspect_ratio: One of the five supported aspect ratios.
        style: Rendering style.  ``"realistic"`` is the default look and adds
            nothing to the prompt.
        quality: ``"standard"``, ``"high"`` or ``"ultra"``.
        number_of_images: How many images to request (default 1).
        seed: Seed forwarded to the remote model for reproducibility.
    """

    width: int | None = Field(default=None, gt=0, description="Image width in pixels.")
    height: int | None = Field(default=None, gt=0, description="Image height in pixels.")
    aspect_ratio: AspectRatio | None = Field(
        default=None,
        alias="aspectRatio",
        description="Image aspect ratio.",
    )
    style: ImageStyle | None = Field(default=None, description="Image style.")
    quality: Quality | None = Field(default=None, description="Image quality level.")
    number_of_images: int = Field(
        default=1,
        gt=0,
        alias="numberOfImages",
        description="Number of images to generate.",
    )
    seed: int | None = Field(default=None, description="Generation seed.")


class GenerationRequest(GenerationOptions):
    """Request body for the ``generateImage`` tool."""

    prompt: str = Field(
        ...,
        min_length=1,
        description="Text prompt describing the image to generate.",
    )

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        return _require_text(value, "prompt")

    @classmethod
    def from_options(cls, prompt: str, options: GenerationOptions | None) -> GenerationRequest:
        """Combine a prompt with shared batch options."""
        fields = options.model_dump(exclude_unset=True) if options is not None else {}
        return cls(prompt=prompt, **fields)


class ModificationRequest(_RequestModel):
    """Request body for the ``modifyImage`` tool.

    Attributes:
        image_base64: Source image, base64 encoded (a ``data:`` URI is also
            accepted).
        instructions: What to change.
        preserve_style: Ask the model to keep the original style and
            composition.
        strength: Modification strength from 0 to 1.  Accepted for
            compatibility; Gemini has no matching parameter.
    """

    image_base64: str = Field(
        ...,
        min_length=1,
        alias="imageBase64",
        description="Base64 encoded image data.",
    )
    instructions: str = Field(..., min_length=1, description="Modification instructions.")
    preserve_style: bool = Field(
        default=False,
        alias="preserveStyle",
        description="Whether to preserve the original style.",
    )
    strength: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Modification strength from 0 to 1.",
    )

    @field_validator("instructions")
    @classmethod
    def _instructions_not_blank(cls, value: str) -> str:
        return _require_text(value, "instructions")


class AnalysisRequest(_RequestModel):
    """Request body for the ``analyzeImage`` tool."""

    image_base64: str = Field(
        ...,
        min_length=1,
        alias="imageBase64",
        description="Base64 encoded image data.",
    )
    analysis_type: AnalysisType = Field(
        default="description",
        alias="analysisType",
        description="Type of analysis to perform.",
    )
    detail: DetailLevel = Field(default="medium", description="Level of detail.")


class BatchRequest(_RequestModel):
    """Request body for the ``batchGenerate`` tool.

    Attributes:
        prompts: Prompts to generate, in order.  An empty list is valid and
            produces no images.
        base_options: Options applied identically to every prompt.
    """

    prompts: list[str] = Field(..., description="Array of text prompts.")
    base_options: GenerationOptions | None = Field(
        default=None,
        alias="baseOptions",
        description="Base options applied to all generations.",
    )

    @field_validator("prompts")
    @classmethod
    def _prompts_not_blank(cls, value: list[str]) -> list[str]:
        for index, prompt in enumerate(value):
            _require_text(prompt, f"prompts[{index}]")
        return value


class StyleTransferRequest(_RequestModel):
    """Request body for the ``applyStyleTransfer`` tool.

    Attributes:
        image_base64: Source image, base64 encoded.
        style: Target artistic style.
        intensity: Style intensity from 0 to 100.
        preserve_style: Accepted from callers but never used; a style
            transfer always replaces the original style.
    """

    image_base64: str = Field(
        ...,
        min_length=1,
        alias="imageBase64",
        description="Base64 encoded image data.",
    )
    style: ArtisticStyle = Field(..., description="Artistic style to apply.")
    intensity: float | None = Field(
        default=None,
        ge=0,
        le=100,
        description="Style intensity from 0 to 100.",
    )
    preserve_style: bool = Field(
        default=False,
        alias="preserveStyle",
        description="Ignored; style transfer never preserves the original style.",
    )


class GeneratedImage(BaseModel):
    """One image returned by the remote model.

    Attributes:
        base64: Image bytes, base64 encoded (no ``data:`` prefix).
        mime_type: MIME type reported by the model.
        width: Pixel width, when the bytes could be decoded.
        height: Pixel height, when the bytes could be decoded.
        metadata: ``prompt``, ``model`` and ``timestamp`` plus any extra keys.
    """

    model_config = ConfigDict(frozen=True)

    base64: str
    mime_type: str = "image/png"
    width: int | None = None
    height: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class DetectedObject(BaseModel):
    name: str
    confidence: float


class ColorInfo(BaseModel):
    hex: str
    name: str = "Unknown"
    percentage: float = 0


class EmotionScore(BaseModel):
    emotion: str
    confidence: float


class ComprehensiveAnalysis(BaseModel):
    """Composite result for ``analysisType="comprehensive"``."""

    description: str
    objects: list[DetectedObject] = Field(default_factory=list)
    text: list[str] = Field(default_factory=list)
    colors: list[ColorInfo] = Field(default_factory=list)
    emotions: list[EmotionScore] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Structured result of an image analysis.

    Exactly one field group is populated for a given analysis type; the
    rest stay ``None``.
    """

    description: str | None = None
    objects: list[DetectedObject] | None = None
    text: list[str] | None = None
    colors: list[ColorInfo] | None = None
    emotions: list[EmotionScore] | None = None
    comprehensive: ComprehensiveAnalysis | None = None
