"""Tool catalogue and dispatcher for the Gemini Image MCP server.

:class:`ToolGateway` is the outward-facing boundary of the server.  It
declares the five tools, validates incoming arguments into typed requests,
calls the matching :class:`ImageOperationsClient` operation and renders the
result as an MCP content envelope::

    {
        "content": [
            {"type": "text", "text": "Successfully generated 1 image(s) ..."},
            {"type": "image", "data": "<base64>", "mimeType": "image/png"},
        ],
        "isError": False,
    }

No exception crosses this boundary: unknown tools, invalid arguments, rate
limit rejections and operation failures all become an envelope with
``isError`` set and the message as text.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from gemini_image_mcp.core.exceptions import GatewayError, ToolArgumentError, UnknownTool
from gemini_image_mcp.core.models import (
    ANALYSIS_TYPES,
    ARTISTIC_STYLES,
    ASPECT_RATIOS,
    DETAIL_LEVELS,
    IMAGE_STYLES,
    QUALITIES,
    AnalysisRequest,
    AnalysisResult,
    BatchRequest,
    GeneratedImage,
    GenerationRequest,
    ModificationRequest,
    StyleTransferRequest,
)
from gemini_image_mcp.core.operations import ImageOperationsClient

logger = logging.getLogger(__name__)

Envelope = dict[str, Any]

NO_RESULTS_TEXT = "Analysis completed but no specific results were extracted."

# ---------------------------------------------------------------------------
# Static tool catalogue.
# ---------------------------------------------------------------------------

_GENERATION_OPTION_PROPERTIES: dict[str, Any] = {
    "width": {"type": "number", "description": "Image width in pixels (optional)"},
    "height": {"type": "number", "description": "Image height in pixels (optional)"},
    "aspectRatio": {
        "type": "string",
        "enum": list(ASPECT_RATIOS),
        "description": "Image aspect ratio (optional)",
    },
    "style": {
        "type": "string",
        "enum": list(IMAGE_STYLES),
        "description": "Image style (optional)",
    },
    "quality": {
        "type": "string",
        "enum": list(QUALITIES),
        "description": "Image quality level (optional)",
    },
    "numberOfImages": {
        "type": "number",
        "description": "Number of images to generate (optional, default: 1)",
    },
    "seed": {"type": "number", "description": "Generation seed (optional)"},
}

_IMAGE_PROPERTY: dict[str, Any] = {
    "type": "string",
    "description": "Base64 encoded image data",
}

TOOL_CATALOGUE: list[dict[str, Any]] = [
    {
        "name": "generateImage",
        "description": "Generate images from text prompts using Google Gemini",
        "inputSchema": {
            "type": "object",
            "properties": {
                "prompt": {
                    "type": "string",
                    "description": "Text prompt describing the image to generate",
                },
                **_GENERATION_OPTION_PROPERTIES,
            },
            "required": ["prompt"],
        },
    },
    {
        "name": "modifyImage",
        "description": "Modify existing images with text instructions",
        "inputSchema": {
            "type": "object",
            "properties": {
                "imageBase64": _IMAGE_PROPERTY,
                "instructions": {
                    "type": "string",
                    "description": "Instructions for modifying the image",
                },
                "preserveStyle": {
                    "type": "boolean",
                    "description": "Whether to preserve the original style (optional)",
                },
                "strength": {
                    "type": "number",
                    "description": "Modification strength from 0 to 1 (optional)",
                },
            },
            "required": ["imageBase64", "instructions"],
        },
    },
    {
        "name": "analyzeImage",
        "description": "Analyze images and extract information",
        "inputSchema": {
            "type": "object",
            "properties": {
                "imageBase64": _IMAGE_PROPERTY,
                "analysisType": {
                    "type": "string",
                    "enum": list(ANALYSIS_TYPES),
                    "description": "Type of analysis to perform (optional)",
                },
                "detail": {
                    "type": "string",
                    "enum": list(DETAIL_LEVELS),
                    "description": "Level of detail for analysis (optional)",
                },
            },
            "required": ["imageBase64"],
        },
    },
    {
        "name": "batchGenerate",
        "description": "Generate multiple images from different prompts",
        "inputSchema": {
            "type": "object",
            "properties": {
                "prompts": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Array of text prompts",
                },
                "baseOptions": {
                    "type": "object",
                    "description": "Base options to apply to all generations (optional)",
                    "properties": _GENERATION_OPTION_PROPERTIES,
                },
            },
            "required": ["prompts"],
        },
    },
    {
        "name": "applyStyleTransfer",
        "description": "Apply artistic styles to existing images",
        "inputSchema": {
            "type": "object",
            "properties": {
                "imageBase64": _IMAGE_PROPERTY,
                "style": {
                    "type": "string",
                    "enum": list(ARTISTIC_STYLES),
                    "description": "Artistic style to apply",
                },
                "intensity": {
                    "type": "number",
                    "description": "Style intensity from 0 to 100 (optional)",
                },
            },
            "required": ["imageBase64", "style"],
        },
    },
]


# ---------------------------------------------------------------------------
# Envelope helpers.
# ---------------------------------------------------------------------------


def text_block(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def image_block(image: GeneratedImage) -> dict[str, Any]:
    return {"type": "image", "data": image.base64, "mimeType": image.mime_type}


def error_envelope(message: str) -> Envelope:
    """Build the error-flagged envelope returned for any failed call."""
    return {"content": [text_block(f"Error: {message}")], "isError": True}


def _envelope(text: str, images: list[GeneratedImage] | None = None) -> Envelope:
    return {
        "content": [text_block(text), *(image_block(image) for image in images or [])],
        "isError": False,
    }


def _percent(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


def render_analysis(analysis: AnalysisResult) -> str:
    """Render an analysis result as readable text.

    Comprehensive results are rendered as indented JSON; other results as
    labelled sections.
    """
    if analysis.comprehensive is not None:
        return json.dumps(analysis.comprehensive.model_dump(), indent=2)

    sections: list[str] = []
    if analysis.description:
        sections.append(f"Description: {analysis.description}")
    if analysis.objects:
        lines = [f"- {obj.name} (confidence: {_percent(obj.confidence)})" for obj in analysis.objects]
        sections.append("Objects detected:\n" + "\n".join(lines))
    if analysis.text:
        sections.append(f"Text found: {', '.join(analysis.text)}")
    if analysis.colors:
        lines = [f"- {c.name} ({c.hex}) - {c.percentage:g}%" for c in analysis.colors]
        sections.append("Dominant colors:\n" + "\n".join(lines))
    if analysis.emotions:
        lines = [f"- {e.emotion} (confidence: {_percent(e.confidence)})" for e in analysis.emotions]
        sections.append("Emotions detected:\n" + "\n".join(lines))

    return "\n\n".join(sections).strip() or NO_RESULTS_TEXT


def _format_validation_error(tool: str, error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{location}: {detail['msg']}")
    return f"Invalid arguments for {tool}: " + "; ".join(problems)


# ---------------------------------------------------------------------------
# Gateway.
# ---------------------------------------------------------------------------


class ToolGateway:
    """Dispatches MCP tool calls to an :class:`ImageOperationsClient`.

    Attributes:
        client: Operations client that executes the calls.
    """

    def __init__(self, client: ImageOperationsClient) -> None:
        self.client = client
        self._handlers: dict[str, tuple[type[BaseModel], Callable[[Any], Awaitable[Envelope]]]] = {
            "generateImage": (GenerationRequest, self._generate_image),
            "modifyImage": (ModificationRequest, self._modify_image),
            "analyzeImage": (AnalysisRequest, self._analyze_image),
            "batchGenerate": (BatchRequest, self._batch_generate),
            "applyStyleTransfer": (StyleTransferRequest, self._style_transfer),
        }

    def list_tools(self) -> list[dict[str, Any]]:
        """Return a copy of the static tool catalogue."""
        return copy.deepcopy(TOOL_CATALOGUE)

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> Envelope:
        """Execute one tool call and render its envelope.

        Args:
            name: Tool name from the catalogue.
            arguments: Untyped JSON arguments.

        Returns:
            A content envelope; ``isError`` is ``True`` on any failure.
        """
        try:
            if name not in self._handlers:
                raise UnknownTool(name)
            request_model, handler = self._handlers[name]
            request = self._parse_arguments(name, request_model, arguments)
            return await handler(request)
        except GatewayError as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return error_envelope(str(e))
        except Exception as e:
            logger.error(f"Unexpected error in tool '{name}': {e}", exc_info=True)
            return error_envelope(str(e) or "Unknown error occurred")

    @staticmethod
    def _parse_arguments(
        name: str, request_model: type[BaseModel], arguments: dict[str, Any] | None
    ) -> BaseModel:
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise ToolArgumentError(f"Invalid arguments for {name}: expected an object")
        try:
            return request_model.model_validate(arguments)
        except ValidationError as e:
            raise ToolArgumentError(_format_validation_error(name, e)) from e

    # -- Handlers -----------------------------------------------------------

    async def _generate_image(self, request: GenerationRequest) -> Envelope:
        images = await self.client.generate_image(request)
        return _envelope(
            f'Successfully generated {len(images)} image(s) for prompt: "{request.prompt}"',
            images,
        )

    async def _modify_image(self, request: ModificationRequest) -> Envelope:
        image = await self.client.modify_image(request)
        return _envelope(
            f'Successfully modified image with instructions: "{request.instructions}"',
            [image],
        )

    async def _analyze_image(self, request: AnalysisRequest) -> Envelope:
        analysis = await self.client.analyze_image(request)
        return _envelope(render_analysis(analysis))

    async def _batch_generate(self, request: BatchRequest) -> Envelope:
        images = await self.client.generate_batch(request)
        return _envelope(
            f"Successfully generated {len(images)} images from {len(request.prompts)} prompts",
            images,
        )

    async def _style_transfer(self, request: StyleTransferRequest) -> Envelope:
        image = await self.client.apply_style_transfer(request)
        return _envelope(f"Successfully applied {request.style} style to the image", [image])
