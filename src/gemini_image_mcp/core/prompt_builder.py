"""Natural-language prompt synthesis for Gemini image calls.

Structured tool options are turned into a single instruction string.  Every
function here is pure: the same input always yields the same prompt.

Generation Prompt Structure
---------------------------
The caller's prompt is extended with up to three clauses, in this order::

    <prompt>[ in <style> style][ with <ratio> aspect ratio][, <quality clause>]

``"realistic"`` is the default style and adds no clause.  ``"standard"``
quality adds nothing either.

Usage
-----
::

    prompt = build_generation_prompt(
        GenerationRequest(prompt="a lighthouse", style="watercolor", quality="high")
    )
    # "a lighthouse in watercolor style, high quality, detailed"
"""

from __future__ import annotations

from .models import AnalysisRequest, GenerationRequest

DEFAULT_STYLE = "realistic"

_QUALITY_CLAUSES: dict[str, str] = {
    "high": ", high quality, detailed",
    "ultra": ", ultra high quality, extremely detailed, masterpiece",
}

_ANALYSIS_PROMPTS: dict[str, str] = {
    "objects": "Identify and list all objects visible in this image with confidence scores.",
    "text": "Extract and transcribe any text visible in this image.",
    "colors": (
        "Analyze the color palette of this image, identifying dominant colors "
        "with their hex values."
    ),
    "emotions": "Analyze the emotional content and mood conveyed by this image.",
    "comprehensive": (
        "Provide a comprehensive analysis including description, objects, text, "
        "colors, emotions, and relevant tags."
    ),
}

_PRESERVE_STYLE_CLAUSE = " Please preserve the original artistic style and composition."


def build_generation_prompt(request: GenerationRequest) -> str:
    """Compile the text prompt for an image generation call.

    Args:
        request: Validated generation request.  ``seed``, ``width``,
            ``height`` and ``number_of_images`` are generation parameters,
            not prompt text, and are ignored here.

    Returns:
        The prompt with style, aspect ratio and quality clauses appended.
    """
    prompt = request.prompt

    if request.style and request.style != DEFAULT_STYLE:
        prompt += f" in {request.style} style"

    if request.aspect_ratio:
        prompt += f" with {request.aspect_ratio} aspect ratio"

    prompt += _QUALITY_CLAUSES.get(request.quality or "standard", "")

    return prompt


def build_analysis_prompt(request: AnalysisRequest) -> str:
    """Return the canned instruction for an analysis type.

    ``"description"`` (and any unrecognised type) uses the detail level;
    the other types have one fixed sentence each.
    """
    fixed = _ANALYSIS_PROMPTS.get(request.analysis_type)
    if fixed is not None:
        return fixed
    return f"Provide a {request.detail} detail description of this image."


def build_modification_prompt(instructions: str, preserve_style: bool = False) -> str:
    """Wrap modification instructions into the prompt sent with the image.

    Args:
        instructions: Caller's modification instructions.
        preserve_style: Append a clause asking the model to keep the
            original style and composition.

    Returns:
        The modification prompt.
    """
    prompt = f"Modify this image according to the following instructions: {instructions}"
    if preserve_style:
        prompt += _PRESERVE_STYLE_CLAUSE
    return prompt


def build_style_transfer_prompt(style: str, intensity: float | None = None) -> str:
    """Build the modification instruction for a style transfer.

    An intensity of ``None`` or ``0`` adds no intensity clause.

    Args:
        style: Target artistic style.
        intensity: Style intensity from 0 to 100.

    Returns:
        Instruction text to pass to :func:`build_modification_prompt`.
    """
    instruction = f"Apply {style} style to this image."
    if intensity:
        instruction += f" Use {_format_number(intensity)}% intensity for the style transfer."
    return instruction


def _format_number(value: float) -> str:
    # 80.0 -> "80", 12.5 -> "12.5"
    if float(value).is_integer():
        return str(int(value))
    return str(value)
