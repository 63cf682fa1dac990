"""Best-effort extraction of structured analysis results from model prose.

Gemini answers analysis prompts in free text, not JSON.  The extractors in
this module scan that text for simple patterns and silently skip anything
that does not match:

==============  =====================================================
Analysis type   Pattern
==============  =====================================================
objects         ``<name>: <integer>%`` on a line
text            every non-blank line, verbatim
colors          ``#RRGGBB`` codes, with an optional ``NN%`` after the
                code and an optional ``Name (`` before it
emotions        ``<emotion> ... <integer>%`` on the same line
comprehensive   all of the above combined, plus a ``Tags:`` line
==============  =====================================================

:func:`parse_analysis_result` never raises.  If an extractor fails the raw
text is returned as the description so the caller always gets something.
"""

from __future__ import annotations

import logging
import re

from .models import (
    AnalysisResult,
    ColorInfo,
    ComprehensiveAnalysis,
    DetectedObject,
    EmotionScore,
)

logger = logging.getLogger(__name__)

EMOTIONS: tuple[str, ...] = ("happy", "sad", "angry", "surprised", "fear", "disgust", "neutral")

_OBJECT_LINE = re.compile(r"(.+?):\s*(\d+)%")
_HEX_COLOR = re.compile(r"#[0-9A-Fa-f]{6}")
_PERCENTAGE = re.compile(r"(\d+(?:\.\d+)?)\s*%")
_COLOR_NAME = re.compile(r"([A-Za-z][A-Za-z ]*?)\s*\(\s*$")
_TAGS_LINE = re.compile(r"^[\s*_#-]*tags[\s*_]*:\s*(.+)$", re.IGNORECASE | re.MULTILINE)
_QUOTED = re.compile(r"[\"“]([^\"”\n]+)[\"”]")
_EMOTION_PATTERNS: dict[str, re.Pattern[str]] = {
    emotion: re.compile(rf"{emotion}.*?(\d+)%", re.IGNORECASE) for emotion in EMOTIONS
}


def parse_analysis_result(raw_text: str, analysis_type: str) -> AnalysisResult:
    """Convert a free-text analysis answer into an :class:`AnalysisResult`.

    Args:
        raw_text: Text returned by the model.
        analysis_type: Requested analysis type.  Unknown types are treated
            as ``"description"``.

    Returns:
        A result with the field group for ``analysis_type`` populated, or
        with ``description`` set to the raw text if extraction failed.
    """
    try:
        if analysis_type == "objects":
            return AnalysisResult(objects=parse_objects(raw_text))
        if analysis_type == "text":
            return AnalysisResult(text=parse_text(raw_text))
        if analysis_type == "colors":
            return AnalysisResult(colors=parse_colors(raw_text))
        if analysis_type == "emotions":
            return AnalysisResult(emotions=parse_emotions(raw_text))
        if analysis_type == "comprehensive":
            return AnalysisResult(comprehensive=parse_comprehensive(raw_text))
        return AnalysisResult(description=raw_text)
    except Exception as e:
        logger.warning(f"Structured extraction failed for '{analysis_type}', returning raw text: {e}")
        return AnalysisResult(description=raw_text if isinstance(raw_text, str) else str(raw_text))


def parse_objects(text: str) -> list[DetectedObject]:
    """Extract ``name: NN%`` lines as detected objects."""
    objects: list[DetectedObject] = []
    for line in text.splitlines():
        match = _OBJECT_LINE.search(line)
        if not match:
            continue
        # List markers are not part of the object name
        name = match.group(1).strip().lstrip("-*• ").strip()
        objects.append(DetectedObject(name=name, confidence=int(match.group(2)) / 100))
    return objects


def parse_text(text: str) -> list[str]:
    """Return the non-blank lines of the response."""
    return [line for line in text.splitlines() if line.strip()]


def parse_colors(text: str) -> list[ColorInfo]:
    """Extract hex color codes with optional name and percentage.

    The percentage is the first ``NN%`` between a code and the next code
    (or line end).  The name is the word(s) directly before ``(#RRGGBB``.
    Missing values default to ``"Unknown"`` and ``0``.
    """
    colors: list[ColorInfo] = []
    for line in text.splitlines():
        matches = list(_HEX_COLOR.finditer(line))
        for index, match in enumerate(matches):
            segment_end = matches[index + 1].start() if index + 1 < len(matches) else len(line)
            prefix_start = matches[index - 1].end() if index > 0 else 0

            percentage = 0.0
            pct_match = _PERCENTAGE.search(line, match.end(), segment_end)
            if pct_match:
                percentage = float(pct_match.group(1))

            name = "Unknown"
            name_match = _COLOR_NAME.search(line[prefix_start : match.start()])
            if name_match:
                name = name_match.group(1).strip()

            colors.append(ColorInfo(hex=match.group(0), name=name, percentage=percentage))
    return colors


def parse_emotions(text: str) -> list[EmotionScore]:
    """Score each known emotion mentioned with a percentage on the same line."""
    emotions: list[EmotionScore] = []
    for emotion, pattern in _EMOTION_PATTERNS.items():
        match = pattern.search(text)
        if match:
            emotions.append(EmotionScore(emotion=emotion, confidence=int(match.group(1)) / 100))
    return emotions


def parse_tags(text: str) -> list[str]:
    """Return the comma-separated entries of the first ``Tags:`` line."""
    match = _TAGS_LINE.search(text)
    if not match:
        return []
    tags = (tag.strip().strip("*_`").lstrip("#").strip() for tag in match.group(1).split(","))
    return [tag for tag in tags if tag]


def parse_comprehensive(text: str) -> ComprehensiveAnalysis:
    """Combine every extractor into the composite result.

    The whole response is kept as the description.  Text found in the image
    is taken from quoted strings, since a comprehensive answer is prose and
    its lines are not transcriptions.
    """
    return ComprehensiveAnalysis(
        description=text,
        objects=parse_objects(text),
        text=[quoted.strip() for quoted in _QUOTED.findall(text) if quoted.strip()],
        colors=parse_colors(text),
        emotions=parse_emotions(text),
        tags=parse_tags(text),
    )
