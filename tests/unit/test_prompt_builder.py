"""Tests for gemini_image_mcp.core.prompt_builder: prompt synthesis.

Tests cover:
- Style, aspect ratio and quality clauses in generation prompts.
- The default "realistic" style adding nothing.
- Determinism of the generation prompt.
- Canned analysis prompts per analysis type.
- Modification and style transfer instructions.
"""

from __future__ import annotations

import pytest

from gemini_image_mcp.core.models import AnalysisRequest, GenerationRequest
from gemini_image_mcp.core.prompt_builder import (
    build_analysis_prompt,
    build_generation_prompt,
    build_modification_prompt,
    build_style_transfer_prompt,
)


class TestGenerationPrompt:
    """Test build_generation_prompt clause rules."""

    def test_bare_prompt_unchanged(self):
        """Without options the prompt is returned as-is."""
        assert build_generation_prompt(GenerationRequest(prompt="a red fox")) == "a red fox"

    def test_default_style_adds_no_clause(self):
        """The default 'realistic' style should not be mentioned."""
        request = GenerationRequest(prompt="a red fox", style="realistic")
        assert build_generation_prompt(request) == "a red fox"

    def test_non_default_style_clause(self):
        """Other styles append ' in <style> style'."""
        request = GenerationRequest(prompt="a red fox", style="watercolor")
        assert build_generation_prompt(request) == "a red fox in watercolor style"

    def test_aspect_ratio_clause(self):
        request = GenerationRequest(prompt="a red fox", aspectRatio="16:9")
        assert build_generation_prompt(request) == "a red fox with 16:9 aspect ratio"

    def test_high_quality_clause(self):
        request = GenerationRequest(prompt="a red fox", quality="high")
        assert build_generation_prompt(request) == "a red fox, high quality, detailed"

    def test_ultra_quality_suffix(self):
        """Ultra quality ends with the masterpiece clause."""
        request = GenerationRequest(prompt="a red fox", quality="ultra")
        assert build_generation_prompt(request).endswith(
            "ultra high quality, extremely detailed, masterpiece"
        )

    def test_standard_quality_adds_nothing(self):
        request = GenerationRequest(prompt="a red fox", quality="standard")
        assert build_generation_prompt(request) == "a red fox"

    def test_clause_order(self):
        """Clauses are appended as style, aspect ratio, quality."""
        request = GenerationRequest(
            prompt="a castle", style="oil-painting", aspectRatio="4:3", quality="high"
        )
        assert build_generation_prompt(request) == (
            "a castle in oil-painting style with 4:3 aspect ratio, high quality, detailed"
        )

    def test_generation_parameters_not_in_prompt(self):
        """Seed, size and image count are call parameters, not prompt text."""
        request = GenerationRequest(prompt="a castle", seed=42, width=512, numberOfImages=2)
        assert build_generation_prompt(request) == "a castle"

    def test_deterministic(self):
        """Identical input yields an identical prompt."""
        request = GenerationRequest(prompt="a castle", style="sketch", quality="ultra")
        assert build_generation_prompt(request) == build_generation_prompt(request)
        assert build_generation_prompt(request) == build_generation_prompt(
            GenerationRequest(prompt="a castle", style="sketch", quality="ultra")
        )


class TestAnalysisPrompt:
    """Test build_analysis_prompt lookup."""

    @pytest.mark.parametrize("detail", ["low", "medium", "high"])
    def test_description_uses_detail(self, detail):
        request = AnalysisRequest(imageBase64="abc", detail=detail)
        assert build_analysis_prompt(request) == f"Provide a {detail} detail description of this image."

    def test_default_is_medium_description(self):
        request = AnalysisRequest(imageBase64="abc")
        assert build_analysis_prompt(request) == "Provide a medium detail description of this image."

    @pytest.mark.parametrize(
        "analysis_type,expected_fragment",
        [
            ("objects", "confidence scores"),
            ("text", "transcribe any text"),
            ("colors", "hex values"),
            ("emotions", "emotional content"),
            ("comprehensive", "relevant tags"),
        ],
    )
    def test_fixed_prompts_ignore_detail(self, analysis_type, expected_fragment):
        """Non-description types use one sentence regardless of detail."""
        low = build_analysis_prompt(
            AnalysisRequest(imageBase64="abc", analysisType=analysis_type, detail="low")
        )
        high = build_analysis_prompt(
            AnalysisRequest(imageBase64="abc", analysisType=analysis_type, detail="high")
        )
        assert low == high
        assert expected_fragment in low


class TestModificationPrompt:
    """Test build_modification_prompt."""

    def test_instructions_wrapped(self):
        assert build_modification_prompt("make the sky purple") == (
            "Modify this image according to the following instructions: make the sky purple"
        )

    def test_preserve_style_clause(self):
        prompt = build_modification_prompt("make the sky purple", preserve_style=True)
        assert prompt.endswith(" Please preserve the original artistic style and composition.")


class TestStyleTransferPrompt:
    """Test build_style_transfer_prompt."""

    def test_style_only(self):
        assert build_style_transfer_prompt("anime") == "Apply anime style to this image."

    def test_intensity_clause(self):
        prompt = build_style_transfer_prompt("cyberpunk", 80)
        assert "cyberpunk" in prompt
        assert "80%" in prompt
        assert prompt == (
            "Apply cyberpunk style to this image. Use 80% intensity for the style transfer."
        )

    def test_fractional_intensity(self):
        assert "12.5%" in build_style_transfer_prompt("vintage", 12.5)

    def test_zero_intensity_omitted(self):
        assert build_style_transfer_prompt("vintage", 0) == "Apply vintage style to this image."
