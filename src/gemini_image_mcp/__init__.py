"""Gemini Image MCP - image generation and analysis tools backed by Google Gemini."""

__version__ = "1.0.0"

__all__ = ["__version__"]
