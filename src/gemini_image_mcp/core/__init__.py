"""Core gateway logic between a tool call and the remote Gemini call.

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - Frozen after startup

2. **Admission Layer** (rate_limiter.py):
   - Sliding one-minute window owned by each operations client

3. **Prompt and Parsing Layer** (prompt_builder.py, result_parser.py):
   - Structured options to instruction text
   - Free-text model answers to structured analysis results

4. **Operations Layer** (operations.py, backend.py):
   - Admission, dispatch and materialisation for the five operations
   - google-genai backend and response decoding

Usage Example
-------------
    from gemini_image_mcp.core import ImageOperationsClient, config
    from gemini_image_mcp.core.models import GenerationRequest

    client = ImageOperationsClient(config)
    images = await client.generate_image(GenerationRequest(prompt="a harbour at dawn"))
"""

from gemini_image_mcp.core.config import GatewayConfig, config
from gemini_image_mcp.core.exceptions import (
    ConfigurationError,
    GatewayError,
    OperationFailure,
    RateLimitExceeded,
    ToolArgumentError,
    UnknownTool,
)
from gemini_image_mcp.core.operations import ImageOperationsClient
from gemini_image_mcp.core.rate_limiter import RateLimiter

__all__ = [
    "ConfigurationError",
    "GatewayConfig",
    "GatewayError",
    "ImageOperationsClient",
    "OperationFailure",
    "RateLimitExceeded",
    "RateLimiter",
    "ToolArgumentError",
    "UnknownTool",
    "config",
]
