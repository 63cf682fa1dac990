"""Configuration management for the Gemini Image MCP gateway.

This module provides centralized configuration management using Pydantic Settings.
Configuration is read once at startup from the process environment and an
optional ``.env`` file, and is immutable afterwards.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (no prefix, case-insensitive)
2. .env file in the working directory
3. Default values defined in GatewayConfig

Example .env file:
    GEMINI_API_KEY=your-api-key
    GEMINI_MODEL=gemini-2.5-flash-image-preview
    SAFETY_LEVEL=MEDIUM
    MAX_REQUESTS_PER_MINUTE=10

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
The API key is optional at import time so that the package can be imported
(and tested) without credentials; the server entry point calls
:meth:`GatewayConfig.require_api_key` before serving anything.

Usage Example
-------------
    from gemini_image_mcp.core.config import config

    api_key = config.require_api_key()
    print(config.gemini_model)

Safety Levels
-------------
The safety level selects one blocking threshold that is applied to every
harm category sent to Gemini:
- LOW: block only high-probability harmful content
- MEDIUM: block medium and above (default)
- HIGH: block low and above
- BLOCK_NONE: disable blocking
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

SafetyLevel = Literal["LOW", "MEDIUM", "HIGH", "BLOCK_NONE"]

DEFAULT_MODEL = "gemini-2.5-flash-image-preview"


class GatewayConfig(BaseSettings):
    """Main configuration for the Gemini Image MCP gateway.

    Attributes
    ----------
    Remote Service Settings:
        gemini_api_key : SecretStr | None
            Gemini API credential. Required to serve requests.
        gemini_model : str
            Gemini model identifier used for every call
        safety_level : Literal["LOW", "MEDIUM", "HIGH", "BLOCK_NONE"]
            Named safety threshold applied to all harm categories

    Rate Limiting:
        max_requests_per_minute : int
            Maximum admitted calls in any trailing 60 second window

    Server Settings:
        log_level : str
            Root log level for the CLI entry point
        server_host : str
            Bind address for the HTTP transport
        server_port : int
            Port for the HTTP transport (1024-65535)

    Notes
    -----
    - Configuration is frozen after initialization
    - To change values, set environment variables and restart the server
    - See .env.example for a complete list of configuration options

    Examples
    --------
        >>> custom_config = GatewayConfig(
        ...     gemini_api_key="test-key",
        ...     safety_level="HIGH",
        ...     max_requests_per_minute=5,
        ... )
        >>> custom_config.require_api_key()
        'test-key'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Remote service settings
    gemini_api_key: SecretStr | None = Field(
        default=None,
        description="Gemini API key (required to serve requests)",
    )
    gemini_model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier",
    )
    safety_level: SafetyLevel = Field(
        default="MEDIUM",
        description="Safety threshold level (LOW, MEDIUM, HIGH, BLOCK_NONE)",
    )

    # Rate limiting
    max_requests_per_minute: int = Field(
        default=10,
        description="Maximum calls admitted per rolling minute",
        ge=1,
    )

    # Server settings
    log_level: str = Field(
        default="INFO",
        description="Log level for the gemini-image-mcp entry point",
    )
    server_host: str = Field(
        default="127.0.0.1",
        description="Bind address for the HTTP transport",
    )
    server_port: int = Field(
        default=8765,
        description="Port for the HTTP transport",
        ge=1024,
        le=65535,
    )

    def require_api_key(self) -> str:
        """Return the API key or fail if it is not configured.

        Returns:
            The plain-text Gemini API key.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is unset or blank.
        """
        if self.gemini_api_key is None:
            raise ConfigurationError("GEMINI_API_KEY environment variable is required")
        value = self.gemini_api_key.get_secret_value().strip()
        if not value:
            raise ConfigurationError("GEMINI_API_KEY environment variable is required")
        return value


# Global configuration instance
# Loaded from environment variables and .env file when the module is imported.
config = GatewayConfig()
