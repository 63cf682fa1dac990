"""Exception hierarchy for the Gemini Image MCP gateway.

Every error raised below the tool gateway derives from :class:`GatewayError`.
The message of each exception is intended to be shown directly to the tool
caller, so it should read as a complete sentence fragment.
"""

import math


class GatewayError(Exception):
    """Base class for all gateway errors."""

    pass


class ConfigurationError(GatewayError):
    """Required configuration is missing or invalid.

    Raised at startup only; the server refuses to run without a credential.
    """

    pass


class RateLimitExceeded(GatewayError):
    """Admission was denied by the rate limiter.

    Attributes:
        retry_after_ms: Milliseconds until the oldest admission in the window
            expires and a new call can be admitted.
    """

    def __init__(self, retry_after_ms: int) -> None:
        self.retry_after_ms = retry_after_ms
        super().__init__(
            f"Rate limit exceeded. Please wait {self.retry_after_seconds} seconds."
        )

    @property
    def retry_after_seconds(self) -> int:
        """Retry delay rounded up to whole seconds."""
        return math.ceil(self.retry_after_ms / 1000)


class OperationFailure(GatewayError):
    """An image operation failed while building, dispatching or decoding.

    Attributes:
        operation: Human-readable operation label, e.g. ``"Image generation"``.
        reason: Message of the underlying cause.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class UnknownTool(GatewayError):
    """A tool call named a tool outside the static catalogue."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class ToolArgumentError(GatewayError):
    """Tool arguments did not match the declared schema."""

    pass
