"""Shared pytest fixtures for gemini_image_mcp tests."""

import base64
import io
from types import SimpleNamespace
from typing import Any, Callable

import pytest
from PIL import Image

from gemini_image_mcp.api.gateway import ToolGateway
from gemini_image_mcp.core.backend import ContentPart, RemoteBackend
from gemini_image_mcp.core.config import GatewayConfig
from gemini_image_mcp.core.operations import ImageOperationsClient
from gemini_image_mcp.core.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced millisecond clock for the rate limiter."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeBackend(RemoteBackend):
    """Remote backend that records calls and replays canned responses.

    Each queued item is returned once, in order; an exception instance is
    raised instead of returned.  When the queue is empty ``default`` is used.
    """

    def __init__(self, default: Any = None, model: str = "test-model") -> None:
        self.model = model
        self.default = default
        self.queue: list[Any] = []
        self.calls: list[dict[str, Any]] = []

    async def generate_content(
        self,
        parts: list[ContentPart],
        *,
        candidate_count: int | None = None,
        seed: int | None = None,
        response_modalities: tuple[str, ...] | None = None,
    ) -> Any:
        self.calls.append(
            {
                "parts": parts,
                "candidate_count": candidate_count,
                "seed": seed,
                "response_modalities": response_modalities,
            }
        )
        response = self.queue.pop(0) if self.queue else self.default
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def prompts(self) -> list[str]:
        """Text of the first part of every recorded call."""
        return [call["parts"][0].text for call in self.calls]


def make_png(width: int = 8, height: int = 4, color: tuple[int, int, int] = (255, 0, 0)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_image_response(*images: bytes, mime_type: str = "image/png", text: str | None = None):
    """Build a Gemini-shaped response with inline image parts."""
    parts = []
    if text:
        parts.append(SimpleNamespace(text=text, inline_data=None))
    for data in images:
        parts.append(
            SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))
        )
    return SimpleNamespace(
        prompt_feedback=None,
        candidates=[SimpleNamespace(finish_reason="STOP", content=SimpleNamespace(parts=parts))],
    )


def make_text_response(text: str):
    """Build a Gemini-shaped response with a single text part."""
    return SimpleNamespace(
        prompt_feedback=None,
        candidates=[
            SimpleNamespace(
                finish_reason="STOP",
                content=SimpleNamespace(parts=[SimpleNamespace(text=text, inline_data=None)]),
            )
        ],
    )


@pytest.fixture
def test_config(monkeypatch) -> GatewayConfig:
    """Create a configuration independent of the developer's environment.

    Returns:
        GatewayConfig with a dummy key and default limits
    """
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "SAFETY_LEVEL", "MAX_REQUESTS_PER_MINUTE"):
        monkeypatch.delenv(name, raising=False)
    return GatewayConfig(
        _env_file=None,
        gemini_api_key="test-key",
        gemini_model="test-model",
        max_requests_per_minute=10,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def png_bytes() -> bytes:
    """An 8x4 red PNG."""
    return make_png()


@pytest.fixture
def png_base64(png_bytes: bytes) -> str:
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def image_response() -> Callable[..., Any]:
    """Factory for Gemini-shaped image responses."""
    return make_image_response


@pytest.fixture
def text_response() -> Callable[[str], Any]:
    """Factory for Gemini-shaped text responses."""
    return make_text_response


@pytest.fixture
def fake_backend(png_bytes: bytes) -> FakeBackend:
    """Backend that returns one PNG for every call unless told otherwise."""
    return FakeBackend(default=make_image_response(png_bytes))


@pytest.fixture
def client(test_config: GatewayConfig, fake_backend: FakeBackend, fake_clock: FakeClock):
    """Operations client wired to the fake backend and clock."""
    limiter = RateLimiter(test_config.max_requests_per_minute, clock=fake_clock)
    return ImageOperationsClient(test_config, backend=fake_backend, rate_limiter=limiter)


@pytest.fixture
def gateway(client: ImageOperationsClient) -> ToolGateway:
    return ToolGateway(client)
