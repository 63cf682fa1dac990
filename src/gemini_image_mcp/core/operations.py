"""Image operations client: admission, dispatch and materialisation.

:class:`ImageOperationsClient` implements the five operations exposed as
tools.  Each runs the same three phases:

1. **Admission**: the client's :class:`RateLimiter` admits the call or
   raises :class:`RateLimitExceeded` before anything else happens.
2. **Dispatch**: the prompt is built and sent to the remote backend
   together with any source image.
3. **Materialisation**: image responses become :class:`GeneratedImage`
   records; analysis responses go through the result parser.

Any failure in phases 2 and 3 is logged and re-raised as an
:class:`OperationFailure` naming the operation, e.g.
``"Image generation failed: Model response contained no image data"``.
Nothing is retried.

Usage
-----
::

    from gemini_image_mcp.core.config import config
    from gemini_image_mcp.core.operations import ImageOperationsClient

    client = ImageOperationsClient(config)
    images = await client.generate_image(GenerationRequest(prompt="a red fox"))
"""

from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone
from typing import Any

from .backend import (
    IMAGE_MODALITIES,
    ContentPart,
    GeminiBackend,
    RemoteBackend,
    extract_images,
    extract_text,
)
from .config import GatewayConfig
from .exceptions import OperationFailure
from .images import decode_image_payload, image_dimensions
from .models import (
    AnalysisRequest,
    AnalysisResult,
    BatchRequest,
    GeneratedImage,
    GenerationRequest,
    ModificationRequest,
    StyleTransferRequest,
)
from .prompt_builder import (
    build_analysis_prompt,
    build_generation_prompt,
    build_modification_prompt,
    build_style_transfer_prompt,
)
from .rate_limiter import RateLimiter
from .result_parser import parse_analysis_result

logger = logging.getLogger(__name__)


class ImageOperationsClient:
    """Runs image operations against the remote model for one server.

    The client owns its rate limiter; every operation (and every item of a
    batch) passes through the same admission window.

    Attributes:
        rate_limiter (RateLimiter): Admission window for this client.
    """

    def __init__(
        self,
        config: GatewayConfig,
        backend: RemoteBackend | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialise the client.

        Args:
            config: Gateway configuration.
            backend: Remote backend.  Defaults to a :class:`GeminiBackend`
                built from ``config``, which requires an API key.
            rate_limiter: Admission window.  Defaults to a new limiter
                sized by ``config.max_requests_per_minute``.

        Raises:
            ConfigurationError: If no backend is given and the API key is
                missing.
        """
        self._config = config
        self._backend = backend or GeminiBackend(
            api_key=config.require_api_key(),
            model=config.gemini_model,
            safety_level=config.safety_level,
        )
        self.rate_limiter = rate_limiter or RateLimiter(config.max_requests_per_minute)

    @property
    def model(self) -> str:
        return self._config.gemini_model

    # -- Operations ---------------------------------------------------------

    async def generate_image(self, request: GenerationRequest) -> list[GeneratedImage]:
        """Generate images from a text prompt.

        Args:
            request: Validated generation request.

        Returns:
            Generated images, in the order the model returned them.

        Raises:
            RateLimitExceeded: If the call was not admitted.
            OperationFailure: If the call or decoding failed.
        """
        self.rate_limiter.admit()

        try:
            prompt = build_generation_prompt(request)
            response = await self._backend.generate_content(
                [ContentPart.from_text(prompt)],
                candidate_count=request.number_of_images if request.number_of_images > 1 else None,
                seed=request.seed,
                response_modalities=IMAGE_MODALITIES,
            )
            images = self._materialize(
                response,
                prompt=request.prompt,
                compiled_prompt=prompt,
                seed=request.seed,
            )
        except Exception as e:
            raise self._failure("Image generation", e) from e

        logger.info(f"Generated {len(images)} image(s) for prompt: {request.prompt[:60]!r}")
        return images

    async def modify_image(self, request: ModificationRequest) -> GeneratedImage:
        """Modify an existing image according to text instructions.

        Returns:
            The first image returned by the model.

        Raises:
            RateLimitExceeded: If the call was not admitted.
            OperationFailure: If the call or decoding failed.
        """
        self.rate_limiter.admit()

        try:
            prompt = build_modification_prompt(request.instructions, request.preserve_style)
            response = await self._backend.generate_content(
                [ContentPart.from_text(prompt), self._image_part(request.image_base64)],
                response_modalities=IMAGE_MODALITIES,
            )
            images = self._materialize(
                response,
                prompt=request.instructions,
                compiled_prompt=prompt,
            )
        except Exception as e:
            raise self._failure("Image modification", e) from e

        logger.info(f"Modified image with instructions: {request.instructions[:60]!r}")
        return images[0]

    async def analyze_image(self, request: AnalysisRequest) -> AnalysisResult:
        """Analyze an image and parse the model's answer.

        Raises:
            RateLimitExceeded: If the call was not admitted.
            OperationFailure: If the call failed or was blocked.
        """
        self.rate_limiter.admit()

        try:
            prompt = build_analysis_prompt(request)
            response = await self._backend.generate_content(
                [ContentPart.from_text(prompt), self._image_part(request.image_base64)],
            )
            text = extract_text(response)
        except Exception as e:
            raise self._failure("Image analysis", e) from e

        return parse_analysis_result(text, request.analysis_type)

    async def generate_batch(self, request: BatchRequest) -> list[GeneratedImage]:
        """Generate images for several prompts, one after another.

        Each prompt goes through :meth:`generate_image` with its own
        admission check.  The first failure (including a rate-limit
        rejection) aborts the remaining prompts and propagates.

        Returns:
            All generated images, grouped in prompt order.
        """
        results: list[GeneratedImage] = []
        for index, prompt in enumerate(request.prompts):
            logger.debug(f"Batch item {index + 1}/{len(request.prompts)}")
            item = GenerationRequest.from_options(prompt, request.base_options)
            results.extend(await self.generate_image(item))
        return results

    async def apply_style_transfer(self, request: StyleTransferRequest) -> GeneratedImage:
        """Restyle an image; a modification that never preserves the old style."""
        instructions = build_style_transfer_prompt(request.style, request.intensity)
        return await self.modify_image(
            ModificationRequest(
                image_base64=request.image_base64,
                instructions=instructions,
                preserve_style=False,
            )
        )

    # -- Helpers ------------------------------------------------------------

    def _materialize(self, response: Any, *, prompt: str, **extra: Any) -> list[GeneratedImage]:
        timestamp = datetime.now(timezone.utc).isoformat()
        images: list[GeneratedImage] = []
        for inline in extract_images(response):
            size = image_dimensions(inline.data)
            metadata = {"prompt": prompt, "model": self.model, "timestamp": timestamp}
            metadata.update({key: value for key, value in extra.items() if value is not None})
            images.append(
                GeneratedImage(
                    base64=base64.b64encode(inline.data).decode("ascii"),
                    mime_type=inline.mime_type,
                    width=size[0] if size else None,
                    height=size[1] if size else None,
                    metadata=metadata,
                )
            )
        return images

    @staticmethod
    def _image_part(image_base64: str) -> ContentPart:
        data, mime_type = decode_image_payload(image_base64)
        return ContentPart.from_image(data, mime_type)

    @staticmethod
    def _failure(operation: str, error: Exception) -> OperationFailure:
        reason = str(error) or type(error).__name__
        logger.error(f"{operation} failed: {reason}", exc_info=True)
        return OperationFailure(operation, reason)
