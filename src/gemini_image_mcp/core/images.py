"""Helpers for the base64 image payloads exchanged with tool callers."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,", re.IGNORECASE)


def split_data_uri(payload: str) -> tuple[str, str]:
    """Separate an optional ``data:`` URI prefix from a base64 payload.

    Args:
        payload: Either bare base64 or ``data:<mime>;base64,<data>``.

    Returns:
        Tuple of ``(base64_data, mime_type)``.  Bare payloads are assumed to
        be PNG.
    """
    payload = payload.strip()
    match = _DATA_URI.match(payload)
    if not match:
        return payload, DEFAULT_MIME_TYPE
    return payload[match.end() :], match.group("mime") or DEFAULT_MIME_TYPE


def decode_image_payload(payload: str) -> tuple[bytes, str]:
    """Decode a caller-supplied image payload.

    Args:
        payload: Bare base64 or a ``data:`` URI.

    Returns:
        Tuple of ``(image_bytes, mime_type)``.

    Raises:
        ValueError: If the payload is empty or not valid base64.
    """
    data, mime_type = split_data_uri(payload)
    # Line-wrapped base64 is common in pasted payloads
    data = "".join(data.split())
    if not data:
        raise ValueError("Image payload is empty")
    try:
        return base64.b64decode(data, validate=True), mime_type
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e


def image_dimensions(image_bytes: bytes) -> tuple[int, int] | None:
    """Read ``(width, height)`` from encoded image bytes, or ``None``."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image dimensions: {e}")
        return None
