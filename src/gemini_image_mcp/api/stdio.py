"""Newline-delimited JSON-RPC transport over stdin/stdout.

One JSON object per line in each direction.  Messages are handled strictly
one at a time on the event loop, which keeps rate-limiter admission
sequential.  Logging must go to stderr: stdout belongs to the protocol.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, TextIO

from gemini_image_mcp.api.protocol import McpProtocolHandler

logger = logging.getLogger(__name__)

# Image payloads travel inline as base64, so lines can be large.
MAX_LINE_BYTES = 64 * 1024 * 1024


def _write(stream: TextIO, obj: dict[str, Any]) -> None:
    stream.write(json.dumps(obj) + "\n")
    stream.flush()


async def serve_stream(
    handler: McpProtocolHandler,
    reader: asyncio.StreamReader,
    output: TextIO,
) -> None:
    """Serve requests from ``reader`` until end of input.

    Args:
        handler: Protocol handler answering each message.
        reader: Source of newline-delimited JSON messages.
        output: Text stream the responses are written to.
    """
    while True:
        try:
            line_bytes = await reader.readline()
        except ValueError as e:
            logger.error(f"Dropping connection, message exceeds {MAX_LINE_BYTES} bytes: {e}")
            break
        if not line_bytes:
            break
        line = line_bytes.decode(errors="replace").strip()
        if not line:
            continue
        response = await handler.handle_line(line)
        if response is not None:
            _write(output, response)
    logger.info("Input closed, stopping stdio server")


async def run_stdio(handler: McpProtocolHandler) -> None:
    """Connect to the process's stdin/stdout and serve until stdin closes."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    logger.info("Gemini Image MCP server running on stdio")
    await serve_stream(handler, reader, sys.stdout)
