"""Gemini Image MCP server: entry point and HTTP transport.

This module defines the ``main()`` CLI function registered as the
``gemini-image-mcp`` console script, and a FastAPI ``app`` that serves the
same MCP protocol over HTTP.

Transports
----------
========  =====================================================================
stdio     Newline-delimited JSON-RPC on stdin/stdout (default; what desktop MCP
          clients launch).
http      ``POST /mcp`` accepts one JSON-RPC message and returns its response.
          ``GET /health`` reports liveness and the configured model.
========  =====================================================================

Startup
-------
The Gemini API key is checked before anything is served.  If
``GEMINI_API_KEY`` is missing the process prints a fatal message to stderr
and exits with status 1.

Usage
-----
CLI (installed entry point)::

    gemini-image-mcp                      # stdio
    gemini-image-mcp --transport http     # HTTP on SERVER_HOST:SERVER_PORT

Direct invocation::

    python -m gemini_image_mcp.api.main
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from gemini_image_mcp import __version__
from gemini_image_mcp.api.gateway import ToolGateway
from gemini_image_mcp.api.protocol import PARSE_ERROR, McpProtocolHandler, err
from gemini_image_mcp.api.stdio import run_stdio
from gemini_image_mcp.core.config import GatewayConfig, config
from gemini_image_mcp.core.exceptions import ConfigurationError
from gemini_image_mcp.core.operations import ImageOperationsClient

logger = logging.getLogger(__name__)


def build_handler(cfg: GatewayConfig) -> McpProtocolHandler:
    """Wire the operations client, gateway and protocol handler together.

    Raises:
        ConfigurationError: If the API key is missing.
    """
    client = ImageOperationsClient(cfg)
    logger.info(
        f"Using model {cfg.gemini_model} (safety={cfg.safety_level}, "
        f"max {cfg.max_requests_per_minute} requests/minute)"
    )
    return McpProtocolHandler(ToolGateway(client))


# ---------------------------------------------------------------------------
# HTTP transport.
# ---------------------------------------------------------------------------


def create_app(handler: McpProtocolHandler | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        handler: Protocol handler to serve.  When ``None`` the handler is
            built from the global configuration at startup.

    Returns:
        The FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "handler", None) is None:
            app.state.handler = build_handler(config)
        yield
        logger.info("HTTP transport shut down.")

    app = FastAPI(
        title="Gemini Image MCP",
        description="MCP tools for Gemini image generation and analysis.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.handler = handler

    @app.get("/health")
    async def health() -> dict:
        """Return liveness information."""
        return {"status": "ok", "version": __version__, "model": config.gemini_model}

    @app.post("/mcp")
    async def mcp(request: Request) -> Response:
        """Handle one JSON-RPC message.

        Notifications are acknowledged with ``202 Accepted`` and no body.
        """
        try:
            message = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JSONResponse(err(None, PARSE_ERROR, "Parse error"))

        response = await app.state.handler.handle_message(message)
        if response is None:
            return Response(status_code=202)
        return JSONResponse(response)

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="gemini-image-mcp",
        description="MCP server exposing Gemini image generation and analysis tools.",
    )
    parser.add_argument(
        "--transport",
        choices=("stdio", "http"),
        default="stdio",
        help="Protocol transport (default: stdio)",
    )
    parser.add_argument("--host", default=None, help="HTTP bind address")
    parser.add_argument("--port", type=int, default=None, help="HTTP port")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Validate configuration and run the selected transport.

    This function is registered as the ``gemini-image-mcp`` console script
    in ``pyproject.toml``.
    """
    args = _parse_args(argv)

    # stdout carries the stdio protocol, so all logging goes to stderr.
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        handler = build_handler(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.transport == "http":
        import uvicorn

        uvicorn.run(
            create_app(handler),
            host=args.host or config.server_host,
            port=args.port or config.server_port,
        )
        return

    try:
        asyncio.run(run_stdio(handler))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down.")


if __name__ == "__main__":
    main()
