"""JSON-RPC 2.0 message handling for the MCP tool protocol.

Both transports (stdio and HTTP) feed decoded messages into
:class:`McpProtocolHandler`, which answers the handful of MCP methods the
server needs:

===========================  ===============================================
Method                       Response
===========================  ===============================================
``initialize``               Server info and the negotiated protocol version
``notifications/initialized``  None (notification)
``ping``                     Empty result
``tools/list``               The static tool catalogue
``tools/call``               The tool's content envelope
===========================  ===============================================

Tool failures are never JSON-RPC errors: they come back as a normal result
whose envelope has ``isError`` set.  JSON-RPC errors are reserved for
malformed messages, unknown methods and invalid params.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from gemini_image_mcp import __version__
from gemini_image_mcp.api.gateway import ToolGateway

logger = logging.getLogger(__name__)

SERVER_NAME = "gemini-image-mcp"
SUPPORTED_PROTOCOL_VERSIONS: tuple[str, ...] = ("2024-11-05", "2025-03-26", "2025-06-18")
DEFAULT_PROTOCOL_VERSION = "2024-11-05"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


def ok(request_id: Any, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def err(request_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}


class McpProtocolHandler:
    """Maps JSON-RPC requests onto a :class:`ToolGateway`."""

    def __init__(self, gateway: ToolGateway) -> None:
        self.gateway = gateway

    async def handle_line(self, line: str) -> dict[str, Any] | None:
        """Decode one JSON text message and handle it.

        Returns:
            The response object, or ``None`` for notifications.
        """
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            return err(None, PARSE_ERROR, "Parse error")
        return await self.handle_message(message)

    async def handle_message(self, message: Any) -> dict[str, Any] | None:
        """Handle one decoded JSON-RPC message.

        Returns:
            The response object, or ``None`` when the message is a
            notification (has no ``id``).
        """
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            return err(None, INVALID_REQUEST, "Invalid Request")

        request_id = message.get("id")
        method = message["method"]
        params = message.get("params") or {}
        is_notification = "id" not in message
        if not isinstance(params, dict):
            return err(request_id, INVALID_PARAMS, "params must be an object")

        if method == "initialize":
            client_version = params.get("protocolVersion", DEFAULT_PROTOCOL_VERSION)
            agreed = (
                client_version
                if client_version in SUPPORTED_PROTOCOL_VERSIONS
                else DEFAULT_PROTOCOL_VERSION
            )
            logger.info(f"Client initialized (protocol {agreed})")
            return ok(
                request_id,
                {
                    "protocolVersion": agreed,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": SERVER_NAME, "version": __version__},
                },
            )

        if method.startswith("notifications/"):
            return None

        if method == "ping":
            return ok(request_id, {})

        if method == "tools/list":
            return ok(request_id, {"tools": self.gateway.list_tools()})

        if method == "tools/call":
            name = params.get("name")
            if not isinstance(name, str) or not name:
                return err(request_id, INVALID_PARAMS, "tools/call requires a tool name")
            envelope = await self.gateway.call_tool(name, params.get("arguments"))
            return ok(request_id, envelope)

        if is_notification:
            return None
        return err(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")
