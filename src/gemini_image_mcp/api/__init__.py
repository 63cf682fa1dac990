"""Gemini Image MCP: protocol layer.

This package exposes the image operations as MCP tools.

Modules
-------
gateway
    Static tool catalogue, argument validation and response envelopes.
protocol
    JSON-RPC 2.0 handling for ``initialize``, ``tools/list`` and
    ``tools/call``.
stdio
    Newline-delimited JSON transport over stdin/stdout.
main
    FastAPI HTTP transport and the ``main()`` CLI entry point.
"""
