"""
MCP server exposing one Chrome browser over the Chrome DevTools Protocol.

This module provides the main entry point and protocol handling.
Tool dispatch is handled via registry pattern in server/registry.py.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from typing import Any

from .config import ChromeConfig
from .errors import ChromeControlError
from .server.contract import (
    DEFAULT_PROTOCOL_VERSION,
    LATEST_PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    initialize_result,
    select_protocol,
    tools_list,
)
from .server.redaction import redact_jsonrpc_for_dump, redact_tool_arguments
from .server.registry import create_default_registry
from .server.types import ToolResult
from .session_manager import SessionController

logger = logging.getLogger("mcp.chrome")

__all__ = [
    "SUPPORTED_PROTOCOL_VERSIONS",
    "LATEST_PROTOCOL_VERSION",
    "DEFAULT_PROTOCOL_VERSION",
    "McpServer",
    "main",
]


def _dump_frame(direction: bytes, payload: dict[str, Any]) -> None:
    dump_path = os.environ.get("MCP_DUMP_FRAMES")
    if not dump_path:
        return
    if dump_dir := os.path.dirname(dump_path):
        os.makedirs(dump_dir, exist_ok=True)
    with open(dump_path, "ab") as fp:
        fp.write(direction)
        safe = redact_jsonrpc_for_dump(payload)
        fp.write((json.dumps(safe, ensure_ascii=False) + "\n").encode())


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    data = json.dumps(payload, ensure_ascii=False)
    _dump_frame(b"--out--\n", payload)
    sys.stdout.buffer.write((data + "\n").encode())
    sys.stdout.buffer.flush()


def _read_message() -> dict[str, Any] | None:
    """Read JSON-RPC message from stdin.

    Returns None for blank lines; raises EOFError at end of input and
    ValueError for lines that are not a JSON object.
    """
    line = sys.stdin.buffer.readline()
    if not line:
        raise EOFError
    line = line.strip()
    if not line:
        return None
    msg = json.loads(line.decode())
    if not isinstance(msg, dict):
        raise ValueError("JSON-RPC message must be an object")
    _dump_frame(b"--in--\n", msg)
    return msg


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(self, config: ChromeConfig | None = None, session: SessionController | None = None) -> None:
        self.config = config or ChromeConfig.from_env()
        self.session = session or SessionController(self.config)
        self.registry = create_default_registry()

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        """Handle initialize request."""
        requested = (params or {}).get("protocolVersion") if isinstance(params, dict) else None
        protocol = select_protocol(requested)
        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": initialize_result(protocol),
            }
        )

    def handle_list_tools(self, request_id: Any) -> None:
        """Handle tools/list request."""
        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"tools": tools_list()},
            }
        )

    def _log_call(self, name: str, arguments: dict[str, Any]) -> None:
        """Log tool call with sanitized arguments."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))

    def _failure(self, message: str, kind: str, exc: BaseException | None = None, **extra: Any) -> ToolResult:
        trace = None
        if exc is not None and self.config.error_trace:
            trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return ToolResult.error(message, kind=kind, trace=trace, **extra)

    def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolResult:
        """Run one tool call; failures become error results instead of exceptions."""
        self._log_call(name, arguments if isinstance(arguments, dict) else {})
        try:
            if not name:
                return self._failure("Missing tool name", "validation")
            if not self.registry.has(name):
                return self._failure(f"Unknown tool: {name}", "unknown_tool")
            return self.registry.dispatch(name, self.config, self.session, arguments)
        except ChromeControlError as e:
            logger.info("tool_error tool=%s type=%s error=%s", name, e.kind, e.message)
            return self._failure(e.message, e.kind, e, suggestion=e.suggestion, details=e.details)
        except Exception as exc:
            logger.exception("tool_call_failed tool=%s", name)
            return self._failure(str(exc) or type(exc).__name__, "internal", exc)

    def handle_call_tool(self, request_id: Any, name: str, arguments: dict[str, Any] | None) -> None:
        """Handle tool call via registry dispatch."""
        result = self.call_tool(name, arguments)
        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": result.to_content_list(), "isError": result.is_error},
            }
        )

    def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        if not message:
            return

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params") or {}

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "notifications/initialized" or (isinstance(method, str) and method.startswith("notifications/")):
            return
        elif method == "tools/list":
            self.handle_list_tools(request_id)
        elif method == "tools/call":
            self.handle_call_tool(request_id, params.get("name") or "", params.get("arguments"))
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        elif request_id is not None:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method {method} not found"},
                }
            )

    def shutdown(self) -> None:
        self.session.close_session()


def main() -> None:
    """Main entry point for MCP server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    server = McpServer()
    logger.info("chrome-control MCP server running on stdio")
    try:
        while True:
            try:
                message = _read_message()
            except EOFError:
                break
            except ValueError as exc:
                _write_message({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": f"Parse error: {exc}"}})
                continue
            if message is not None:
                server.dispatch(message)
    finally:
        server.shutdown()


if __name__ == "__main__":
    main()
