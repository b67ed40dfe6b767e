"""
Tool registry with dispatch table for MCP server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .definitions import TOOLS_BY_NAME
from .types import ToolHandler, ToolResult
from .validation import validate_arguments

if TYPE_CHECKING:
    from ..config import ChromeConfig
    from ..session_manager import SessionController

logger = logging.getLogger("mcp.chrome.registry")

# Type alias for handler function
HandlerFunc = ToolHandler


class ToolRegistry:
    """Registry for tool handlers with argument validation and session set-up."""

    def __init__(self, definitions: dict[str, dict[str, Any]] | None = None) -> None:
        # name -> (handler, requires_browser)
        self._handlers: dict[str, tuple[HandlerFunc, bool]] = {}
        self._definitions = TOOLS_BY_NAME if definitions is None else definitions

    def register(
        self,
        name: str,
        handler: HandlerFunc,
        requires_browser: bool = True,
    ) -> None:
        """Register a tool handler."""
        self._handlers[name] = (handler, requires_browser)

    def register_many(self, handlers: dict[str, tuple[HandlerFunc, bool]]) -> None:
        """Register multiple handlers at once."""
        self._handlers.update(handlers)

    def get(self, name: str) -> tuple[HandlerFunc, bool] | None:
        """Get handler and its browser requirement."""
        return self._handlers.get(name)

    def has(self, name: str) -> bool:
        """Check if handler exists."""
        return name in self._handlers

    def dispatch(
        self,
        name: str,
        config: ChromeConfig,
        session: SessionController,
        arguments: dict[str, Any] | None,
    ) -> ToolResult:
        """
        Dispatch tool call to appropriate handler.

        Args:
            name: Tool name
            config: Server configuration
            session: Session controller
            arguments: Raw tool arguments

        Returns:
            ToolResult from handler

        Raises:
            KeyError: If tool not found
            ValidationError: If arguments violate the tool schema
        """
        handler_info = self._handlers.get(name)
        if handler_info is None:
            raise KeyError(f"Unknown tool: {name}")

        handler, requires_browser = handler_info
        definition = self._definitions.get(name)
        args = validate_arguments(definition, arguments) if definition else dict(arguments or {})

        # Launch or heal the session before handlers touch the page.
        if requires_browser:
            session.ensure_session()

        return handler(config, session, args)

    @property
    def tool_names(self) -> list[str]:
        """Get list of registered tool names."""
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry() -> ToolRegistry:
    """Create registry with all chrome_* handlers."""
    from .handlers import ALL_HANDLERS

    registry = ToolRegistry()
    registry.register_many(ALL_HANDLERS)
    logger.info("Registered %d tool handlers", len(registry))
    return registry
