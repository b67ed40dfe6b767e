"""
Type definitions for MCP server responses and handlers.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..config import ChromeConfig
    from ..session_manager import SessionController


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str  # "text" or "image"
    text: str | None = None
    data: str | None = None  # base64 for images
    mime_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP content format."""
        if self.type == "image":
            return {"type": "image", "data": self.data, "mimeType": self.mime_type}
        return {"type": "text", "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False
    # Raw payload for tests and logging; not part of the MCP wire format.
    data: Any | None = None

    @classmethod
    def json(cls, data: dict[str, Any]) -> ToolResult:
        """Create a success result: `data` rendered as indented JSON with success=true."""
        payload = {"success": True, **data}
        return cls(content=[ToolContent(type="text", text=_json.dumps(payload, indent=2, default=str))], data=payload)

    @classmethod
    def error(
        cls,
        message: str,
        *,
        kind: str = "error",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        trace: str | None = None,
    ) -> ToolResult:
        """Create a failure result with success=false."""
        payload: dict[str, Any] = {"success": False, "error": message, "type": kind}
        if suggestion:
            payload["suggestion"] = suggestion
        if details:
            payload["details"] = details
        if trace:
            payload["trace"] = trace
        text = _json.dumps(payload, indent=2, default=str)
        return cls(content=[ToolContent(type="text", text=text)], is_error=True, data=payload)

    @classmethod
    def with_image(cls, text: str, data_b64: str, mime_type: str = "image/png", data: Any | None = None) -> ToolResult:
        """Create result with image content followed by a text summary."""
        if not data_b64:
            return cls.error("Screenshot data is empty", kind="cdp")
        return cls(
            content=[
                ToolContent(type="image", data=data_b64, mime_type=mime_type),
                ToolContent(type="text", text=text),
            ],
            data=data,
        )

    def to_content_list(self) -> list[dict[str, Any]]:
        """Convert to MCP content list format."""
        return [c.to_dict() for c in self.content]


class ToolHandler(Protocol):
    """Protocol for tool handler functions."""

    def __call__(
        self,
        config: ChromeConfig,
        session: SessionController,
        arguments: dict[str, Any],
    ) -> ToolResult: ...
