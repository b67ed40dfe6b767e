"""
Error taxonomy for the chrome-control MCP server.

Every error raised by the session controller, the page primitives or the
tools derives from ChromeControlError. The server converts them into
structured failure payloads at the tool boundary.
"""

from __future__ import annotations

from typing import Any


class ChromeControlError(Exception):
    """Base error with an optional hint for the calling agent."""

    kind = "error"

    def __init__(self, message: str, *, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}


class CdpError(ChromeControlError):
    """Transport-level CDP failure (socket closed, protocol error, no response)."""

    kind = "cdp"


class LaunchError(ChromeControlError):
    """No usable browser executable, or the launch itself failed."""

    kind = "launch"


class ElementNotFoundError(ChromeControlError):
    """A selector matched nothing where an element was required."""

    kind = "element_not_found"

    def __init__(self, selector: str, **kwargs: Any):
        kwargs.setdefault("suggestion", "Check the selector or wait for the element first")
        super().__init__(f"Element not found: {selector}", **kwargs)
        self.selector = selector


class WaitTimeoutError(ChromeControlError, TimeoutError):
    """A waited-for condition did not happen within its timeout."""

    kind = "timeout"


class NavigationError(ChromeControlError):
    """The browser reported a failed navigation."""

    kind = "navigation"


class ScriptError(ChromeControlError):
    """Injected script evaluation threw."""

    kind = "script"


class ValidationError(ChromeControlError):
    """Tool arguments failed their schema constraints."""

    kind = "validation"


__all__ = [
    "CdpError",
    "ChromeControlError",
    "ElementNotFoundError",
    "LaunchError",
    "NavigationError",
    "ScriptError",
    "ValidationError",
    "WaitTimeoutError",
]
