"""
Browser lifecycle handlers - launch, close, viewport, cookies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ChromeConfig
    from ...session_manager import SessionController


def handle_launch(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.launch_browser(
        session,
        headless=args.get("headless"),
        width=args.get("width"),
        height=args.get("height"),
    )
    return ToolResult.json(result)


def handle_close(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.close_browser(session))


def handle_set_viewport(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.set_viewport(
        session,
        width=args["width"],
        height=args["height"],
        device_scale_factor=args["device_scale_factor"],
    )
    return ToolResult.json(result)


def handle_get_cookies(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.get_cookies(session, urls=args.get("urls")))


def handle_set_cookie(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.set_cookie(session, **args))


# chrome_launch and chrome_close manage the browser themselves.
BROWSER_HANDLERS: dict[str, tuple] = {
    "chrome_launch": (handle_launch, False),
    "chrome_close": (handle_close, False),
    "chrome_set_viewport": (handle_set_viewport, True),
    "chrome_get_cookies": (handle_get_cookies, True),
    "chrome_set_cookie": (handle_set_cookie, True),
}
