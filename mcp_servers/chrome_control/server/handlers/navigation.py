"""
Navigation tool handlers - page navigation and history.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ChromeConfig
    from ...session_manager import SessionController


def handle_navigate(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.navigate_to(session, url=args["url"], wait_until=args["wait_until"]))


def handle_go_back(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.go_back(session, wait_until=args["wait_until"]))


def handle_go_forward(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.go_forward(session, wait_until=args["wait_until"]))


def handle_reload(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.reload_page(session, wait_until=args["wait_until"]))


def handle_wait_for_navigation(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.wait_for_navigation(session, wait_until=args["wait_until"], timeout_ms=args["timeout"])
    return ToolResult.json(result)


NAVIGATION_HANDLERS: dict[str, tuple] = {
    "chrome_navigate": (handle_navigate, True),
    "chrome_go_back": (handle_go_back, True),
    "chrome_go_forward": (handle_go_forward, True),
    "chrome_reload": (handle_reload, True),
    "chrome_wait_for_navigation": (handle_wait_for_navigation, True),
}
