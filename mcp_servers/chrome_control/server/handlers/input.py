"""
Input tool handlers - click, type, key presses, scrolling.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ChromeConfig
    from ...session_manager import SessionController


def handle_click(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.click_element(
        session,
        selector=args["selector"],
        wait_for_selector=args["wait_for_selector"],
        timeout_ms=args["timeout"],
    )
    return ToolResult.json(result)


def handle_type(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.type_into(
        session,
        selector=args["selector"],
        text=args["text"],
        clear_first=args["clear_first"],
        delay_ms=args["delay"],
    )
    return ToolResult.json(result)


def handle_press_key(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.press_key(session, key=args["key"], delay_ms=args["delay"]))


def handle_scroll(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.scroll(session, x=args["x"], y=args["y"], selector=args.get("selector")))


INPUT_HANDLERS: dict[str, tuple] = {
    "chrome_click": (handle_click, True),
    "chrome_type": (handle_type, True),
    "chrome_press_key": (handle_press_key, True),
    "chrome_scroll": (handle_scroll, True),
}
