"""
Page tool handlers - content, elements, scripts, waits and screenshots.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ... import tools
from ..types import ToolResult

if TYPE_CHECKING:
    from ...config import ChromeConfig
    from ...session_manager import SessionController


def handle_get_content(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.get_content(session, selector=args.get("selector"), attribute=args.get("attribute"))
    return ToolResult.json(result)


def handle_get_elements(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.get_elements(session, selector=args["selector"], attributes=args.get("attributes"))
    return ToolResult.json(result)


def handle_get_title(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.get_title(session))


def handle_get_url(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.get_url(session))


def handle_execute_script(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    return ToolResult.json(tools.execute_script(session, script=args["script"], args=args["args"]))


def handle_wait_for_selector(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    result = tools.wait_for_selector(
        session,
        selector=args["selector"],
        visible=args["visible"],
        timeout_ms=args["timeout"],
    )
    return ToolResult.json(result)


def handle_screenshot(config: ChromeConfig, session: SessionController, args: dict[str, Any]) -> ToolResult:
    shot = tools.take_screenshot(
        session,
        full_page=args["full_page"],
        selector=args.get("selector"),
        format=args["format"],
        quality=args["quality"],
        max_width=args["max_width"],
        max_height=args["max_height"],
    )
    meta = {k: v for k, v in shot.items() if k != "data"}
    return ToolResult.with_image(tools.screenshot_summary(shot), shot["data"], shot["mimeType"], data=meta)


PAGE_HANDLERS: dict[str, tuple] = {
    "chrome_get_content": (handle_get_content, True),
    "chrome_get_elements": (handle_get_elements, True),
    "chrome_get_title": (handle_get_title, True),
    "chrome_get_url": (handle_get_url, True),
    "chrome_execute_script": (handle_execute_script, True),
    "chrome_wait_for_selector": (handle_wait_for_selector, True),
    "chrome_screenshot": (handle_screenshot, True),
}
