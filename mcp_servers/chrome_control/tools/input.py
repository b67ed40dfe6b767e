"""
Input tools: click, type, key presses and scrolling.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from ..errors import ElementNotFoundError
from .base import box_center, current_page, element_box_in_view, timeout_seconds

if TYPE_CHECKING:
    from ..session_manager import SessionController

logger = logging.getLogger("mcp.chrome.tools")

_FOCUS_JS = """
(() => {
  const el = document.querySelector(%s);
  if (!el) return false;
  el.focus();
  return true;
})()
"""


def click_element(
    session: SessionController,
    selector: str,
    wait_for_selector: bool = True,
    timeout_ms: int = 30000,
) -> dict[str, Any]:
    """Click the centre of the first element matching selector.

    Args:
        session: Session controller
        selector: CSS selector
        wait_for_selector: Wait for the element to exist first
        timeout_ms: Wait timeout in milliseconds

    Returns:
        Dict with a confirmation message
    """
    page = current_page(session)
    if wait_for_selector:
        page.wait_for_selector(selector, timeout=timeout_seconds(timeout_ms))
    x, y = box_center(element_box_in_view(page, selector))
    page.click(x, y)
    return {"message": f"Clicked element: {selector}"}


def type_into(
    session: SessionController,
    selector: str,
    text: str,
    clear_first: bool = False,
    delay_ms: int = 0,
) -> dict[str, Any]:
    """Focus an input and type text, optionally replacing its content first.

    Clearing selects the existing value with a triple click and deletes it
    with Backspace.
    """
    page = current_page(session)
    page.wait_for_selector(selector, timeout=session.config.cdp_timeout)
    if clear_first:
        x, y = box_center(element_box_in_view(page, selector))
        for count in (1, 2, 3):
            page.click(x, y, click_count=count)
        page.press_key("Backspace")
    if not page.eval_js(_FOCUS_JS % json.dumps(selector)):
        raise ElementNotFoundError(selector)
    page.type_text(text, delay_ms=delay_ms)
    logger.debug("typed %d chars into %s", len(text), selector)
    return {"message": f"Typed text into: {selector}"}


def press_key(session: SessionController, key: str, delay_ms: int = 0) -> dict[str, Any]:
    page = current_page(session)
    page.press_key(key, delay_ms=delay_ms)
    return {"message": f"Pressed key: {key}"}


def scroll(session: SessionController, x: int = 0, y: int = 0, selector: str | None = None) -> dict[str, Any]:
    """Scroll an element into view (no-op when it does not exist) or the window to (x, y)."""
    page = current_page(session)
    if selector:
        page.call_function(
            """(sel) => {
              const element = document.querySelector(sel);
              if (element) element.scrollIntoView({behavior: 'smooth', block: 'center'});
            }""",
            [selector],
        )
        return {"message": f"Scrolled to element: {selector}"}
    page.call_function("(x, y) => { window.scrollTo(x, y); }", [x, y])
    return {"message": f"Scrolled to position: ({x}, {y})"}


__all__ = ["click_element", "press_key", "scroll", "type_into"]
