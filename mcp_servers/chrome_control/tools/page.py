"""
Page inspection tools: content, elements, title/url, scripts and waits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import ElementNotFoundError
from .base import current_page, timeout_seconds

if TYPE_CHECKING:
    from ..session_manager import SessionController

_CONTENT_FN = """(selector, attribute) => {
  if (!selector) return {found: true, value: document.body ? document.body.innerText : ''};
  const el = document.querySelector(selector);
  if (!el) return {found: false, value: null};
  return {found: true, value: attribute ? el.getAttribute(attribute) : el.textContent};
}"""

_ELEMENTS_FN = """(selector, attrs) => {
  return Array.from(document.querySelectorAll(selector)).map((el) => {
    const data = {text: (el.textContent || '').trim()};
    for (const attr of attrs) data[attr] = el.getAttribute(attr);
    return data;
  });
}"""


def get_content(session: SessionController, selector: str | None = None, attribute: str | None = None) -> dict[str, Any]:
    """Text of the first match, one of its attributes, or the page's visible text."""
    page = current_page(session)
    result = page.call_function(_CONTENT_FN, [selector or None, attribute or None]) or {}
    if not result.get("found"):
        raise ElementNotFoundError(selector or "")
    return {"content": result.get("value")}


def get_elements(session: SessionController, selector: str, attributes: list[str] | None = None) -> dict[str, Any]:
    page = current_page(session)
    elements = page.call_function(_ELEMENTS_FN, [selector, list(attributes or [])]) or []
    return {"count": len(elements), "elements": elements}


def get_title(session: SessionController) -> dict[str, Any]:
    return {"title": current_page(session).get_title()}


def get_url(session: SessionController) -> dict[str, Any]:
    return {"url": current_page(session).get_url()}


def execute_script(session: SessionController, script: str, args: list[Any] | None = None) -> dict[str, Any]:
    """Run a JS function source with the given arguments and return its JSON result.

    Args:
        session: Session controller
        script: Function source, e.g. "(a, b) => a + b"
        args: JSON-serialisable arguments

    Returns:
        Dict with result (None when the function returns undefined)
    """
    page = current_page(session)
    return {"result": page.call_function(script, args or [])}


def wait_for_selector(
    session: SessionController,
    selector: str,
    visible: bool = False,
    timeout_ms: int = 30000,
) -> dict[str, Any]:
    page = current_page(session)
    page.wait_for_selector(selector, visible=visible, timeout=timeout_seconds(timeout_ms))
    return {"message": f"Element found: {selector}"}


__all__ = ["execute_script", "get_content", "get_elements", "get_title", "get_url", "wait_for_selector"]
