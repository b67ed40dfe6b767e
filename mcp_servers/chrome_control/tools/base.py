"""
Base utilities for the chrome_* tools.

Provides:
- current_page: the managed page, (re)acquired through the session controller
- timeout_seconds: millisecond tool timeouts to seconds
- element lookup helpers shared by input and capture tools
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from ..errors import ElementNotFoundError

if TYPE_CHECKING:
    from ..browser_session import PageSession
    from ..session_manager import SessionController

# Longest wait any tool accepts; 0 means "no explicit limit" and maps here.
MAX_TIMEOUT_MS = 120_000

_SCROLL_INTO_VIEW_JS = """
(() => {
  const el = document.querySelector(%s);
  if (!el) return null;
  const r = el.getBoundingClientRect();
  const inView = r.top >= 0 && r.left >= 0
    && r.bottom <= window.innerHeight && r.right <= window.innerWidth;
  if (!inView) el.scrollIntoView({block: 'center', inline: 'center', behavior: 'instant'});
  const b = el.getBoundingClientRect();
  return {x: b.left, y: b.top, width: b.width, height: b.height,
          scrollX: window.scrollX, scrollY: window.scrollY};
})()
"""


def current_page(session: SessionController) -> PageSession:
    """Return the managed page, launching or re-acquiring it when needed."""
    page = session.page
    if page is None or page.is_closed():
        _, page = session.ensure_session()
    return page


def timeout_seconds(timeout_ms: int | float | None) -> float:
    if not timeout_ms:
        timeout_ms = MAX_TIMEOUT_MS
    return min(float(timeout_ms), MAX_TIMEOUT_MS) / 1000.0


def element_box_in_view(page: PageSession, selector: str) -> dict[str, Any]:
    """Scroll the first match into view if needed; return its viewport box or raise."""
    box = page.eval_js(_SCROLL_INTO_VIEW_JS % json.dumps(selector))
    if not isinstance(box, dict):
        raise ElementNotFoundError(selector)
    return box


def box_center(box: dict[str, Any]) -> tuple[float, float]:
    return float(box["x"]) + float(box["width"]) / 2, float(box["y"]) + float(box["height"]) / 2


__all__ = ["MAX_TIMEOUT_MS", "box_center", "current_page", "element_box_in_view", "timeout_seconds"]
