"""
Tool handlers organized by domain.

Each handler module exports a *_HANDLERS dict mapping tool names to
(handler_function, requires_browser) tuples.
"""

from __future__ import annotations

from .browser import BROWSER_HANDLERS
from .input import INPUT_HANDLERS
from .navigation import NAVIGATION_HANDLERS
from .page import PAGE_HANDLERS

ALL_HANDLERS: dict[str, tuple] = {
    **BROWSER_HANDLERS,
    **NAVIGATION_HANDLERS,
    **INPUT_HANDLERS,
    **PAGE_HANDLERS,
}

__all__ = [
    "ALL_HANDLERS",
    "BROWSER_HANDLERS",
    "INPUT_HANDLERS",
    "NAVIGATION_HANDLERS",
    "PAGE_HANDLERS",
]
