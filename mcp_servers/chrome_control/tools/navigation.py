"""
Navigation tools for browser automation.

Provides:
- navigate_to: Navigate to URL
- go_back / go_forward: Browser history
- reload_page: Reload current page
- wait_for_navigation: Wait for the next main-frame navigation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import current_page, timeout_seconds

if TYPE_CHECKING:
    from ..session_manager import SessionController


def navigate_to(session: SessionController, url: str, wait_until: str = "load") -> dict[str, Any]:
    """Navigate the managed page to a URL.

    Args:
        session: Session controller
        url: URL to navigate to
        wait_until: Lifecycle point that ends the navigation

    Returns:
        Dict with the final url and page title
    """
    page = current_page(session)
    final_url = page.navigate(url, wait_until=wait_until, timeout=session.config.cdp_timeout)
    return {"url": final_url, "title": page.get_title()}


def go_back(session: SessionController, wait_until: str = "load") -> dict[str, Any]:
    """Navigate back in browser history (stays put when there is no history)."""
    page = current_page(session)
    url = page.go_back(wait_until=wait_until, timeout=session.config.cdp_timeout)
    return {"url": url if url is not None else page.get_url()}


def go_forward(session: SessionController, wait_until: str = "load") -> dict[str, Any]:
    """Navigate forward in browser history."""
    page = current_page(session)
    url = page.go_forward(wait_until=wait_until, timeout=session.config.cdp_timeout)
    return {"url": url if url is not None else page.get_url()}


def reload_page(session: SessionController, wait_until: str = "load") -> dict[str, Any]:
    page = current_page(session)
    return {"url": page.reload(wait_until=wait_until, timeout=session.config.cdp_timeout)}


def wait_for_navigation(session: SessionController, wait_until: str = "load", timeout_ms: int = 30000) -> dict[str, Any]:
    page = current_page(session)
    return {"url": page.wait_for_navigation(wait_until=wait_until, timeout=timeout_seconds(timeout_ms))}


__all__ = ["go_back", "go_forward", "navigate_to", "reload_page", "wait_for_navigation"]
