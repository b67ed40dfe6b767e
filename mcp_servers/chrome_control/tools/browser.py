"""
Browser lifecycle tools: launch, close and viewport.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..session_manager import SessionController


def launch_browser(
    session: SessionController,
    headless: bool | None = None,
    width: int | None = None,
    height: int | None = None,
) -> dict[str, Any]:
    """Launch Chrome, or reuse the running browser (arguments then ignored)."""
    reused = session.browser is not None and session.browser.is_connected()
    session.ensure_session(headless=headless, width=width, height=height)
    viewport = session.viewport
    return {
        "message": "Browser already running" if reused else "Browser launched successfully",
        "headless": session.headless,
        "viewport": {"width": viewport.width, "height": viewport.height} if viewport else None,
        "reused": reused,
    }


def close_browser(session: SessionController) -> dict[str, Any]:
    closed = session.close_session()
    return {"message": "Browser closed" if closed else "No browser was running", "closed": closed}


def set_viewport(
    session: SessionController,
    width: int,
    height: int,
    device_scale_factor: float = 1.0,
) -> dict[str, Any]:
    viewport = session.set_viewport(width, height, device_scale_factor)
    return {"viewport": viewport.to_dict()}


__all__ = ["close_browser", "launch_browser", "set_viewport"]
