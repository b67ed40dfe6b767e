"""
Cookie tools.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import current_page

if TYPE_CHECKING:
    from ..session_manager import SessionController


def get_cookies(session: SessionController, urls: list[str] | None = None) -> dict[str, Any]:
    """Cookies visible to the given URLs (the current page URL when omitted)."""
    page = current_page(session)
    return {"cookies": page.get_cookies(urls)}


def set_cookie(
    session: SessionController,
    name: str,
    value: str,
    url: str | None = None,
    domain: str | None = None,
    path: str | None = None,
    expires: float | None = None,
    http_only: bool | None = None,
    secure: bool | None = None,
    same_site: str | None = None,
) -> dict[str, Any]:
    """Set one cookie.

    Args:
        session: Session controller
        name: Cookie name
        value: Cookie value
        url: URL the cookie belongs to
        domain: Cookie domain
        path: Cookie path
        expires: Expiry as Unix time in seconds
        http_only: HttpOnly flag
        secure: Secure flag
        same_site: Strict, Lax or None

    Returns:
        Dict with a confirmation message
    """
    cookie: dict[str, Any] = {"name": name, "value": value}
    if url:
        cookie["url"] = url
    if domain:
        cookie["domain"] = domain
    if path:
        cookie["path"] = path
    if expires:
        cookie["expires"] = expires
    if http_only is not None:
        cookie["httpOnly"] = http_only
    if secure is not None:
        cookie["secure"] = secure
    if same_site:
        cookie["sameSite"] = same_site

    page = current_page(session)
    page.set_cookie(cookie)
    return {"message": f"Cookie set: {name}"}


__all__ = ["get_cookies", "set_cookie"]
