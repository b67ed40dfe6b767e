"""
Screenshot capture: viewport, full page or a single element, size-bounded.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..capture import compress_base64
from ..errors import ChromeControlError
from .base import current_page, element_box_in_view

if TYPE_CHECKING:
    from ..session_manager import SessionController

logger = logging.getLogger("mcp.chrome.tools")


def take_screenshot(
    session: SessionController,
    full_page: bool = False,
    selector: str | None = None,
    format: str = "jpeg",
    quality: int = 60,
    max_width: int = 1280,
    max_height: int = 1440,
) -> dict[str, Any]:
    """Capture the page and compress it under the configured byte ceiling.

    A selector wins over full_page. Quality only applies to jpeg.

    Returns:
        Dict with base64 data, mimeType, width, height, size and quality
    """
    page = current_page(session)
    jpeg_quality = quality if format == "jpeg" else None

    if selector:
        box = element_box_in_view(page, selector)
        if box["width"] <= 0 or box["height"] <= 0:
            raise ChromeControlError(f"Element has no visible box: {selector}", details={"selector": selector})
        clip = {
            "x": box["x"] + box["scrollX"],
            "y": box["y"] + box["scrollY"],
            "width": box["width"],
            "height": box["height"],
            "scale": 1,
        }
        raw = page.screenshot(format, jpeg_quality, clip=clip, capture_beyond_viewport=True)
    elif full_page:
        width, height = page.content_size()
        clip = {"x": 0, "y": 0, "width": max(1.0, width), "height": max(1.0, height), "scale": 1}
        raw = page.screenshot(format, jpeg_quality, clip=clip, capture_beyond_viewport=True)
    else:
        raw = page.screenshot(format, jpeg_quality)

    result = compress_base64(
        raw,
        format,
        quality=quality,
        max_width=max_width,
        max_height=max_height,
        max_bytes=session.config.screenshot_max_bytes,
    )
    if result.size > session.config.screenshot_max_bytes:
        logger.warning("screenshot still %d bytes after %d attempts", result.size, result.attempts)
    return {
        "data": result.to_base64(),
        "mimeType": result.mime_type,
        "width": result.width,
        "height": result.height,
        "size": result.size,
        "quality": result.quality,
    }


def screenshot_summary(shot: dict[str, Any]) -> str:
    return f"Screenshot captured: {shot['width']}x{shot['height']}px, {round(shot['size'] / 1024)}KB"


__all__ = ["screenshot_summary", "take_screenshot"]
