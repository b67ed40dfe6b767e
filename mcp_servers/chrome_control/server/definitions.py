"""Tool schema definitions for the chrome_* tool catalogue."""

from __future__ import annotations

from typing import Any

_WAIT_UNTIL: dict[str, Any] = {
    "type": "string",
    "enum": ["load", "domcontentloaded", "networkidle0", "networkidle2"],
    "default": "load",
    "description": "When to consider navigation finished",
}

_TIMEOUT: dict[str, Any] = {
    "type": "integer",
    "minimum": 0,
    "maximum": 120000,
    "default": 30000,
    "description": "Timeout in milliseconds",
}

_SELECTOR: dict[str, Any] = {"type": "string", "minLength": 1, "description": "CSS selector"}

_KEY_DELAY: dict[str, Any] = {
    "type": "integer",
    "minimum": 0,
    "maximum": 1000,
    "default": 0,
}


def _tool(name: str, description: str, properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties, "additionalProperties": False}
    if required:
        schema["required"] = required
    return {"name": name, "description": description, "inputSchema": schema}


TOOL_DEFINITIONS: list[dict[str, Any]] = [
    _tool(
        "chrome_launch",
        """Launch Chrome (or reuse the running one).
If a browser is already running these arguments are ignored; call chrome_close first to relaunch.""",
        {
            "headless": {"type": "boolean", "description": "Run without a visible window (default from MCP_HEADLESS)"},
            "width": {"type": "integer", "minimum": 100, "maximum": 7680, "default": 1280, "description": "Viewport width"},
            "height": {"type": "integer", "minimum": 100, "maximum": 4320, "default": 720, "description": "Viewport height"},
        },
    ),
    _tool(
        "chrome_navigate",
        "Navigate the page to a URL. Returns the final URL and the page title.",
        {
            "url": {"type": "string", "minLength": 1, "description": "URL to navigate to"},
            "wait_until": _WAIT_UNTIL,
        },
        ["url"],
    ),
    _tool(
        "chrome_click",
        "Click the centre of the first element matching a selector.",
        {
            "selector": _SELECTOR,
            "wait_for_selector": {"type": "boolean", "default": True, "description": "Wait for the element first"},
            "timeout": _TIMEOUT,
        },
        ["selector"],
    ),
    _tool(
        "chrome_type",
        "Type text into an input element.",
        {
            "selector": {**_SELECTOR, "description": "CSS selector of input element"},
            "text": {"type": "string", "description": "Text to type"},
            "clear_first": {"type": "boolean", "default": False, "description": "Clear existing text before typing"},
            "delay": {**_KEY_DELAY, "description": "Delay between key presses in milliseconds"},
        },
        ["selector", "text"],
    ),
    _tool(
        "chrome_get_content",
        "Get text content or an attribute of an element, or the whole page text when no selector is given.",
        {
            "selector": {**_SELECTOR, "description": "CSS selector (optional, whole page if omitted)"},
            "attribute": {"type": "string", "description": "Attribute to read instead of text"},
        },
    ),
    _tool(
        "chrome_screenshot",
        """Take a screenshot of the viewport, the full page or one element.
The image is downscaled and re-encoded until it fits under ~950KB.""",
        {
            "full_page": {"type": "boolean", "default": False, "description": "Capture the full scrollable page"},
            "selector": {**_SELECTOR, "description": "Capture only this element"},
            "format": {"type": "string", "enum": ["png", "jpeg"], "default": "jpeg", "description": "Image format"},
            "quality": {"type": "integer", "minimum": 1, "maximum": 100, "default": 60, "description": "JPEG quality"},
            "max_width": {"type": "integer", "minimum": 100, "maximum": 2560, "default": 1280, "description": "Maximum width"},
            "max_height": {
                "type": "integer",
                "minimum": 100,
                "maximum": 1440,
                "default": 1440,
                "description": "Maximum height",
            },
        },
    ),
    _tool(
        "chrome_execute_script",
        "Execute a JavaScript function in the page context, e.g. script='(a, b) => a + b', args=[1, 2].",
        {
            "script": {"type": "string", "minLength": 1, "description": "JavaScript function source"},
            "args": {"type": "array", "items": {}, "default": [], "description": "Arguments to pass to the script"},
        },
        ["script"],
    ),
    _tool("chrome_get_title", "Get the current page title.", {}),
    _tool("chrome_get_url", "Get the current page URL.", {}),
    _tool(
        "chrome_wait_for_selector",
        "Wait until an element matching the selector exists (and is visible, if requested).",
        {
            "selector": _SELECTOR,
            "visible": {"type": "boolean", "default": False, "description": "Wait for the element to be visible"},
            "timeout": _TIMEOUT,
        },
        ["selector"],
    ),
    _tool(
        "chrome_get_elements",
        "List every element matching a selector with its trimmed text and requested attributes.",
        {
            "selector": _SELECTOR,
            "attributes": {"type": "array", "items": {"type": "string"}, "description": "Attributes to include"},
        },
        ["selector"],
    ),
    _tool(
        "chrome_scroll",
        "Scroll the window to (x, y), or scroll an element into view.",
        {
            "x": {"type": "integer", "default": 0, "description": "Horizontal position"},
            "y": {"type": "integer", "default": 0, "description": "Vertical position"},
            "selector": {**_SELECTOR, "description": "Element to scroll into view"},
        },
    ),
    _tool(
        "chrome_press_key",
        "Press a keyboard key (e.g. 'Enter', 'Tab', 'Escape', 'a').",
        {
            "key": {"type": "string", "minLength": 1, "description": "Key to press"},
            "delay": {**_KEY_DELAY, "description": "Delay before releasing key in milliseconds"},
        },
        ["key"],
    ),
    _tool("chrome_go_back", "Navigate back in browser history.", {"wait_until": _WAIT_UNTIL}),
    _tool("chrome_go_forward", "Navigate forward in browser history.", {"wait_until": _WAIT_UNTIL}),
    _tool("chrome_reload", "Reload the current page.", {"wait_until": _WAIT_UNTIL}),
    _tool(
        "chrome_set_viewport",
        "Set the viewport size. The viewport is kept for pages re-acquired later.",
        {
            "width": {"type": "integer", "minimum": 100, "maximum": 7680, "description": "Viewport width"},
            "height": {"type": "integer", "minimum": 100, "maximum": 4320, "description": "Viewport height"},
            "device_scale_factor": {
                "type": "number",
                "minimum": 0.1,
                "maximum": 10,
                "default": 1,
                "description": "Device scale factor",
            },
        },
        ["width", "height"],
    ),
    _tool(
        "chrome_get_cookies",
        "Get cookies for the given URLs (default: the current page URL).",
        {"urls": {"type": "array", "items": {"type": "string"}, "description": "URLs to get cookies for"}},
    ),
    _tool(
        "chrome_set_cookie",
        "Set a cookie. Without url or domain the cookie is scoped to the current page URL.",
        {
            "name": {"type": "string", "minLength": 1, "description": "Cookie name"},
            "value": {"type": "string", "description": "Cookie value"},
            "url": {"type": "string", "description": "Cookie URL"},
            "domain": {"type": "string", "description": "Cookie domain"},
            "path": {"type": "string", "description": "Cookie path"},
            "expires": {"type": "number", "description": "Expiration as Unix time in seconds"},
            "http_only": {"type": "boolean", "description": "HTTP only flag"},
            "secure": {"type": "boolean", "description": "Secure flag"},
            "same_site": {"type": "string", "enum": ["Strict", "Lax", "None"], "description": "SameSite attribute"},
        },
        ["name", "value"],
    ),
    _tool(
        "chrome_wait_for_navigation",
        "Wait for the next main-frame navigation to complete.",
        {"timeout": _TIMEOUT, "wait_until": _WAIT_UNTIL},
    ),
    _tool("chrome_close", "Close the browser. The next tool call launches a fresh one.", {}),
]

TOOLS_BY_NAME: dict[str, dict[str, Any]] = {tool["name"]: tool for tool in TOOL_DEFINITIONS}

__all__ = ["TOOLS_BY_NAME", "TOOL_DEFINITIONS"]
