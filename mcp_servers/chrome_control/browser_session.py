"""Page-level primitives over one CDP connection."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from .errors import CdpError, NavigationError, ScriptError, WaitTimeoutError
from .session_cdp import CdpConnection

logger = logging.getLogger("mcp.chrome.page")

# wait_until -> Page.lifecycleEvent name
_LIFECYCLE_NAMES = {
    "load": "load",
    "domcontentloaded": "DOMContentLoaded",
    "networkidle0": "networkIdle",
    "networkidle2": "networkAlmostIdle",
}

_NAVIGATION_EVENTS = (
    "Page.loadEventFired",
    "Page.domContentEventFired",
    "Page.lifecycleEvent",
    "Page.frameNavigated",
    "Page.navigatedWithinDocument",
)

# Windows virtual key codes for named keys.
KEY_CODES = {
    "Enter": 13,
    "Tab": 9,
    "Escape": 27,
    "Backspace": 8,
    "Delete": 46,
    "Space": 32,
    "ArrowUp": 38,
    "ArrowDown": 40,
    "ArrowLeft": 37,
    "ArrowRight": 39,
    "Home": 36,
    "End": 35,
    "PageUp": 33,
    "PageDown": 34,
    "Shift": 16,
    "Control": 17,
    "Alt": 18,
    "Meta": 91,
}

# Keys that also produce text on keyDown.
_KEY_TEXT = {"Enter": "\r", "Tab": "\t", "Space": " "}

_SELECTOR_STATE_JS = """
(() => {
  const el = document.querySelector(%s);
  if (!el) return 'missing';
  if (!%s) return 'ok';
  const style = window.getComputedStyle(el);
  const rect = el.getBoundingClientRect();
  const visible = style && style.visibility !== 'hidden' && style.display !== 'none'
    && rect.width > 0 && rect.height > 0;
  return visible ? 'ok' : 'hidden';
})()
"""


def _key_code(key: str) -> str:
    if len(key) == 1:
        if key.isalpha():
            return f"Key{key.upper()}"
        if key.isdigit():
            return f"Digit{key}"
        return ""
    return key


class PageSession:
    """
    Primitives for the managed page.

    Wraps a CdpConnection attached to one page target. The connection is kept
    for the lifetime of the page so emulation overrides stay in effect.
    """

    def __init__(self, connection: CdpConnection, target_id: str, url: str = "", timeout: float = 30.0):
        self.conn = connection
        self.target_id = target_id
        self.url = url
        self.timeout = timeout
        self._page_enabled = False
        self._runtime_enabled = False
        self._network_enabled = False

    def close(self) -> None:
        """Close the session connection (the page itself stays open)."""
        self.conn.close()

    def is_closed(self) -> bool:
        return self.conn.closed

    def enable_page(self) -> None:
        """Enable Page domain plus lifecycle events (needed for networkidle waits)."""
        if self._page_enabled:
            return
        self.conn.send_many(
            [
                {"method": "Page.enable", "params": {}},
                {"method": "Page.setLifecycleEventsEnabled", "params": {"enabled": True}},
            ]
        )
        self._page_enabled = True

    def enable_runtime(self) -> None:
        if not self._runtime_enabled:
            self.conn.send("Runtime.enable")
            self._runtime_enabled = True

    def enable_network(self) -> None:
        if not self._network_enabled:
            self.conn.send("Network.enable")
            self._network_enabled = True

    # ─────────────────────────────────────────────────────────────────────────
    # Navigation
    # ─────────────────────────────────────────────────────────────────────────

    def _begin_navigation(self) -> None:
        self.enable_page()
        self.conn.discard_events(*_NAVIGATION_EVENTS)

    def wait_for_lifecycle(self, wait_until: str = "load", timeout: float = 30.0, loader_id: str | None = None) -> None:
        """Block until the page reaches the given lifecycle point; raise WaitTimeoutError."""
        if wait_until not in _LIFECYCLE_NAMES:
            raise ValueError(f"Unknown wait_until: {wait_until}")

        if wait_until == "load":
            params = self.conn.wait_for_event("Page.loadEventFired", timeout)
        elif wait_until == "domcontentloaded":
            params = self.conn.wait_for_event("Page.domContentEventFired", timeout)
        else:
            name = _LIFECYCLE_NAMES[wait_until]

            def matches(ev: dict[str, Any]) -> bool:
                if ev.get("name") != name or ev.get("frameId") != self.target_id:
                    return False
                return loader_id is None or ev.get("loaderId") == loader_id

            params = self.conn.wait_for_event("Page.lifecycleEvent", timeout, predicate=matches)

        if params is None:
            raise WaitTimeoutError(
                f"Navigation timeout of {int(timeout * 1000)} ms exceeded (wait_until={wait_until})",
                suggestion="Increase the timeout or use a less strict wait_until",
            )

    def navigate(self, url: str, wait_until: str = "load", timeout: float = 30.0) -> str:
        """Navigate to URL and wait for the requested lifecycle point."""
        self._begin_navigation()
        result = self.conn.send("Page.navigate", {"url": url})
        error_text = result.get("errorText")
        if error_text:
            raise NavigationError(f"{error_text} at {url}", details={"url": url})
        # Same-document navigations carry no loaderId and fire no load event.
        if result.get("loaderId"):
            self.wait_for_lifecycle(wait_until, timeout, loader_id=result.get("loaderId"))
        self.conn.discard_events("Page.frameNavigated")
        self.url = self.get_url()
        return self.url

    def reload(self, wait_until: str = "load", timeout: float = 30.0, ignore_cache: bool = False) -> str:
        """Reload current page."""
        self._begin_navigation()
        self.conn.send("Page.reload", {"ignoreCache": ignore_cache})
        self.wait_for_lifecycle(wait_until, timeout)
        self.conn.discard_events("Page.frameNavigated")
        self.url = self.get_url()
        return self.url

    def _history_step(self, delta: int, wait_until: str, timeout: float) -> str | None:
        history = self.conn.send("Page.getNavigationHistory")
        entries = history.get("entries") or []
        index = int(history.get("currentIndex", 0)) + delta
        if index < 0 or index >= len(entries):
            return None
        self._begin_navigation()
        self.conn.send("Page.navigateToHistoryEntry", {"entryId": entries[index]["id"]})
        # History moves between fragments of one document fire no load event.
        target_url = str(entries[index].get("url") or "")
        current_url = str(entries[index - delta].get("url") or "")
        if target_url.split("#", 1)[0] != current_url.split("#", 1)[0]:
            self.wait_for_lifecycle(wait_until, timeout)
        self.conn.discard_events("Page.frameNavigated")
        self.url = self.get_url()
        return self.url

    def go_back(self, wait_until: str = "load", timeout: float = 30.0) -> str | None:
        """Navigate back in history; None when there is no previous entry."""
        return self._history_step(-1, wait_until, timeout)

    def go_forward(self, wait_until: str = "load", timeout: float = 30.0) -> str | None:
        """Navigate forward in history; None when there is no next entry."""
        return self._history_step(1, wait_until, timeout)

    def wait_for_navigation(self, wait_until: str = "load", timeout: float = 30.0) -> str:
        """Wait for the next main-frame navigation to reach the lifecycle point."""
        self.enable_page()
        deadline = time.time() + timeout

        def main_frame(ev: dict[str, Any]) -> bool:
            frame = ev.get("frame")
            return isinstance(frame, dict) and not frame.get("parentId")

        navigated = self.conn.wait_for_event("Page.frameNavigated", timeout, predicate=main_frame)
        if navigated is None:
            raise WaitTimeoutError(f"Navigation timeout of {int(timeout * 1000)} ms exceeded")
        loader_id = navigated["frame"].get("loaderId")
        self.wait_for_lifecycle(wait_until, max(0.0, deadline - time.time()), loader_id=loader_id)
        self.url = self.get_url()
        return self.url

    # ─────────────────────────────────────────────────────────────────────────
    # JavaScript
    # ─────────────────────────────────────────────────────────────────────────

    def eval_js(self, expression: str) -> Any:
        """Evaluate JavaScript and return the JSON value of the result."""
        self.enable_runtime()
        result = self.conn.send(
            "Runtime.evaluate",
            {
                "expression": expression,
                "returnByValue": True,
                "awaitPromise": True,
            },
        )
        details = result.get("exceptionDetails")
        if details:
            exc = details.get("exception") or {}
            message = exc.get("description") or details.get("text") or "Script evaluation failed"
            raise ScriptError(str(message).splitlines()[0], details={"stack": exc.get("description")})

        value = result.get("result")
        if not isinstance(value, dict):
            return None
        # undefined and null both map to None.
        if value.get("type") == "undefined":
            return None
        if value.get("type") == "object" and value.get("subtype") == "null":
            return None
        return value.get("value")

    def call_function(self, source: str, args: list[Any] | None = None) -> Any:
        """Call a function given as JS source with JSON-serialisable arguments."""
        payload = json.dumps(list(args or []))
        return self.eval_js(f"({source})(...{payload})")

    def get_url(self) -> str:
        """Get current page URL."""
        return self.eval_js("window.location.href") or ""

    def get_title(self) -> str:
        """Get current page title."""
        return self.eval_js("document.title") or ""

    def wait_for_selector(self, selector: str, *, visible: bool = False, timeout: float = 30.0) -> None:
        """Poll until the selector matches (and is visible when asked)."""
        expression = _SELECTOR_STATE_JS % (json.dumps(selector), "true" if visible else "false")
        deadline = time.time() + timeout
        state = "missing"
        while True:
            state = self.eval_js(expression)
            if state == "ok":
                return
            if time.time() >= deadline:
                break
            time.sleep(min(0.1, max(0.0, deadline - time.time())))
        what = "visible element" if visible and state == "hidden" else "selector"
        raise WaitTimeoutError(
            f"Waiting for {what} `{selector}` failed: timeout {int(timeout * 1000)}ms exceeded",
            details={"selector": selector, "state": state},
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Input
    # ─────────────────────────────────────────────────────────────────────────

    def click(self, x: float, y: float, button: str = "left", click_count: int = 1) -> None:
        """Click at coordinates."""
        base = {"x": x, "y": y, "button": button, "clickCount": click_count}
        self.conn.send_many(
            [
                {"method": "Input.dispatchMouseEvent", "params": {"type": "mouseMoved", "x": x, "y": y}},
                {"method": "Input.dispatchMouseEvent", "params": {"type": "mousePressed", **base}},
                {"method": "Input.dispatchMouseEvent", "params": {"type": "mouseReleased", **base}},
            ]
        )

    def _key_event(self, event_type: str, key: str) -> dict[str, Any]:
        params: dict[str, Any] = {
            "type": event_type,
            "key": " " if key == "Space" else key,
            "code": _key_code(key),
            "windowsVirtualKeyCode": KEY_CODES.get(key, ord(key.upper()) if len(key) == 1 else 0),
        }
        if event_type == "keyDown":
            text = _KEY_TEXT.get(key, key if len(key) == 1 else "")
            if text:
                params["text"] = text
        return params

    def press_key(self, key: str, delay_ms: int = 0) -> None:
        """Press and release a key, holding it for delay_ms."""
        self.conn.send_many(
            [
                {"method": "Input.dispatchKeyEvent", "params": self._key_event("keyDown", key), "delayMs": delay_ms},
                {"method": "Input.dispatchKeyEvent", "params": self._key_event("keyUp", key)},
            ]
        )

    def type_text(self, text: str, delay_ms: int = 0) -> None:
        """Type text into the focused element."""
        if not text:
            return
        if delay_ms <= 0:
            self.conn.send("Input.insertText", {"text": text})
            return
        cmds: list[dict[str, Any]] = []
        for ch in text:
            if ch == "\n":
                cmds.append({"method": "Input.dispatchKeyEvent", "params": self._key_event("keyDown", "Enter")})
                cmds.append(
                    {"method": "Input.dispatchKeyEvent", "params": self._key_event("keyUp", "Enter"), "delayMs": delay_ms}
                )
                continue
            cmds.append({"method": "Input.dispatchKeyEvent", "params": {"type": "char", "text": ch}, "delayMs": delay_ms})
        self.conn.send_many(cmds)

    # ─────────────────────────────────────────────────────────────────────────
    # Screenshots, emulation & storage
    # ─────────────────────────────────────────────────────────────────────────

    def screenshot(
        self,
        format: str = "png",
        quality: int | None = None,
        clip: dict | None = None,
        capture_beyond_viewport: bool = False,
    ) -> str:
        """Capture screenshot, return base64 data."""
        params: dict[str, Any] = {"format": format, "fromSurface": True}
        if format == "jpeg" and quality is not None:
            params["quality"] = int(quality)
        if clip:
            params["clip"] = clip
        if capture_beyond_viewport:
            params["captureBeyondViewport"] = True
        result = self.conn.send("Page.captureScreenshot", params)
        data = result.get("data")
        if not data:
            raise CdpError("Page.captureScreenshot returned no data")
        return data

    def content_size(self) -> tuple[float, float]:
        """Full document size in CSS pixels."""
        metrics = self.conn.send("Page.getLayoutMetrics")
        size = metrics.get("cssContentSize") or metrics.get("contentSize") or {}
        return float(size.get("width", 0)), float(size.get("height", 0))

    def set_viewport(self, width: int, height: int, device_scale_factor: float = 1.0) -> None:
        self.conn.send(
            "Emulation.setDeviceMetricsOverride",
            {
                "width": int(width),
                "height": int(height),
                "deviceScaleFactor": float(device_scale_factor),
                "mobile": False,
            },
        )

    def add_init_script(self, source: str) -> str:
        """Register a script run in every new document of this page."""
        self.enable_page()
        result = self.conn.send("Page.addScriptToEvaluateOnNewDocument", {"source": source})
        return str(result.get("identifier", ""))

    def get_cookies(self, urls: list[str] | None = None) -> list[dict[str, Any]]:
        self.enable_network()
        params = {"urls": list(urls)} if urls else {"urls": [self.get_url()]}
        result = self.conn.send("Network.getCookies", params)
        cookies = result.get("cookies")
        return cookies if isinstance(cookies, list) else []

    def set_cookie(self, cookie: dict[str, Any]) -> None:
        self.enable_network()
        params = dict(cookie)
        if not params.get("url") and not params.get("domain"):
            params["url"] = self.get_url()
        result = self.conn.send("Network.setCookie", params)
        # Older Chrome builds report failures via success=false instead of an error.
        if result.get("success") is False:
            raise CdpError(f"Failed to set cookie: {cookie.get('name')}", details={"cookie": cookie.get("name")})


__all__ = ["KEY_CODES", "PageSession"]
