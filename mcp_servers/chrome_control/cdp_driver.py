"""
Browser-driver capability and its CDP implementation.

The session controller only talks to a BrowserDriver / BrowserHandle pair,
so tests can substitute an in-memory fake. CdpDriver launches a real Chrome
through BrowserLauncher and speaks CDP over its debugging port.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .browser_session import PageSession
from .config import ChromeConfig
from .errors import CdpError
from .launcher import BrowserLauncher
from .session_cdp import CdpConnection
from .target_watcher import TargetHandler, TargetWatcher

logger = logging.getLogger("mcp.chrome.driver")


class BrowserHandle(Protocol):
    def is_connected(self) -> bool: ...

    def page_ids(self) -> list[str]: ...

    def new_page(self) -> str: ...

    def attach(self, target_id: str) -> PageSession: ...

    def on_target_created(self, handler: TargetHandler) -> None: ...

    def navigate_target(self, target_id: str, url: str) -> None: ...

    def close_target(self, target_id: str) -> None: ...

    def close(self) -> None: ...


class BrowserDriver(Protocol):
    def launch(self, *, headless: bool, width: int, height: int) -> BrowserHandle: ...


class CdpBrowser:
    """A launcher-owned Chrome process addressed over CDP."""

    def __init__(self, config: ChromeConfig, launcher: BrowserLauncher) -> None:
        self.config = config
        self.launcher = launcher
        self._browser_ws: str | None = None
        self._watcher: TargetWatcher | None = None

    @property
    def port(self) -> int:
        return self.launcher.port

    def browser_ws(self) -> str:
        """Browser-level WebSocket URL (cached)."""
        if self._browser_ws is None:
            ws_url = self.launcher.cdp_version().get("webSocketDebuggerUrl")
            if not ws_url:
                raise CdpError("CDP browser WebSocket URL not found")
            self._browser_ws = str(ws_url)
        return self._browser_ws

    def _browser_conn(self) -> CdpConnection:
        return CdpConnection(self.browser_ws(), timeout=min(5.0, self.config.cdp_timeout))

    def _page_ws(self, target_id: str) -> str:
        for target in self.launcher.list_targets():
            if target.get("id") == target_id and target.get("webSocketDebuggerUrl"):
                return str(target["webSocketDebuggerUrl"])
        return f"ws://127.0.0.1:{self.port}/devtools/page/{target_id}"

    def is_connected(self) -> bool:
        return self.launcher.is_alive() and self.launcher.cdp_ready()

    def page_ids(self) -> list[str]:
        return [str(t["id"]) for t in self.launcher.list_targets() if t.get("type") == "page" and t.get("id")]

    def new_page(self) -> str:
        """Create a new blank page, return its target id."""
        conn = self._browser_conn()
        try:
            result = conn.send("Target.createTarget", {"url": "about:blank"})
        finally:
            conn.close()
        target_id = result.get("targetId")
        if not target_id:
            raise CdpError("Failed to create browser page")
        return str(target_id)

    def attach(self, target_id: str) -> PageSession:
        conn = CdpConnection(self._page_ws(target_id), timeout=self.config.cdp_timeout)
        page = PageSession(conn, target_id, timeout=self.config.cdp_timeout)
        page.enable_page()
        return page

    def on_target_created(self, handler: TargetHandler) -> None:
        if self._watcher is not None:
            self._watcher.stop()
        watcher = TargetWatcher(ws_url=self.browser_ws(), handler=handler, name=f"chrome-targets-{self.port}")
        if not watcher.start():
            logger.warning("target watcher did not subscribe in time")
        self._watcher = watcher

    def navigate_target(self, target_id: str, url: str) -> None:
        conn = CdpConnection(self._page_ws(target_id), timeout=min(5.0, self.config.cdp_timeout))
        try:
            conn.send("Page.navigate", {"url": url})
        finally:
            conn.close()

    def close_target(self, target_id: str) -> None:
        conn = self._browser_conn()
        try:
            conn.send("Target.closeTarget", {"targetId": target_id})
        finally:
            conn.close()

    def close(self) -> None:
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()
        if self.launcher.is_alive() and self._browser_ws:
            try:
                conn = CdpConnection(self._browser_ws, timeout=2.0)
                try:
                    conn.send("Browser.close", timeout=2.0)
                finally:
                    conn.close()
            except CdpError as exc:
                logger.debug("graceful Browser.close failed: %s", exc)
        self.launcher.stop()


class CdpDriver:
    """Launches Chrome processes configured from ChromeConfig."""

    def __init__(self, config: ChromeConfig) -> None:
        self.config = config

    def launch(self, *, headless: bool, width: int, height: int) -> CdpBrowser:
        launcher = BrowserLauncher(self.config)
        result = launcher.launch(headless=headless, width=width, height=height)
        logger.info("%s port=%s profile=%s", result.message, result.port, result.profile_path)
        return CdpBrowser(self.config, launcher)


__all__ = ["BrowserDriver", "BrowserHandle", "CdpBrowser", "CdpDriver"]
