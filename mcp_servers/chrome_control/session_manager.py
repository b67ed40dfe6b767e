"""
Session controller: the single browser/page pair behind every tool.

Holds at most one browser and exactly one managed page while a browser
exists. Browser-initiated new windows and tabs are redirected into the
managed page and closed, so agents only ever see one page.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from .browser_session import PageSession
from .cdp_driver import BrowserDriver, BrowserHandle, CdpDriver
from .config import ChromeConfig
from .errors import ChromeControlError, LaunchError
from .target_watcher import TargetInfo

logger = logging.getLogger("mcp.chrome.session")

# Redirects window.open() into the current page.
WINDOW_OPEN_OVERRIDE_JS = """
(() => {
  window.open = function (url) {
    if (url) {
      window.location.href = url;
    }
    return window;
  };
})();
"""

BLANK_URLS = frozenset({"", "about:blank"})


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    device_scale_factor: float = 1.0

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "deviceScaleFactor": self.device_scale_factor}


class SessionController:
    """Owns the browser handle and the managed page."""

    def __init__(self, config: ChromeConfig | None = None, driver: BrowserDriver | None = None) -> None:
        self.config = config or ChromeConfig.from_env()
        self.driver: BrowserDriver = driver or CdpDriver(self.config)
        self._browser: BrowserHandle | None = None
        self._page: PageSession | None = None
        self._viewport: Viewport | None = None
        self._headless: bool | None = None
        # Serialises page acquisition against the interception handler.
        self._lock = threading.RLock()

    @property
    def browser(self) -> BrowserHandle | None:
        return self._browser

    @property
    def page(self) -> PageSession | None:
        return self._page

    @property
    def viewport(self) -> Viewport | None:
        return self._viewport

    @property
    def headless(self) -> bool | None:
        return self._headless

    def ensure_session(
        self,
        headless: bool | None = None,
        width: int | None = None,
        height: int | None = None,
    ) -> tuple[BrowserHandle, PageSession]:
        """Return the live browser and its managed page, launching if needed.

        When a connected browser already exists the launch arguments are
        ignored; only the page is re-acquired if it went away.
        """
        browser = self._browser
        if browser is not None and not browser.is_connected():
            logger.warning("browser disconnected; relaunching")
            self._discard()
            browser = None

        if browser is None:
            browser = self._launch(
                self.config.headless if headless is None else headless,
                self.config.width if width is None else width,
                self.config.height if height is None else height,
            )

        page = self._ensure_page(browser)
        return browser, page

    def _launch(self, headless: bool, width: int, height: int) -> BrowserHandle:
        browser = self.driver.launch(headless=headless, width=width, height=height)
        try:
            with self._lock:
                self._browser = browser
                self._headless = headless
                self._viewport = Viewport(width, height, 1.0)
            browser.on_target_created(self._on_target_created)
        except Exception as exc:
            self._discard()
            if isinstance(exc, ChromeControlError):
                raise
            raise LaunchError(f"Browser set-up failed: {exc}") from exc
        logger.info("browser launched headless=%s viewport=%sx%s", headless, width, height)
        return browser

    def _page_alive(self, browser: BrowserHandle, page: PageSession | None) -> bool:
        if page is None or page.is_closed():
            return False
        return page.target_id in browser.page_ids()

    def _ensure_page(self, browser: BrowserHandle) -> PageSession:
        with self._lock:
            page = self._page
            if self._page_alive(browser, page):
                return page  # type: ignore[return-value]

            if page is not None:
                logger.info("managed page %s lost; re-acquiring", page.target_id)
                page.close()
                self._page = None

            existing = browser.page_ids()
            target_id = existing[0] if existing else browser.new_page()
            page = browser.attach(target_id)
            try:
                self._setup_page(page)
            except Exception:
                page.close()
                raise
            self._page = page
            logger.info("managed page %s acquired", target_id)
            return page

    def _setup_page(self, page: PageSession) -> None:
        viewport = self._viewport
        if viewport is not None:
            page.set_viewport(viewport.width, viewport.height, viewport.device_scale_factor)
        page.add_init_script(WINDOW_OPEN_OVERRIDE_JS)
        # Also cover the document that is already loaded.
        page.eval_js(WINDOW_OPEN_OVERRIDE_JS)

    def set_viewport(self, width: int, height: int, device_scale_factor: float = 1.0) -> Viewport:
        """Apply a viewport to the current page and keep it for re-acquired pages."""
        _, page = self.ensure_session()
        page.set_viewport(width, height, device_scale_factor)
        self._viewport = Viewport(int(width), int(height), float(device_scale_factor))
        return self._viewport

    def _on_target_created(self, info: TargetInfo) -> None:
        """Redirect a browser-initiated page into the managed page, then close it."""
        with self._lock:
            browser = self._browser
            page = self._page
            managed_id = page.target_id if page is not None else None

        if browser is None or info.target_id == managed_id:
            return

        if info.url not in BLANK_URLS and managed_id is not None:
            try:
                browser.navigate_target(managed_id, info.url)
                logger.info("redirected new page %s into managed page: %s", info.target_id, info.url)
            except ChromeControlError as exc:
                logger.warning("redirect of %s failed: %s", info.url, exc)

        try:
            browser.close_target(info.target_id)
            logger.info("closed new page %s", info.target_id)
        except ChromeControlError as exc:
            logger.warning("closing new page %s failed: %s", info.target_id, exc)

    def _discard(self) -> None:
        with self._lock:
            browser, self._browser = self._browser, None
            page, self._page = self._page, None
            self._headless = None
        if page is not None:
            page.close()
        if browser is not None:
            browser.close()

    def close_session(self) -> bool:
        """Close the browser if there is one; returns whether anything was closed."""
        had_browser = self._browser is not None
        self._discard()
        if had_browser:
            logger.info("browser closed")
        return had_browser


__all__ = ["BLANK_URLS", "SessionController", "Viewport", "WINDOW_OPEN_OVERRIDE_JS"]
