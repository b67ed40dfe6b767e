"""In-memory stand-ins for CDP connections and the browser driver."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from mcp_servers.chrome_control.browser_session import PageSession
from mcp_servers.chrome_control.errors import CdpError, LaunchError
from mcp_servers.chrome_control.target_watcher import TargetInfo


def remote_value(value: Any) -> dict[str, Any]:
    if value is None:
        return {"type": "undefined"}
    if isinstance(value, bool):
        return {"type": "boolean", "value": value}
    if isinstance(value, (int, float)):
        return {"type": "number", "value": value}
    if isinstance(value, str):
        return {"type": "string", "value": value}
    return {"type": "object", "value": value}


class FakeConn:
    """Records CDP commands; Runtime.evaluate is answered by `evaluate(expression)`."""

    def __init__(
        self,
        evaluate: Callable[[str], Any] | None = None,
        responses: dict[str, Any] | None = None,
    ) -> None:
        self.sent: list[tuple[str, dict[str, Any] | None]] = []
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.evaluate = evaluate or (lambda expression: None)
        self.responses: dict[str, Any] = dict(responses or {})
        self.triggers: dict[str, list[tuple[str, dict[str, Any]]]] = {}
        self.closed = False
        self.timeout = 5.0

    def emit_after(self, method: str, event: str, params: dict[str, Any] | None = None) -> None:
        """Queue `event` whenever `method` is sent."""
        self.triggers.setdefault(method, []).append((event, params or {}))

    def send(self, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None) -> dict:
        if self.closed:
            raise CdpError(f"CDP connection closed ({method})")
        self.sent.append((method, params))
        for event in self.triggers.get(method, []):
            self.events.append(event)
        if method in self.responses:
            resp = self.responses[method]
            return resp(params) if callable(resp) else resp
        if method == "Runtime.evaluate":
            return {"result": remote_value(self.evaluate((params or {}).get("expression", "")))}
        return {}

    def send_many(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [self.send(cmd["method"], cmd.get("params")) for cmd in commands]

    def pop_event(self, name: str, predicate=None) -> dict[str, Any] | None:
        for i, (method, params) in enumerate(self.events):
            if method == name and (predicate is None or predicate(params)):
                del self.events[i]
                return params
        return None

    def wait_for_event(self, name: str, timeout: float = 10.0, predicate=None) -> dict[str, Any] | None:
        return self.pop_event(name, predicate)

    def discard_events(self, *names: str) -> int:
        before = len(self.events)
        self.events = [ev for ev in self.events if names and ev[0] not in names]
        return before - len(self.events)

    def close(self) -> None:
        self.closed = True

    def methods(self) -> list[str]:
        return [method for method, _ in self.sent]

    def params_for(self, method: str) -> list[dict[str, Any] | None]:
        return [params for m, params in self.sent if m == method]


class FakeBrowser:
    """BrowserHandle backed by plain lists."""

    def __init__(
        self,
        pages: list[str] | None = None,
        evaluate: Callable[[str], Any] | None = None,
        responses: dict[str, Any] | None = None,
    ) -> None:
        self.pages: list[str] = list(pages if pages is not None else ["initial"])
        self.connected = True
        self.closed = False
        self.handlers: list[Callable[[TargetInfo], None]] = []
        self.navigations: list[tuple[str, str]] = []
        self.closed_targets: list[str] = []
        self.attached: dict[str, FakeConn] = {}
        self.created: list[str] = []
        self.navigate_error: Exception | None = None
        self.close_error: Exception | None = None
        self.page_ids_error: Exception | None = None
        # Simulates the watcher reporting pages this handle creates.
        self.announce_new_pages = False
        self.announcers: list[threading.Thread] = []
        self._evaluate = evaluate
        self._responses = responses
        self._counter = 0

    def is_connected(self) -> bool:
        return self.connected and not self.closed

    def page_ids(self) -> list[str]:
        if self.page_ids_error is not None:
            raise self.page_ids_error
        return list(self.pages)

    def new_page(self) -> str:
        self._counter += 1
        target_id = f"page-{self._counter}"
        self.pages.append(target_id)
        self.created.append(target_id)
        if self.announce_new_pages:
            info = TargetInfo(target_id, "page", "about:blank")
            thread = threading.Thread(target=self.emit, args=(info,), daemon=True)
            thread.start()
            self.announcers.append(thread)
        return target_id

    def attach(self, target_id: str) -> PageSession:
        conn = FakeConn(evaluate=self._evaluate, responses=self._responses)
        self.attached[target_id] = conn
        return PageSession(conn, target_id)

    def on_target_created(self, handler: Callable[[TargetInfo], None]) -> None:
        self.handlers.append(handler)

    def emit(self, info: TargetInfo) -> None:
        for handler in self.handlers:
            handler(info)

    def navigate_target(self, target_id: str, url: str) -> None:
        if self.navigate_error is not None:
            raise self.navigate_error
        self.navigations.append((target_id, url))

    def close_target(self, target_id: str) -> None:
        if self.close_error is not None:
            raise self.close_error
        self.closed_targets.append(target_id)
        if target_id in self.pages:
            self.pages.remove(target_id)

    def close(self) -> None:
        self.closed = True


class FakeDriver:
    def __init__(self, **browser_kwargs: Any) -> None:
        self.launches: list[dict[str, Any]] = []
        self.browsers: list[FakeBrowser] = []
        self.fail_next = 0
        self._browser_kwargs = browser_kwargs

    def launch(self, *, headless: bool, width: int, height: int) -> FakeBrowser:
        self.launches.append({"headless": headless, "width": width, "height": height})
        if self.fail_next:
            self.fail_next -= 1
            raise LaunchError("Chrome not found. Searched paths: /nowhere")
        browser = FakeBrowser(**self._browser_kwargs)
        self.browsers.append(browser)
        return browser
