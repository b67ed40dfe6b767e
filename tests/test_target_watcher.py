from __future__ import annotations

import threading
import time
from typing import Any

from mcp_servers.chrome_control.errors import CdpError
from mcp_servers.chrome_control.target_watcher import TargetInfo, TargetWatcher


class DummyBrowserConn:
    """Queues the creation events Chrome sends in response to setDiscoverTargets."""

    def __init__(self, existing: list[str], created: list[dict[str, Any]]) -> None:
        self.existing = existing
        self.created = list(created)
        self.queue: list[dict[str, Any]] = []
        self.sent: list[tuple[str, dict[str, Any] | None]] = []
        self.closed = False
        self.aborted = False

    def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self.sent.append((method, params))
        if method == "Target.getTargets":
            return {"targetInfos": [{"targetId": t, "type": "page", "url": ""} for t in self.existing]}
        if method == "Target.setDiscoverTargets":
            self.queue.extend({"method": "Target.targetCreated", "params": {"targetInfo": t}} for t in self.created)
            self.queue.append({"method": "Target.targetInfoChanged", "params": {}})
        return {}

    def pop_event(self, name: str, predicate=None) -> dict[str, Any] | None:  # noqa: ARG002
        for i, ev in enumerate(self.queue):
            if ev["method"] == name:
                return self.queue.pop(i)["params"]
        return None

    def wait_for_event(self, name: str, timeout: float = 10.0, predicate=None) -> dict[str, Any] | None:  # noqa: ARG002
        if self.aborted:
            raise CdpError("connection aborted")
        params = self.pop_event(name)
        if params is None:
            time.sleep(0.01)
        return params

    def discard_events(self, *names: str) -> int:
        before = len(self.queue)
        self.queue = [ev for ev in self.queue if names and ev["method"] not in names]
        return before - len(self.queue)

    def abort(self) -> None:
        self.aborted = True

    def close(self) -> None:
        self.closed = True


def _watcher(handler, conn: DummyBrowserConn) -> TargetWatcher:
    return TargetWatcher(ws_url="ws://127.0.0.1:9222/devtools/browser/x", handler=handler, connect=lambda url: conn)


def test_target_info_from_cdp() -> None:
    info = TargetInfo.from_cdp({"targetId": "T1", "type": "page", "url": "https://a.test/", "openerId": "T0"})
    assert info == TargetInfo("T1", "page", "https://a.test/", "T0")

    bare = TargetInfo.from_cdp({"targetId": "T2", "type": "page"})
    assert bare.url == ""
    assert bare.opener_id is None


def test_dispatch_skips_known_and_non_page_targets() -> None:
    seen: list[TargetInfo] = []
    watcher = _watcher(seen.append, DummyBrowserConn([], []))
    conn = DummyBrowserConn(["existing"], [])
    watcher._subscribe(conn)  # type: ignore[arg-type]

    watcher._dispatch({"targetInfo": {"targetId": "existing", "type": "page", "url": "https://x/"}})
    watcher._dispatch({"targetInfo": {"targetId": "worker", "type": "service_worker", "url": "https://x/sw.js"}})
    watcher._dispatch({"targetInfo": {"targetId": "popup", "type": "page", "url": "https://x/p"}})
    watcher._dispatch({"targetInfo": {"targetId": "popup", "type": "page", "url": "https://x/p"}})

    assert [info.target_id for info in seen] == ["popup"]
    assert ("Target.setDiscoverTargets", {"discover": True}) in conn.sent


def test_dispatch_logs_handler_failure(caplog) -> None:
    def boom(info: TargetInfo) -> None:
        raise RuntimeError("handler exploded")

    watcher = _watcher(boom, DummyBrowserConn([], []))
    watcher._dispatch({"targetInfo": {"targetId": "popup", "type": "page", "url": ""}})

    assert any("target handler failed" in rec.getMessage() for rec in caplog.records)


def test_watcher_thread_reports_new_pages() -> None:
    seen: list[TargetInfo] = []
    done = threading.Event()

    def handler(info: TargetInfo) -> None:
        seen.append(info)
        done.set()

    conn = DummyBrowserConn(
        ["initial"],
        [
            {"targetId": "initial", "type": "page", "url": "about:blank"},
            {"targetId": "popup", "type": "page", "url": "https://example.com/", "openerId": "initial"},
        ],
    )
    watcher = _watcher(handler, conn)

    assert watcher.start(wait=2.0) is True
    assert done.wait(2.0)
    watcher.stop(join=2.0)

    assert [info.target_id for info in seen] == ["popup"]
    assert seen[0].opener_id == "initial"
    assert conn.closed is True
    assert watcher.running is False


def test_watcher_handles_every_creation_queued_during_subscribe() -> None:
    seen: list[TargetInfo] = []
    done = threading.Event()

    def handler(info: TargetInfo) -> None:
        seen.append(info)
        if len(seen) == 2:
            done.set()

    conn = DummyBrowserConn(
        ["initial"],
        [
            {"targetId": "initial", "type": "page", "url": "about:blank"},
            {"targetId": "early-1", "type": "page", "url": "https://a.test/"},
            {"targetId": "early-2", "type": "page", "url": "https://b.test/"},
        ],
    )
    watcher = _watcher(handler, conn)

    assert watcher.start(wait=2.0) is True
    assert done.wait(2.0)
    watcher.stop(join=2.0)

    assert [info.target_id for info in seen] == ["early-1", "early-2"]
    assert conn.queue == []
