"""Background listener for browser-level Target.targetCreated events."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .errors import CdpError
from .session_cdp import CdpConnection

logger = logging.getLogger("mcp.chrome.targets")


@dataclass(frozen=True)
class TargetInfo:
    target_id: str
    type: str
    url: str = ""
    opener_id: str | None = None

    @classmethod
    def from_cdp(cls, info: dict[str, Any]) -> TargetInfo:
        return cls(
            target_id=str(info.get("targetId") or ""),
            type=str(info.get("type") or ""),
            url=str(info.get("url") or ""),
            opener_id=info.get("openerId") or None,
        )


TargetHandler = Callable[[TargetInfo], None]
ConnectionFactory = Callable[[str], CdpConnection]


class TargetWatcher:
    """Reads target-creation events from the browser endpoint on a daemon thread.

    Targets that already exist when the subscription is made are never
    reported; only page targets reach the handler.
    """

    def __init__(
        self,
        *,
        ws_url: str,
        handler: TargetHandler,
        name: str = "chrome-target-watcher",
        connect: ConnectionFactory | None = None,
    ) -> None:
        self.ws_url = ws_url
        self._handler = handler
        self._connect = connect or (lambda url: CdpConnection(url, timeout=5.0))
        self._stop = threading.Event()
        self._ready = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._conn: CdpConnection | None = None
        self._known: set[str] = set()

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def start(self, wait: float = 5.0) -> bool:
        """Start the thread and wait until the first subscription is in place."""
        if not self._thread.is_alive():
            self._thread.start()
        return self._ready.wait(wait)

    def stop(self, join: float = 1.0) -> None:
        self._stop.set()
        conn = self._conn
        if conn is not None:
            conn.abort()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(join)

    def _subscribe(self, conn: CdpConnection) -> None:
        existing = conn.send("Target.getTargets").get("targetInfos") or []
        self._known.update(str(info.get("targetId")) for info in existing if isinstance(info, dict))
        conn.send("Target.setDiscoverTargets", {"discover": True})

    def _dispatch(self, params: dict[str, Any]) -> None:
        raw = params.get("targetInfo")
        if not isinstance(raw, dict):
            return
        info = TargetInfo.from_cdp(raw)
        if not info.target_id or info.target_id in self._known:
            return
        self._known.add(info.target_id)
        if info.type != "page":
            return
        logger.info("target created id=%s url=%s opener=%s", info.target_id, info.url or "-", info.opener_id or "-")
        try:
            self._handler(info)
        except Exception:
            logger.exception("target handler failed for %s", info.target_id)

    def _run(self) -> None:
        backoff = 0.2
        while not self._stop.is_set():
            conn: CdpConnection | None = None
            try:
                conn = self._connect(self.ws_url)
                self._conn = conn
                self._subscribe(conn)
                self._ready.set()
                backoff = 0.2

                while not self._stop.is_set():
                    params = conn.wait_for_event("Target.targetCreated", timeout=0.5)
                    # Creations arrive in bursts (setDiscoverTargets replays them all).
                    while params is not None:
                        self._dispatch(params)
                        params = conn.pop_event("Target.targetCreated")
                    # Other target events are not consumed.
                    conn.discard_events()
            except CdpError as exc:
                if not self._stop.is_set():
                    logger.warning("target watcher disconnected: %s", exc)
            finally:
                if conn is not None:
                    conn.close()
                self._conn = None

            if self._stop.is_set():
                break

            time.sleep(backoff)
            backoff = min(backoff * 1.5, 2.0)


__all__ = ["TargetHandler", "TargetInfo", "TargetWatcher"]
