"""Raw CDP connection over websocket-client."""

from __future__ import annotations

import json
import logging
import socket
import time
from collections.abc import Callable
from contextlib import suppress
from typing import Any

import websocket

from .errors import CdpError

logger = logging.getLogger("mcp.chrome.cdp")

EventPredicate = Callable[[dict[str, Any]], bool]

# Events after which the socket no longer talks to a live target.
_DETACH_EVENTS = frozenset({"Inspector.detached", "Inspector.targetCrashed"})


class CdpConnection:
    """Low-level CDP WebSocket connection."""

    def __init__(self, ws_url: str, timeout: float = 5.0):
        try:
            self.ws = websocket.create_connection(ws_url, timeout=timeout, suppress_origin=True)
        except (websocket.WebSocketException, OSError) as exc:
            raise CdpError(f"CDP connect failed: {exc}", details={"ws_url": ws_url}) from exc
        self.ws_url = ws_url
        self.timeout = timeout
        self._next_id = 1
        self._closed = False
        # Events that arrive while waiting for a command response are kept for later waits.
        self._event_queue: list[dict[str, Any]] = []
        self._max_event_queue = 2000

    @property
    def closed(self) -> bool:
        if self._closed:
            return True
        return not bool(getattr(self.ws, "connected", True))

    def _push_event(self, event: dict[str, Any]) -> None:
        """Store an event for later consumption (bounded)."""
        if event.get("method") in _DETACH_EVENTS:
            self._closed = True

        self._event_queue.append(event)
        if len(self._event_queue) > self._max_event_queue:
            del self._event_queue[: len(self._event_queue) - self._max_event_queue]

    def pop_event(self, event_name: str, predicate: EventPredicate | None = None) -> dict[str, Any] | None:
        """Pop the oldest queued event params for the given event name."""
        if not event_name:
            return None
        for i, ev in enumerate(self._event_queue):
            if ev.get("method") != event_name:
                continue
            params = ev.get("params")
            params = params if isinstance(params, dict) else {}
            if predicate is not None and not predicate(params):
                continue
            self._event_queue.pop(i)
            return params
        return None

    def discard_events(self, *event_names: str) -> int:
        """Drop queued events with the given names (all events when none given)."""
        before = len(self._event_queue)
        if event_names:
            names = set(event_names)
            self._event_queue = [ev for ev in self._event_queue if ev.get("method") not in names]
        else:
            self._event_queue = []
        return before - len(self._event_queue)

    def abort(self) -> None:
        """Hard break of the underlying socket."""
        self._closed = True
        sock = getattr(self.ws, "sock", None)
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
            with suppress(OSError):
                sock.close()

    def _recv_one(self, remaining: float) -> dict[str, Any] | None:
        """Receive one decoded frame, or None when the short socket timeout elapsed."""
        try:
            self.ws.settimeout(min(0.5, remaining))
            raw = self.ws.recv()
        except (websocket.WebSocketTimeoutException, TimeoutError):
            return None
        except (websocket.WebSocketException, OSError) as exc:
            self._closed = True
            raise CdpError(f"CDP connection lost: {exc}") from exc

        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return data if isinstance(data, dict) else None

    def send(self, method: str, params: dict[str, Any] | None = None, *, timeout: float | None = None) -> dict[str, Any]:
        """Send CDP command and wait for response."""
        if self._closed:
            raise CdpError(f"CDP connection closed ({method})")
        msg_id = self._next_id
        self._next_id += 1

        msg: dict[str, Any] = {"id": msg_id, "method": method}
        if params:
            msg["params"] = params

        try:
            self.ws.settimeout(min(2.0, max(0.5, float(self.timeout))))
            self.ws.send(json.dumps(msg))
        except (websocket.WebSocketException, OSError) as exc:
            self._closed = True
            raise CdpError(f"CDP send failed ({method}): {exc}") from exc

        return self._recv_until(msg_id, method, self.timeout if timeout is None else timeout)

    def send_many(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Send multiple CDP commands sequentially, honouring optional per-command delayMs."""
        out: list[dict[str, Any]] = []
        for cmd in commands:
            method = cmd.get("method")
            if not isinstance(method, str) or not method.strip():
                raise CdpError("send_many: each command must include a non-empty 'method'")
            params = cmd.get("params") if isinstance(cmd.get("params"), dict) else None
            out.append(self.send(method, params))
            delay_ms = int(cmd.get("delayMs") or 0)
            if delay_ms > 0:
                time.sleep(min(5.0, delay_ms / 1000.0))
        return out

    def _recv_until(self, expected_id: int, method: str, timeout: float) -> dict[str, Any]:
        """Wait for response with specific ID."""
        deadline = time.time() + timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                raise CdpError(f"CDP response timed out ({method})")

            data = self._recv_one(remaining)
            if data is None:
                continue

            if isinstance(data.get("method"), str) and "id" not in data:
                self._push_event(data)
                continue

            if data.get("id") == expected_id:
                if "error" in data:
                    error = data["error"]
                    message = error.get("message") if isinstance(error, dict) else str(error)
                    raise CdpError(f"{method}: {message}", details={"error": error})
                return data.get("result", {})

    def wait_for_event(
        self,
        event_name: str,
        timeout: float = 10.0,
        predicate: EventPredicate | None = None,
    ) -> dict | None:
        """Wait for specific CDP event; returns its params or None on timeout."""
        queued = self.pop_event(event_name, predicate)
        if queued is not None:
            return queued

        deadline = time.time() + timeout
        while True:
            remaining = deadline - time.time()
            if remaining <= 0:
                return None

            data = self._recv_one(remaining)
            if data is None or not isinstance(data.get("method"), str) or "id" in data:
                continue

            if data.get("method") == event_name:
                params = data.get("params")
                params = params if isinstance(params, dict) else {}
                if predicate is None or predicate(params):
                    return params
            self._push_event(data)

    def close(self) -> None:
        """Close the WebSocket connection."""
        if self._closed and not getattr(self.ws, "connected", False):
            return
        self._closed = True
        try:
            self.ws.close(timeout=1.0)
        except (websocket.WebSocketException, OSError) as exc:
            logger.debug("cdp close failed: %s", exc)
            self.abort()


__all__ = ["CdpConnection", "EventPredicate"]
