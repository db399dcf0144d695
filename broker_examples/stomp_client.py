"""Small STOMP helper built on top of stomp.py.

Why this exists:
- stomp.py is callback-based (a listener runs on the library's receiver thread).
- A consumer example reads much more naturally as a blocking loop over a channel.

Design:
- `StompClient` manages the connection and the listener.
- `subscribe()` returns a `Subscription` whose `get()` blocks for the next frame.
- When the connection drops, the subscription is closed and `get()` returns `CLOSED`.
"""

from __future__ import annotations

import queue
import threading
from typing import Any

import stomp
from stomp.exception import StompException

from .errors import BrokerSetupError

# Sentinel pushed into every subscription when the connection goes away.
CLOSED = object()


class Subscription:
    """Channel-like view of one STOMP subscription."""

    def __init__(self, client: StompClient, destination: str, sub_id: str) -> None:
        self.client = client
        self.destination = destination
        self.id = sub_id
        self._q: "queue.Queue[Any]" = queue.Queue()
        self._closed = False

    def get(self, timeout: float | None = None) -> Any:
        """Return the next frame, or `CLOSED` once the subscription is gone."""
        if self._closed and self._q.empty():
            return CLOSED
        frame = self._q.get(timeout=timeout)
        if frame is CLOSED:
            self._closed = True
        return frame

    def unsubscribe(self) -> None:
        self.client.unsubscribe(self)

    def _push(self, frame: Any) -> None:
        self._q.put(frame)

    def _close(self) -> None:
        self._q.put(CLOSED)


class _Listener(stomp.ConnectionListener):
    def __init__(self, client: StompClient) -> None:
        self._client = client

    def on_message(self, frame: Any) -> None:
        self._client._dispatch(frame)

    def on_error(self, frame: Any) -> None:
        print(f"[stomp] broker error: {getattr(frame, 'body', frame)}")

    def on_disconnected(self) -> None:
        self._client._close_all()


class StompClient:
    """Thin wrapper around `stomp.Connection`."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        login: str | None = None,
        passcode: str | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.login = login
        self.passcode = passcode

        self._conn = stomp.Connection([(host, port)])
        self._conn.set_listener("", _Listener(self))

        # subscription id -> Subscription
        self._subs: dict[str, Subscription] = {}
        self._lock = threading.Lock()
        self._next_id = 1

        self._connected = False

    def connect(self) -> None:
        """Open the STOMP session and wait for CONNECTED."""
        if self._connected:
            return
        try:
            self._conn.connect(username=self.login, passcode=self.passcode, wait=True)
        except StompException as e:
            raise BrokerSetupError("connect to STOMP server", e) from e
        self._connected = True

    def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        try:
            self._conn.disconnect()
        finally:
            self._close_all()

    def send(self, destination: str, body: bytes, content_type: str = "text/plain") -> None:
        try:
            self._conn.send(destination=destination, body=body, content_type=content_type)
        except StompException as e:
            raise BrokerSetupError("send message", e) from e

    def subscribe(self, destination: str, ack: str = "auto") -> Subscription:
        with self._lock:
            sub_id = str(self._next_id)
            self._next_id += 1
            sub = Subscription(self, destination, sub_id)
            self._subs[sub_id] = sub
        try:
            self._conn.subscribe(destination=destination, id=sub_id, ack=ack)
        except StompException as e:
            with self._lock:
                self._subs.pop(sub_id, None)
            raise BrokerSetupError("subscribe to queue", e) from e
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            if self._subs.pop(sub.id, None) is None:
                return
        if self._connected:
            self._conn.unsubscribe(id=sub.id)
        sub._close()

    # -------------------- listener callbacks --------------------

    def _dispatch(self, frame: Any) -> None:
        headers = getattr(frame, "headers", None) or {}
        sub_id = headers.get("subscription")
        with self._lock:
            sub = self._subs.get(sub_id) if sub_id is not None else None
            # Brokers that omit the header: deliver to the only subscription.
            if sub is None and len(self._subs) == 1:
                sub = next(iter(self._subs.values()))
        if sub is not None:
            sub._push(frame)

    def _close_all(self) -> None:
        with self._lock:
            subs = list(self._subs.values())
            self._subs.clear()
        for sub in subs:
            sub._close()
