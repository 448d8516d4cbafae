"""Websocket connection that reconnects on transport-level drops.

:class:`ReconnectingSocket` owns one ``websockets`` client connection at a
time. Callers register ``on_open``, ``on_close`` and ``on_message``
callbacks and push frames with :meth:`send`; frames sent while disconnected
are queued and flushed once the next connection opens. Every reconnect waits
``retry_delay`` seconds. Failed connection attempts, and connections that
close before delivering a frame, are retried up to ``max_retries`` times in a
row; each attempt is bounded by ``connect_timeout`` seconds.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

Callback = Optional[Callable[..., None]]


class ReconnectingSocket:
    """Keeps a websocket open, retrying dropped or failed connections."""

    def __init__(
        self,
        url: str,
        *,
        max_retries: int = 10,
        connect_timeout: float = 1.0,
        retry_delay: float = 1.0,
        connect: Optional[Callable[[str], Awaitable[Any]]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.url = url
        self.max_retries = max_retries
        self.connect_timeout = connect_timeout
        self.retry_delay = retry_delay
        self.logger = logger or logging.getLogger(__name__)
        self._connect = connect or (lambda target: websockets.connect(target, ping_interval=20, ping_timeout=20))

        self.on_open: Callback = None
        self.on_close: Callback = None
        self.on_message: Callback = None

        self._outbox: Deque[str] = deque()
        self._outbox_ready: Optional[asyncio.Event] = None
        self._ws: Any = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._closing = False
        # bound to the loop that runs the socket
        self._outbox_ready = asyncio.Event()
        if self._outbox:
            self._outbox_ready.set()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"ws:{self.url}")

    def send(self, frame: str) -> None:
        self._outbox.append(frame)
        if self._outbox_ready is not None:
            self._outbox_ready.set()

    async def close(self) -> None:
        """Close the connection and stop reconnecting. Queued frames are dropped."""

        self._closing = True
        self._outbox.clear()
        ws = self._ws
        if ws is not None:
            with contextlib.suppress(WebSocketException, OSError):
                await ws.close()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _run(self) -> None:
        failures = 0
        while not self._closing:
            try:
                ws = await asyncio.wait_for(self._connect(self.url), timeout=self.connect_timeout)
            except (asyncio.TimeoutError, OSError, WebSocketException) as exc:
                failures += 1
                if self._give_up(failures, exc):
                    return
                self.logger.warning(
                    "Connect to %s failed (%d/%d): %s", self.url, failures, self.max_retries, exc,
                    extra={"event": "ws_retry", "url": self.url, "attempt": failures},
                )
                await asyncio.sleep(self.retry_delay)
                continue

            delivered = await self._serve(ws)
            if self._closing:
                return
            # a connection dropped before its first frame counts as a failed attempt
            failures = 0 if delivered else failures + 1
            if self._give_up(failures, "closed before first frame"):
                return
            self.logger.info(
                "Reconnecting to %s in %.1f s", self.url, self.retry_delay,
                extra={"event": "ws_reconnect", "url": self.url, "attempt": failures},
            )
            await asyncio.sleep(self.retry_delay)

    def _give_up(self, failures: int, reason: object) -> bool:
        if failures <= self.max_retries:
            return False
        self.logger.error(
            "Giving up on %s after %d attempts: %s", self.url, failures, reason,
            extra={"event": "ws_give_up", "url": self.url, "attempts": failures},
        )
        return True

    async def _serve(self, ws: Any) -> bool:
        """Pump frames until the connection ends; return whether any frame arrived."""

        delivered = False
        self._ws = ws
        self._fire(self.on_open)
        writer = asyncio.create_task(self._drain(ws))
        try:
            async for raw in ws:
                delivered = True
                self._fire(self.on_message, raw)
        except ConnectionClosed as exc:
            self.logger.info(
                "Connection to %s dropped: %s", self.url, exc,
                extra={"event": "ws_dropped", "url": self.url},
            )
        finally:
            self._ws = None
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError, ConnectionClosed):
                await writer
            self._fire(self.on_close)
        return delivered

    async def _drain(self, ws: Any) -> None:
        ready = self._outbox_ready
        while True:
            await ready.wait()
            while self._outbox:
                await ws.send(self._outbox[0])
                self._outbox.popleft()
            ready.clear()

    def _fire(self, callback: Callback, *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            self.logger.exception("Socket callback failed", extra={"event": "ws_callback_error", "url": self.url})


__all__ = ["ReconnectingSocket"]
