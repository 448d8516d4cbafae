"""Topic multiplexing over a single Bitstamp websocket connection.

Many logical topics (``live_trades_btcusd``, ``order_book_etheur``...) share
one socket. :class:`ChannelMultiplexer` sends the subscribe/unsubscribe
control frames, tracks which topics the server has acknowledged, and routes
every inbound data frame to the handlers registered for its topic. Trade and
order frames are enriched with ``cost = amount * price`` before dispatch.

When the server asks for a reconnect (``bts:request_reconnect``) the
multiplexer drops its connection, opens a fresh one and forgets every
subscription. It does not resubscribe; callers that want that can resubscribe
from their ``connected`` handler.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Protocol, Set

from bitstamp_client.infra.config import DEFAULT_WEBSOCKET_URL, StreamConfig
from bitstamp_client.infra.metrics import MetricsSink

from . import channels
from .connection import ReconnectingSocket

Handler = Callable[..., Any]


class SubscriptionError(Exception):
    """An inbound frame could not be understood."""

    def __init__(self, message: str, raw: Any = None) -> None:
        super().__init__(message)
        self.raw = raw


class StreamSocket(Protocol):
    on_open: Optional[Callable[..., None]]
    on_close: Optional[Callable[..., None]]
    on_message: Optional[Callable[..., None]]

    def start(self) -> None:
        ...

    def send(self, frame: str) -> None:
        ...

    async def close(self) -> None:
        ...


def derive_cost(data: Dict[str, Any]) -> Optional[float]:
    amount, price = data.get("amount"), data.get("price")
    if amount is None or price is None:
        return None
    if isinstance(amount, (int, float)) and isinstance(price, (int, float)):
        return amount * price
    try:
        return float(amount) * float(price)
    except (TypeError, ValueError):
        return None


class ChannelMultiplexer:
    """Subscribes to Bitstamp channels and fans inbound frames out to handlers."""

    def __init__(
        self,
        url: str = DEFAULT_WEBSOCKET_URL,
        *,
        max_retries: int = 10,
        connect_timeout: float = 1.0,
        socket_factory: Optional[Callable[[], StreamSocket]] = None,
        metrics: Optional[MetricsSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.url = url
        self.metrics = metrics or MetricsSink()
        self.logger = logger or logging.getLogger(__name__)
        self._socket_factory = socket_factory or (
            lambda: ReconnectingSocket(url, max_retries=max_retries, connect_timeout=connect_timeout)
        )
        self._listeners: Dict[str, List[Handler]] = defaultdict(list)
        self._active: Set[str] = set()
        self._pending: Set[str] = set()
        self._started = False
        self._background: Set[asyncio.Task] = set()
        self._socket = self._new_socket()

    @classmethod
    def from_config(cls, config: StreamConfig, metrics: Optional[MetricsSink] = None) -> "ChannelMultiplexer":
        return cls(
            config.websocket_url,
            max_retries=config.max_retries,
            connect_timeout=config.connect_timeout_seconds,
            metrics=metrics,
        )

    @property
    def subscriptions(self) -> FrozenSet[str]:
        """Topics the server has acknowledged."""

        return frozenset(self._active)

    @property
    def pending(self) -> FrozenSet[str]:
        """Topics with a subscribe request sent but not yet acknowledged."""

        return frozenset(self._pending)

    # --- lifecycle ---------------------------------------------------------
    def start(self) -> None:
        """Open the connection. Must be called from a running event loop."""

        self._started = True
        self._socket.start()

    async def close(self) -> None:
        """Disconnect without waiting for outstanding acknowledgements."""

        self._started = False
        self._active.clear()
        self._pending.clear()
        await self._socket.close()

    def reconnect(self) -> None:
        """Replace the connection with a fresh one and forget all subscriptions."""

        old = self._socket
        old.on_open = old.on_message = None
        self._active.clear()
        self._pending.clear()
        self._socket = self._new_socket()
        self._spawn(self._swap(old))

    async def _swap(self, old: StreamSocket) -> None:
        await old.close()
        if self._started:
            self._socket.start()

    async def __aenter__(self) -> "ChannelMultiplexer":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # --- subscriptions -----------------------------------------------------
    def subscribe(self, kind: str, instrument: str) -> str:
        topic = channels.topic_for(kind, instrument)
        if topic not in self._active:
            self._pending.add(topic)
        self._send(channels.EVENT_SUBSCRIBE, {"channel": topic})
        return topic

    def unsubscribe(self, kind: str, instrument: str) -> str:
        topic = channels.topic_for(kind, instrument)
        self._pending.discard(topic)
        self._send(channels.EVENT_UNSUBSCRIBE, {"channel": topic})
        return topic

    def unsubscribe_all(self) -> None:
        for topic in sorted(self._active | self._pending):
            self._send(channels.EVENT_UNSUBSCRIBE, {"channel": topic})
        self._pending.clear()

    # --- listeners ---------------------------------------------------------
    def on(self, name: str, handler: Handler) -> Handler:
        """Register ``handler`` for a topic or for ``connected``/``disconnected``/``error``."""

        self._listeners[name].append(handler)
        return handler

    def off(self, name: str, handler: Handler) -> None:
        handlers = self._listeners.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._listeners[name]

    def _emit(self, name: str, *args: Any) -> None:
        handlers = list(self._listeners.get(name, ()))
        if not handlers and name == channels.ERROR:
            self.logger.warning("Unhandled stream error: %s", args[0] if args else None, extra={"event": "stream_error"})
            return
        for handler in handlers:
            try:
                result = handler(*args)
            except Exception:
                self.logger.exception("Listener for %s failed", name, extra={"event": "listener_error", "topic": name})
                continue
            if inspect.isawaitable(result):
                self._spawn(result)

    # --- inbound -----------------------------------------------------------
    def _handle_frame(self, raw: Any) -> None:
        self.metrics.incr("stream_frames")
        try:
            message = json.loads(raw)
            event = message["event"]
            channel = message["channel"]
            data = message.get("data")
            if not isinstance(event, str) or not isinstance(channel, str):
                raise TypeError("event and channel must be strings")
        except (TypeError, ValueError, KeyError) as exc:
            self.metrics.incr("stream_malformed_frames")
            error = SubscriptionError(f"Malformed frame: {exc}", raw=raw)
            error.__cause__ = exc
            self._emit(channels.ERROR, error)
            return

        if event == channels.EVENT_UNSUBSCRIPTION_SUCCEEDED:
            self._active.discard(channel)
            self._pending.discard(channel)
        elif event == channels.EVENT_SUBSCRIPTION_SUCCEEDED:
            self._pending.discard(channel)
            self._active.add(channel)
        elif event == channels.EVENT_REQUEST_RECONNECT:
            self.metrics.incr("stream_reconnect_requests")
            self.logger.info("Server requested reconnect", extra={"event": "reconnect_requested", "url": self.url})
            self.reconnect()
        else:
            if isinstance(data, dict) and channels.is_costed(channel):
                cost = derive_cost(data)
                if cost is not None:
                    data = {**data, "cost": cost}
            self._emit(channel, {"data": data, "event": event})

    # --- plumbing ----------------------------------------------------------
    def _new_socket(self) -> StreamSocket:
        sock = self._socket_factory()
        sock.on_open = lambda: self._emit(channels.CONNECTED)
        sock.on_close = lambda: self._emit(channels.DISCONNECTED)
        sock.on_message = self._handle_frame
        return sock

    def _send(self, event: str, data: Dict[str, Any]) -> None:
        self._socket.send(json.dumps({"event": event, "data": data}))

    def _spawn(self, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._background.add(task)
        task.add_done_callback(self._background.discard)


__all__ = ["ChannelMultiplexer", "SubscriptionError", "StreamSocket", "derive_cost"]
