"""Live market data over the Bitstamp websocket API."""

from . import channels
from .connection import ReconnectingSocket
from .multiplexer import ChannelMultiplexer, StreamSocket, SubscriptionError

__all__ = [
    "channels",
    "ChannelMultiplexer",
    "ReconnectingSocket",
    "StreamSocket",
    "SubscriptionError",
]
