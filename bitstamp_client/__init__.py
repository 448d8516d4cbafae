"""Asynchronous Bitstamp REST and websocket client."""

from .api import BitstampClient, pairs
from .auth import Credentials, NonceGenerator, RequestSigner
from .gateway import (
    ApiError,
    CallGateway,
    CallResult,
    FailureKind,
    GatewayError,
    HttpError,
    NetworkError,
    ParseError,
    RateLimitExceeded,
)
from .streaming import ChannelMultiplexer, SubscriptionError, channels

__version__ = "0.1.0"

__all__ = [
    "BitstampClient",
    "pairs",
    "Credentials",
    "NonceGenerator",
    "RequestSigner",
    "CallGateway",
    "CallResult",
    "FailureKind",
    "GatewayError",
    "RateLimitExceeded",
    "NetworkError",
    "HttpError",
    "ParseError",
    "ApiError",
    "ChannelMultiplexer",
    "SubscriptionError",
    "channels",
]
