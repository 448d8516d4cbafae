"""REST call gateway: rate budget, transport, and outcome classification."""

from .budget import CallBudget, WindowResetTimer
from .call_gateway import CallGateway, resolve_endpoint
from .results import (
    ApiError,
    CallResult,
    FailureKind,
    GatewayError,
    HttpError,
    NetworkError,
    ParseError,
    RateLimitExceeded,
)
from .transport import HttpTransport, RequestsTransport, TransportError, TransportResponse

__all__ = [
    "CallBudget",
    "WindowResetTimer",
    "CallGateway",
    "resolve_endpoint",
    "CallResult",
    "FailureKind",
    "GatewayError",
    "RateLimitExceeded",
    "NetworkError",
    "HttpError",
    "ParseError",
    "ApiError",
    "HttpTransport",
    "RequestsTransport",
    "TransportError",
    "TransportResponse",
]
