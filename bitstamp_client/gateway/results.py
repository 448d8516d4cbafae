"""Call outcomes: the success record and the failure taxonomy."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class FailureKind(str, Enum):
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    PARSE_ERROR = "parse_error"
    API_ERROR = "api_error"


@dataclass(frozen=True)
class CallResult:
    """A completed call: 2xx status and a body that carried no error marker."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


class GatewayError(Exception):
    """Base class for failed calls. ``detail`` holds the cause or the server's reason."""

    kind: FailureKind

    def __init__(self, message: str, detail: Any = None) -> None:
        super().__init__(message)
        self.detail = detail


class RateLimitExceeded(GatewayError):
    """Rejected locally; the request never left the process."""

    kind = FailureKind.RATE_LIMIT_EXCEEDED


class NetworkError(GatewayError):
    kind = FailureKind.NETWORK_ERROR


class HttpError(GatewayError):
    kind = FailureKind.HTTP_ERROR

    def __init__(self, message: str, detail: Any = None, status_code: Optional[int] = None) -> None:
        super().__init__(message, detail)
        self.status_code = status_code


class ParseError(GatewayError):
    kind = FailureKind.PARSE_ERROR


class ApiError(GatewayError):
    """The exchange answered 2xx but flagged the request as failed."""

    kind = FailureKind.API_ERROR


__all__ = [
    "FailureKind",
    "CallResult",
    "GatewayError",
    "RateLimitExceeded",
    "NetworkError",
    "HttpError",
    "ParseError",
    "ApiError",
]
