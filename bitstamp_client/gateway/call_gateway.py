"""Rate-limited, signed REST calls with a single outcome per call.

Every REST operation funnels through :meth:`CallGateway.call`. The gateway
counts the attempt against the window budget, authenticates the body when the
endpoint is private, sends it over the transport and classifies the response:
a :class:`CallResult` is returned on success, otherwise one of the
:class:`GatewayError` subclasses is raised. Nothing is retried here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from bitstamp_client.auth.nonce import wall_clock_ms
from bitstamp_client.auth.signer import Credentials, RequestSigner, encode_form
from bitstamp_client.infra.config import DEFAULT_BASE_URL, DEFAULT_LEGACY_BASE_URL, ApiConfig, ParseFailurePolicy
from bitstamp_client.infra.metrics import MetricsSink

from .budget import DEFAULT_MAX_CALLS_PER_WINDOW, DEFAULT_WINDOW_SECONDS, CallBudget, WindowResetTimer
from .results import (
    ApiError,
    CallResult,
    GatewayError,
    HttpError,
    NetworkError,
    ParseError,
    RateLimitExceeded,
)
from .transport import HttpTransport, RequestsTransport, TransportError, TransportResponse

REQUEST_HEADERS = {
    "content-type": "application/x-www-form-urlencoded",
    "accept": "application/json",
}
NO_BODY = "no body"


def resolve_endpoint(segment: str, pair: Optional[str] = None) -> str:
    """Join an endpoint segment and optional pair into a slash-terminated path."""

    parts = [segment.strip("/")]
    if pair:
        parts.append(pair.strip("/"))
    return "/".join(parts) + "/"


class CallGateway:
    """Executes REST calls under a fixed-window rate budget."""

    def __init__(
        self,
        signer: Optional[RequestSigner] = None,
        transport: Optional[HttpTransport] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        legacy_base_url: str = DEFAULT_LEGACY_BASE_URL,
        timeout_seconds: float = 5.0,
        rate_limit: bool = True,
        max_calls_per_window: int = DEFAULT_MAX_CALLS_PER_WINDOW,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        on_parse_failure: ParseFailurePolicy = "fail",
        metrics: Optional[MetricsSink] = None,
        clock: Optional[Callable[[], int]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if on_parse_failure not in ("fail", "passthrough"):
            raise ValueError(f"unknown parse failure policy {on_parse_failure!r}")
        self.signer = signer
        self.transport = transport or RequestsTransport()
        self._owns_transport = transport is None
        self.base_url = base_url.rstrip("/")
        self.legacy_base_url = legacy_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.on_parse_failure = on_parse_failure
        self.metrics = metrics or MetricsSink()
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock or wall_clock_ms

        self.budget = CallBudget(
            max_calls_per_window=max_calls_per_window,
            window_seconds=window_seconds,
            enabled=rate_limit,
        )
        self._timer = WindowResetTimer(self.budget, logger=self.logger)
        self._closed = False
        try:
            self._timer.start()
        except RuntimeError:
            # no running loop yet; the first call starts the timer
            pass

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        transport: Optional[HttpTransport] = None,
        metrics: Optional[MetricsSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "CallGateway":
        signer = None
        if config.has_credentials:
            signer = RequestSigner(Credentials(config.key, config.secret, config.client_id))
        return cls(
            signer,
            transport,
            base_url=config.base_url,
            legacy_base_url=config.legacy_base_url,
            timeout_seconds=config.timeout_seconds,
            rate_limit=config.rate_limit,
            max_calls_per_window=config.max_calls_per_window,
            window_seconds=config.window_seconds,
            on_parse_failure=config.on_parse_failure,
            metrics=metrics,
            logger=logger,
        )

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Mapping[str, Any]] = None,
        signed: bool = False,
        legacy: bool = False,
    ) -> CallResult:
        if signed and self.signer is None:
            raise ValueError(f"{endpoint} requires credentials but the gateway has no signer")
        if not self._closed:
            self._timer.start()

        allowed = self.budget.register_attempt()
        self.metrics.incr("gateway_calls")
        self.metrics.set_gauge("gateway_calls_in_window", self.budget.calls_in_window)
        if not allowed:
            error = RateLimitExceeded(
                f"Must not exceed {self.budget.max_calls_per_window} calls per "
                f"{self.budget.window_seconds:g} s",
                detail=self.budget.snapshot(),
            )
            self._record_failure(endpoint, method, error)
            raise error

        self.budget.last_call = self._clock()
        payload = self.signer.sign(body or {}) if signed else encode_form(body)
        url = self._url(endpoint, legacy)

        self.logger.debug(
            "%s %s", method, url,
            extra={"event": "gateway_call", "endpoint": endpoint, "method": method, "signed": signed},
        )
        try:
            response = await self.transport.send(
                method, url, dict(REQUEST_HEADERS), payload or None, self.timeout_seconds
            )
        except (TransportError, asyncio.TimeoutError, OSError) as exc:
            error = NetworkError(f"{method} {endpoint} failed: {exc}", detail=exc)
            self._record_failure(endpoint, method, error)
            raise error from exc

        try:
            result = self._classify(response)
        except GatewayError as error:
            self._record_failure(endpoint, method, error)
            raise
        self.metrics.incr("gateway_success")
        return result

    def _classify(self, response: TransportResponse) -> CallResult:
        if not 200 <= response.status_code <= 299:
            raise HttpError(
                f"HTTP {response.status_code}",
                detail=response.text or NO_BODY,
                status_code=response.status_code,
            )

        try:
            body: Any = json.loads(response.text)
        except ValueError as exc:
            if self.on_parse_failure == "fail":
                raise ParseError(f"Response is not valid JSON: {exc}", detail=exc) from exc
            body = response.text

        if isinstance(body, dict):
            if body.get("status") == "error":
                reason = body.get("reason", body)
                raise ApiError(f"Exchange rejected request: {reason}", detail=reason)
            if "error" in body:
                raise ApiError(f"Exchange rejected request: {body['error']}", detail=body["error"])

        return CallResult(status_code=response.status_code, headers=dict(response.headers), body=body)

    def _url(self, endpoint: str, legacy: bool) -> str:
        base = self.legacy_base_url if legacy else self.base_url
        return f"{base}/{endpoint.lstrip('/')}"

    def _record_failure(self, endpoint: str, method: str, error: GatewayError) -> None:
        self.metrics.incr(f"gateway_{error.kind.value}")
        self.logger.warning(
            "%s %s failed: %s", method, endpoint, error,
            extra={"event": "gateway_failure", "endpoint": endpoint, "kind": error.kind.value},
        )

    def stats(self) -> Dict[str, Any]:
        return self.budget.snapshot()

    def close(self) -> None:
        """Stop the window timer and close a transport this gateway created.

        Calls already in flight are not cancelled.
        """

        self._closed = True
        self._timer.cancel()
        if self._owns_transport:
            self.transport.close()

    async def __aenter__(self) -> "CallGateway":
        if not self._closed:
            self._timer.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["CallGateway", "resolve_endpoint", "REQUEST_HEADERS"]
