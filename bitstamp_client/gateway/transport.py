"""HTTP transport used by the gateway.

The gateway only needs ``send``; :class:`RequestsTransport` runs a
``requests.Session`` on a worker thread so calls do not block the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

import requests


class TransportError(Exception):
    """The request could not be completed (connection, DNS, timeout...)."""


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""


class HttpTransport(Protocol):
    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str],
        timeout: float,
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """Default transport backed by :mod:`requests`."""

    def __init__(self, session: Optional[requests.Session] = None, logger: Optional[logging.Logger] = None) -> None:
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str],
        timeout: float,
    ) -> TransportResponse:
        return await asyncio.to_thread(self._send_blocking, method, url, headers, body, timeout)

    def _send_blocking(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str],
        timeout: float,
    ) -> TransportResponse:
        try:
            response = self.session.request(method, url, headers=headers, data=body, timeout=timeout)
        except requests.RequestException as exc:
            self.logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(str(exc)) from exc
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpTransport", "RequestsTransport", "TransportError", "TransportResponse"]
