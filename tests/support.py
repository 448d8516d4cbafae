"""Stub collaborators shared by the test suites."""

import json
from typing import Any, Dict, List, Optional

from bitstamp_client.auth.signer import Credentials, RequestSigner
from bitstamp_client.gateway.transport import TransportResponse

CREDENTIALS = Credentials(api_key="abc3def4ghi5jkl6mno7", api_secret="abcdefghijklmno", client_id="123123")


class CountingNonce:
    def __init__(self, start: int = 15390163434170000) -> None:
        self.value = start

    def next(self) -> str:
        self.value += 1
        return str(self.value)


def make_signer() -> RequestSigner:
    return RequestSigner(CREDENTIALS, CountingNonce())


def json_response(payload: Any, status_code: int = 200) -> TransportResponse:
    return TransportResponse(status_code=status_code, headers={"Content-Type": "application/json"}, text=json.dumps(payload))


class StubTransport:
    """Replays canned outcomes; the last one repeats."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes: List[Any] = list(outcomes) or [json_response({})]
        self.calls: List[Dict[str, Any]] = []

    async def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str],
        timeout: float,
    ) -> TransportResponse:
        self.calls.append({"method": method, "url": url, "headers": headers, "body": body, "timeout": timeout})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeSocket:
    """Stands in for ReconnectingSocket; frames are injected with ``deliver``."""

    def __init__(self) -> None:
        self.on_open = None
        self.on_close = None
        self.on_message = None
        self.sent: List[Dict[str, Any]] = []
        self.started = False
        self.closed = False

    def start(self) -> None:
        self.started = True

    def send(self, frame: str) -> None:
        self.sent.append(json.loads(frame))

    async def close(self) -> None:
        self.closed = True
        if self.on_close:
            self.on_close()

    def deliver(self, frame: Any) -> None:
        self.on_message(frame if isinstance(frame, (str, bytes)) else json.dumps(frame))


class SocketFactory:
    def __init__(self) -> None:
        self.sockets: List[FakeSocket] = []

    def __call__(self) -> FakeSocket:
        sock = FakeSocket()
        self.sockets.append(sock)
        return sock

    @property
    def current(self) -> FakeSocket:
        return self.sockets[-1]
