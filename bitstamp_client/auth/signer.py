"""HMAC request signing for private Bitstamp endpoints.

Bitstamp authenticates private calls with three extra form fields: the API
key, a nonce and a signature. The signature is the uppercase hex HMAC-SHA256
of ``nonce + client_id + api_key`` keyed with the API secret.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol
from urllib.parse import urlencode

from .nonce import NonceGenerator


class NonceSource(Protocol):
    def next(self) -> str:  # noqa: A003
        ...


@dataclass(frozen=True)
class Credentials:
    """API key triple issued by Bitstamp under Account > Security > API Access."""

    api_key: str
    api_secret: str = field(repr=False)
    client_id: str


def _form_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_form_value(item) for item in value]
    return value


def encode_form(body: Optional[Mapping[str, Any]]) -> str:
    """Form-encode a flat mapping, skipping ``None`` values."""

    if not body:
        return ""
    compact = {key: _form_value(value) for key, value in body.items() if value is not None}
    return urlencode(compact, doseq=True)


class RequestSigner:
    """Turns a parameter mapping into an authenticated form body."""

    def __init__(self, credentials: Credentials, nonces: Optional[NonceSource] = None) -> None:
        self._credentials = credentials
        self._nonces = nonces or NonceGenerator()

    @property
    def api_key(self) -> str:
        return self._credentials.api_key

    def signature_for(self, nonce: str) -> str:
        creds = self._credentials
        message = f"{nonce}{creds.client_id}{creds.api_key}".encode("utf-8")
        digest = hmac.new(creds.api_secret.encode("utf-8"), message, hashlib.sha256)
        return digest.hexdigest().upper()

    def signed_fields(self, body: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the caller's fields merged with ``key``, ``signature`` and ``nonce``."""

        if not isinstance(body, Mapping):
            raise TypeError("body must be a key/value mapping")
        nonce = self._nonces.next()
        merged: Dict[str, Any] = dict(body)
        merged.update(
            key=self._credentials.api_key,
            signature=self.signature_for(nonce),
            nonce=nonce,
        )
        return {key: value for key, value in merged.items() if value is not None}

    def sign(self, body: Mapping[str, Any]) -> str:
        return encode_form(self.signed_fields(body))


__all__ = ["Credentials", "RequestSigner", "NonceSource", "encode_form"]
