"""Request authentication: nonces and HMAC signatures."""

from .nonce import NonceGenerator
from .signer import Credentials, RequestSigner, encode_form

__all__ = [
    "NonceGenerator",
    "Credentials",
    "RequestSigner",
    "encode_form",
]
