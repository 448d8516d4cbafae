"""Bitstamp REST surface built from a declarative endpoint catalog."""

from . import pairs
from .client import BitstampClient
from .endpoints import CATALOG, ENDPOINTS, EndpointSpec

__all__ = [
    "BitstampClient",
    "EndpointSpec",
    "CATALOG",
    "ENDPOINTS",
    "pairs",
]
