"""Catalog-driven REST client for Bitstamp.

Operations are not hand-written methods: ``client.ticker(pair="btcusd")`` or
``client.invoke("buy_limit_order", "0.5", "3000", pair="btceur")`` look the
endpoint up in :data:`~bitstamp_client.api.endpoints.ENDPOINTS`, marshal the
arguments into a body, and hand it to :class:`CallGateway`.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from bitstamp_client.gateway.call_gateway import CallGateway, resolve_endpoint
from bitstamp_client.gateway.results import CallResult
from bitstamp_client.gateway.transport import HttpTransport
from bitstamp_client.infra.config import ApiConfig
from bitstamp_client.infra.metrics import MetricsSink

from .endpoints import ENDPOINTS, EndpointSpec


class BitstampClient:
    """Exposes every catalog endpoint as an awaitable operation."""

    def __init__(
        self,
        gateway: CallGateway,
        endpoints: Mapping[str, EndpointSpec] = ENDPOINTS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.gateway = gateway
        self.endpoints = dict(endpoints)
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: ApiConfig,
        transport: Optional[HttpTransport] = None,
        metrics: Optional[MetricsSink] = None,
    ) -> "BitstampClient":
        return cls(CallGateway.from_config(config, transport=transport, metrics=metrics))

    async def invoke(self, name: str, *args: Any, pair: Optional[str] = None, **params: Any) -> CallResult:
        spec = self.endpoints.get(name)
        if spec is None:
            raise KeyError(f"unknown endpoint {name!r}")
        path, body = self.prepare(spec, args, pair, params)
        return await self.gateway.call(path, spec.method, body, spec.signed, spec.legacy)

    def prepare(
        self,
        spec: EndpointSpec,
        args: Tuple[Any, ...] = (),
        pair: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[str, Optional[Dict[str, Any]]]:
        """Return the endpoint path and request body for a call to ``spec``."""

        if pair is not None and not spec.takes_pair:
            raise TypeError(f"{spec.name}() does not take a pair")
        values = self._bind(spec, args, dict(params or {}))

        path = resolve_endpoint(spec.path, spec.fixed_pair or pair)
        query = {key: values.pop(key) for key in spec.query_fields if key in values}
        query = {key: value for key, value in query.items() if value is not None}
        if query:
            path = f"{path}?{urlencode(query)}"

        if not spec.signed and not values:
            return path, None
        return path, values

    def _bind(self, spec: EndpointSpec, args: Tuple[Any, ...], params: Dict[str, Any]) -> Dict[str, Any]:
        names = spec.params
        if len(args) > len(names):
            raise TypeError(f"{spec.name}() takes {len(names)} positional arguments but {len(args)} were given")

        bound: Dict[str, Any] = dict(spec.defaults)
        for key, value in zip(names, args):
            if key in params:
                raise TypeError(f"{spec.name}() got multiple values for argument {key!r}")
            bound[key] = value

        unknown: List[str] = [key for key in params if key not in names]
        if unknown and not spec.open_body:
            raise TypeError(f"{spec.name}() got unexpected arguments: {', '.join(sorted(unknown))}")
        bound.update(params)
        return bound

    def __getattr__(self, name: str) -> Any:
        endpoints = self.__dict__.get("endpoints", {})
        if name in endpoints:
            return functools.partial(self.invoke, name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self.endpoints))

    def stats(self) -> Dict[str, Any]:
        return self.gateway.stats()

    def close(self) -> None:
        self.gateway.close()

    async def __aenter__(self) -> "BitstampClient":
        await self.gateway.__aenter__()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["BitstampClient"]
