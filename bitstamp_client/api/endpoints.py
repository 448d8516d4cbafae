"""Declarative catalog of Bitstamp REST endpoints.

Each :class:`EndpointSpec` fixes the path, HTTP method, whether the call is
signed, which API base it lives on, and the names of the parameters it
accepts. :class:`~bitstamp_client.api.client.BitstampClient` turns these rows
into callable operations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

GET = "GET"
POST = "POST"


@dataclass(frozen=True)
class EndpointSpec:
    name: str
    path: str
    method: str = POST
    signed: bool = True
    legacy: bool = False
    fields: Tuple[str, ...] = ()
    query_fields: Tuple[str, ...] = ()
    takes_pair: bool = False
    fixed_pair: Optional[str] = None
    # accepts arbitrary body fields beyond ``fields``
    open_body: bool = False
    defaults: Dict[str, Any] = field(default_factory=dict)

    @property
    def params(self) -> Tuple[str, ...]:
        """Parameter names in positional order."""

        return self.query_fields + self.fields


def _public(name: str, path: str, query_fields: Tuple[str, ...] = (), **kwargs: Any) -> EndpointSpec:
    return EndpointSpec(name, path, method=GET, signed=False, query_fields=query_fields, **kwargs)


def _private(name: str, path: str, *fields: str, **kwargs: Any) -> EndpointSpec:
    return EndpointSpec(name, path, fields=fields, **kwargs)


_TRANSFER = ("amount", "currency", "subAccount")
_LIMIT_ORDER = ("amount", "price", "limit_price", "daily_order")

CATALOG: Tuple[EndpointSpec, ...] = (
    # public market data
    _public("ticker", "ticker", takes_pair=True),
    _public("ticker_hour", "ticker_hour", takes_pair=True),
    _public("order_book", "order_book", takes_pair=True),
    _public("transactions", "transactions", ("time",), takes_pair=True, defaults={"time": "hour"}),
    _public("ohlc_data", "ohlc", ("step", "limit", "start", "end"), takes_pair=True, defaults={"step": 60, "limit": 100}),
    _public("conversion_rate", "eur_usd"),
    # account
    _private("balance", "balance", takes_pair=True),
    _private("user_transactions", "user_transactions", "offset", "limit", "sort", takes_pair=True),
    _private("crypto_transactions", "crypto-transactions", "offset", "limit"),
    # orders
    _private("open_orders", "open_orders", takes_pair=True),
    _private("open_orders_all", "open_orders", fixed_pair="all"),
    _private("order_status", "order_status", "id"),
    _private("cancel_order", "cancel_order", "id"),
    _private("cancel_all_orders", "cancel_all_orders"),
    _private("buy_limit_order", "buy", *_LIMIT_ORDER, takes_pair=True),
    _private("buy_market_order", "buy/market", "amount", takes_pair=True),
    _private("buy_instant_order", "buy/instant", "amount", takes_pair=True),
    _private("sell_limit_order", "sell", *_LIMIT_ORDER, takes_pair=True),
    _private("sell_market_order", "sell/market", "amount", takes_pair=True),
    _private("sell_instant_order", "sell/instant", "amount", takes_pair=True),
    # crypto withdrawals
    _private("withdrawal_requests", "withdrawal_requests", "timedelta", legacy=True),
    _private("bitcoin_withdrawal", "bitcoin_withdrawal", "amount", "address", "instant", legacy=True),
    _private("bch_withdrawal", "bch_withdrawal", "amount", "address"),
    _private("litecoin_withdrawal", "ltc_withdrawal", "amount", "address"),
    _private("ethereum_withdrawal", "eth_withdrawal", "amount", "address"),
    _private("ripple_withdrawal", "ripple_withdrawal", "amount", "address", "currency", legacy=True),
    _private("xrp_withdrawal", "xrp_withdrawal", "amount", "address", "destination_tag"),
    # deposit addresses
    _private("bitcoin_deposit_address", "bitcoin_deposit_address", legacy=True),
    _private("bch_deposit_address", "bch_address"),
    _private("litecoin_deposit_address", "ltc_address"),
    _private("ethereum_deposit_address", "eth_address"),
    _private("ripple_deposit_address", "ripple_address", legacy=True),
    _private("xrp_deposit_address", "xrp_address"),
    _private("unconfirmed_bitcoin_deposits", "unconfirmed_btc", legacy=True),
    # sub accounts
    _private("transfer_sub_to_main", "transfer-to-main", *_TRANSFER),
    _private("transfer_main_to_sub", "transfer-from-main", *_TRANSFER),
    # bank withdrawals
    _private("open_bank_withdrawal", "withdrawal/open", open_body=True),
    _private("bank_withdrawal_status", "withdrawal/status", "id"),
    _private("cancel_bank_withdrawal", "withdrawal/cancel", "id"),
    # liquidation addresses
    _private("new_liquidation_address", "liquidation_address/new", "liquidation_currency"),
    _private("liquidation_address_info", "liquidation_address/info", "address"),
)


def build_index(specs: Iterable[EndpointSpec]) -> Dict[str, EndpointSpec]:
    index: Dict[str, EndpointSpec] = {}
    for spec in specs:
        if spec.name in index:
            raise ValueError(f"duplicate endpoint name {spec.name!r}")
        index[spec.name] = spec
    return index


ENDPOINTS = build_index(CATALOG)

__all__ = ["EndpointSpec", "CATALOG", "ENDPOINTS", "build_index", "GET", "POST"]
