"""Bitstamp websocket v2 channel kinds and control event names."""

LIVE_TRADES = "live_trades"
LIVE_ORDERS = "live_orders"
ORDER_BOOK = "order_book"
DETAIL_ORDER_BOOK = "detail_order_book"
DIFF_ORDER_BOOK = "diff_order_book"

CHANNEL_KINDS = (LIVE_TRADES, LIVE_ORDERS, ORDER_BOOK, DETAIL_ORDER_BOOK, DIFF_ORDER_BOOK)

# Topics whose payloads carry amount and price and get a derived ``cost``.
COSTED_KINDS = (LIVE_TRADES, LIVE_ORDERS)

EVENT_SUBSCRIBE = "bts:subscribe"
EVENT_UNSUBSCRIBE = "bts:unsubscribe"
EVENT_SUBSCRIPTION_SUCCEEDED = "bts:subscription_succeeded"
EVENT_UNSUBSCRIPTION_SUCCEEDED = "bts:unsubscription_succeeded"
EVENT_REQUEST_RECONNECT = "bts:request_reconnect"

CONNECTED = "connected"
DISCONNECTED = "disconnected"
ERROR = "error"
LIFECYCLE_EVENTS = (CONNECTED, DISCONNECTED, ERROR)


def topic_for(kind: str, instrument: str) -> str:
    return f"{kind}_{instrument}"


def is_costed(topic: str) -> bool:
    return topic.startswith(COSTED_KINDS)
