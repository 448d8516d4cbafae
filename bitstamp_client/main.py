"""Command line entry point: stream a topic or run one REST operation."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import signal
from typing import Any, Dict, List, Optional

from bitstamp_client.api import pairs
from bitstamp_client.api.client import BitstampClient
from bitstamp_client.gateway.results import GatewayError
from bitstamp_client.infra.config import AppConfig, load_config
from bitstamp_client.infra.logging import configure_logging
from bitstamp_client.infra.metrics import MetricsSink
from bitstamp_client.streaming import channels
from bitstamp_client.streaming.multiplexer import ChannelMultiplexer


def _parse_params(items: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep:
            raise SystemExit(f"expected key=value, got {item!r}")
        params[key] = value
    return params


async def run_stream(cfg: AppConfig, kind: str, pair: str, duration: Optional[float]) -> None:
    logger = logging.getLogger("bitstamp.stream")
    stop_event = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            asyncio.get_running_loop().add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows/limited environments
            pass

    mux = ChannelMultiplexer.from_config(cfg.stream)

    def on_connected() -> None:
        topic = mux.subscribe(kind, pair)
        logger.info("Subscribed to %s", topic, extra={"event": "subscribed", "topic": topic})

    def on_event(payload: Dict[str, Any]) -> None:
        print(json.dumps(payload, default=str), flush=True)

    mux.on(channels.CONNECTED, on_connected)
    mux.on(channels.topic_for(kind, pair), on_event)
    mux.on(channels.ERROR, lambda exc: logger.warning("Bad frame: %s", exc, extra={"event": "bad_frame"}))

    async with mux:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=duration)
        except asyncio.TimeoutError:
            pass


async def run_call(cfg: AppConfig, endpoint: str, pair: Optional[str], params: Dict[str, str]) -> int:
    metrics = MetricsSink()
    async with BitstampClient.from_config(cfg.api, metrics=metrics) as client:
        try:
            result = await client.invoke(endpoint, pair=pair, **params)
        except GatewayError as exc:
            print(json.dumps({"error": exc.kind.value, "message": str(exc), "detail": exc.detail}, default=str))
            return 1
        print(json.dumps({"status": result.status_code, "body": result.body}, default=str, indent=2))
        logging.getLogger("bitstamp.call").info("Call stats", extra={"event": "call_stats", **client.stats()})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Bitstamp API client")
    parser.add_argument("--config", default=None, help="YAML config file")
    sub = parser.add_subparsers(dest="command", required=True)

    stream = sub.add_parser("stream", help="Print live events for one topic")
    stream.add_argument("--channel", default=channels.LIVE_TRADES, choices=channels.CHANNEL_KINDS)
    stream.add_argument("--pair", default=pairs.BTC_USD, choices=sorted(pairs.ALL_PAIRS))
    stream.add_argument("--duration", type=float, default=None, help="Stop after N seconds")

    call = sub.add_parser("call", help="Run one REST operation from the endpoint catalog")
    call.add_argument("endpoint")
    call.add_argument("--pair", default=None, choices=sorted(pairs.ALL_PAIRS))
    call.add_argument("params", nargs="*", help="key=value body parameters")

    args = parser.parse_args(argv)
    cfg = load_config(args.config)
    configure_logging(cfg.log_level)

    if args.command == "stream":
        asyncio.run(run_stream(cfg, args.channel, args.pair, args.duration))
        return 0
    return asyncio.run(run_call(cfg, args.endpoint, args.pair, _parse_params(args.params)))


if __name__ == "__main__":
    raise SystemExit(main())
