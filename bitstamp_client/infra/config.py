"""Config loading for the REST gateway and the streaming multiplexer."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

import yaml

ParseFailurePolicy = Literal["fail", "passthrough"]

DEFAULT_BASE_URL = "https://www.bitstamp.net/api/v2"
DEFAULT_LEGACY_BASE_URL = "https://www.bitstamp.net/api"
DEFAULT_WEBSOCKET_URL = "wss://ws.bitstamp.net"


@dataclass
class ApiConfig:
    key: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)
    client_id: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    legacy_base_url: str = DEFAULT_LEGACY_BASE_URL
    timeout_seconds: float = 5.0
    rate_limit: bool = True
    max_calls_per_window: int = 60
    window_seconds: float = 60.0
    on_parse_failure: ParseFailurePolicy = "fail"

    @property
    def has_credentials(self) -> bool:
        return bool(self.key and self.secret and self.client_id)


@dataclass
class StreamConfig:
    websocket_url: str = DEFAULT_WEBSOCKET_URL
    max_retries: int = 10
    connect_timeout_seconds: float = 1.0


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    log_level: str = "INFO"


def load_config(path: Optional[str | Path] = None) -> AppConfig:
    """Build an :class:`AppConfig` from YAML, with credentials overridable by env vars.

    A missing ``path`` yields the defaults. ``BITSTAMP_KEY``,
    ``BITSTAMP_SECRET`` and ``BITSTAMP_CLIENT_ID`` win over values in the file.
    """

    raw: dict = {}
    if path is not None:
        resolved = Path(path).expanduser().resolve()
        with resolved.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    api = raw.get("api", {})
    stream = raw.get("stream", {})
    policy = api.get("on_parse_failure", "fail")
    if policy not in ("fail", "passthrough"):
        raise ValueError(f"on_parse_failure must be 'fail' or 'passthrough', got {policy!r}")

    return AppConfig(
        api=ApiConfig(
            key=env_or_default("BITSTAMP_KEY", api.get("key")),
            secret=env_or_default("BITSTAMP_SECRET", api.get("secret")),
            client_id=env_or_default("BITSTAMP_CLIENT_ID", _as_str(api.get("client_id"))),
            base_url=api.get("base_url", DEFAULT_BASE_URL),
            legacy_base_url=api.get("legacy_base_url", DEFAULT_LEGACY_BASE_URL),
            timeout_seconds=float(api.get("timeout_seconds", 5.0)),
            rate_limit=bool(api.get("rate_limit", True)),
            max_calls_per_window=int(api.get("max_calls_per_window", 60)),
            window_seconds=float(api.get("window_seconds", 60.0)),
            on_parse_failure=policy,
        ),
        stream=StreamConfig(
            websocket_url=stream.get("websocket_url", DEFAULT_WEBSOCKET_URL),
            max_retries=int(stream.get("max_retries", 10)),
            connect_timeout_seconds=float(stream.get("connect_timeout_seconds", 1.0)),
        ),
        log_level=raw.get("log_level", "INFO"),
    )


def env_or_default(key: str, default: Optional[str]) -> Optional[str]:
    return os.getenv(key) or default


def _as_str(value) -> Optional[str]:
    # client ids are numeric and YAML parses them as ints
    return None if value is None else str(value)


__all__ = [
    "load_config",
    "AppConfig",
    "ApiConfig",
    "StreamConfig",
    "ParseFailurePolicy",
    "env_or_default",
]
