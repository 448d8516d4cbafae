"""Infrastructure utilities for configuration, logging, and metrics."""

from .config import ApiConfig, AppConfig, StreamConfig, load_config
from .logging import configure_logging
from .metrics import MetricsSink

__all__ = [
    "configure_logging",
    "load_config",
    "ApiConfig",
    "AppConfig",
    "StreamConfig",
    "MetricsSink",
]
