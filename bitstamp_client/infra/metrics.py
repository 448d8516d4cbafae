"""In-process counters and gauges for the REST gateway and stream multiplexer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional


@dataclass
class MetricsSink:
    """Collects counters and gauges; optionally mirrors them to a Prometheus textfile."""

    prefix: str = "bitstamp"
    counters: Dict[str, int] = field(default_factory=dict)
    gauges: Dict[str, float] = field(default_factory=dict)
    textfile: Optional[Path] = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def incr(self, name: str, value: int = 1) -> None:
        key = self._key(name)
        self.counters[key] = self.counters.get(key, 0) + value
        self._write_textfile()

    def set_gauge(self, name: str, value: float) -> None:
        self.gauges[self._key(name)] = float(value)
        self._write_textfile()

    def counter(self, name: str) -> int:
        return self.counters.get(self._key(name), 0)

    def export(self) -> Dict[str, float]:
        return {**self.counters, **self.gauges}

    def _key(self, name: str) -> str:
        return f"{self.prefix}_{name}" if self.prefix else name

    def _write_textfile(self) -> None:
        if self.textfile is None:
            return
        lines = [f"{name} {int(value)}" for name, value in sorted(self.counters.items())]
        lines += [f"{name} {value}" for name, value in sorted(self.gauges.items())]
        try:
            self.textfile.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self.textfile.with_suffix(".tmp")
            temp_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
            os.replace(temp_path, self.textfile)
        except OSError as exc:
            self.logger.warning("Could not write metrics textfile %s: %s", self.textfile, exc)
