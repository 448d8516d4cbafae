"""Fixed-window call budget and the timer that resets it."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_MAX_CALLS_PER_WINDOW = 60
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass
class CallBudget:
    """Counts calls per window. Only touched from the event loop thread."""

    max_calls_per_window: int = DEFAULT_MAX_CALLS_PER_WINDOW
    window_seconds: float = DEFAULT_WINDOW_SECONDS
    enabled: bool = True
    total_calls_made: int = 0
    calls_in_window: int = 0
    last_call: Optional[int] = None

    def register_attempt(self) -> bool:
        """Count an attempt and return whether it may be sent.

        Rejected attempts are counted too; the window allows at most
        ``max_calls_per_window`` attempts through.
        """

        self.total_calls_made += 1
        self.calls_in_window += 1
        return not self.enabled or self.calls_in_window <= self.max_calls_per_window

    def reset_window(self) -> None:
        self.calls_in_window = 0

    def snapshot(self) -> Dict[str, Any]:
        return {
            "total_calls_made": self.total_calls_made,
            "calls_in_window": self.calls_in_window,
            "last_call": self.last_call,
        }


class WindowResetTimer:
    """Background task that zeroes ``budget.calls_in_window`` every window."""

    def __init__(self, budget: CallBudget, logger: Optional[logging.Logger] = None) -> None:
        self.budget = budget
        self.logger = logger or logging.getLogger(__name__)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the timer on the running loop; no-op if already running."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="bitstamp-window-reset")

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.budget.window_seconds)
            self.logger.debug(
                "Resetting call window",
                extra={"event": "window_reset", "calls_in_window": self.budget.calls_in_window},
            )
            self.budget.reset_window()


__all__ = ["CallBudget", "WindowResetTimer", "DEFAULT_MAX_CALLS_PER_WINDOW", "DEFAULT_WINDOW_SECONDS"]
