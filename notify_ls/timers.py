from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

_LOGGER = logging.getLogger(__name__)


class PeriodicTimer:
    """Calls ``callback`` every ``interval`` seconds on the loop until stopped."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], Any],
        delay: Optional[float] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._loop = loop
        self._interval = interval
        self._delay = interval if delay is None else delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None
        self._stopped = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> "PeriodicTimer":
        if self._handle is not None or self._stopped:
            return self
        self._handle = self._loop.call_later(self._delay, self._tick)
        return self

    def stop(self) -> None:
        self._stopped = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        self.ticks += 1
        try:
            self._callback()
        except Exception:
            _LOGGER.exception("Timer callback failed; stopping timer")
            self.stop()
            return
        if not self._stopped:
            self._handle = self._loop.call_later(self._interval, self._tick)
