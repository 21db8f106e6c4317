"""
Timer-driven indexing receiver for ``textDocument/references``.

Each call begins an "indexing" progress at 0% and walks it to 100% on a
periodic timer, one simulated file per tick.
"""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Any, Callable, Optional

from .server import NotifyServer
from .timers import PeriodicTimer

_LOGGER = logging.getLogger(__name__)

REFERENCES_METHOD = "textDocument/references"


def register_indexing_demo(
    server: NotifyServer,
    loop: asyncio.AbstractEventLoop,
    *,
    total_files: Optional[int] = None,
    delay: Optional[float] = None,
    interval: Optional[float] = None,
    rng: Optional[random.Random] = None,
    on_finish: Optional[Callable[[], Any]] = None,
) -> int:
    """Register the indexing receiver and return its subscription id."""

    if total_files is not None and total_files < 1:
        raise ValueError("total_files must be at least 1")
    delay = server.config.progress_delay if delay is None else delay
    interval = server.config.progress_interval if interval is None else interval
    rng = rng or random.Random()

    def _on_references(params: dict, respond) -> None:
        nfiles = total_files if total_files is not None else rng.randint(15, 60)
        progress = server.create_progress("indexing", "", 0)
        indexed = 0

        def _tick() -> None:
            nonlocal indexed
            if server.is_closing():
                timer.stop()
                return
            indexed += 1
            progress.update(
                message=f"{indexed} / {nfiles}",
                percentage=math.floor(indexed / nfiles * 100),
            )
            if progress.percentage == 100:
                progress.finish("done")
                timer.stop()
                _LOGGER.info("Indexed %s files", nfiles)
                if on_finish is not None:
                    on_finish()

        timer = PeriodicTimer(loop, interval, _tick, delay=delay)
        timer.start()

    return server.create_receiver(REFERENCES_METHOD, _on_references)
