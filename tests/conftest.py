from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from notify_ls.config import ServerConfig  # noqa: E402
from notify_ls.server import NotifyServer  # noqa: E402


def drain(loop: asyncio.AbstractEventLoop) -> None:
    """Run every callback already scheduled with call_soon."""
    loop.run_until_complete(asyncio.sleep(0))
    loop.run_until_complete(asyncio.sleep(0))


@pytest.fixture
def loop():
    event_loop = asyncio.new_event_loop()
    try:
        yield event_loop
    finally:
        event_loop.close()


@pytest.fixture
def sent() -> List[dict]:
    return []


@pytest.fixture
def server(loop, sent) -> NotifyServer:
    return NotifyServer(ServerConfig(), loop, outbound=sent.append)
