from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from typing import Optional, Sequence, TextIO

from .config import ServerConfig, load_config
from .demo import REFERENCES_METHOD, register_indexing_demo
from .jsonrpc import make_result_response
from .server import NotifyServer
from .utils.logging_utils import configure_logging

_LOGGER = logging.getLogger(__name__)


def _line_writer(stream: TextIO):
    def _write(message: dict) -> None:
        stream.write(json.dumps(message, separators=(",", ":"), ensure_ascii=False) + "\n")
        stream.flush()

    return _write


async def run_session(
    config: ServerConfig,
    total_files: Optional[int] = None,
    seed: Optional[int] = None,
    stream: Optional[TextIO] = None,
) -> NotifyServer:
    """Run one demo session: initialize, index with progress, exit."""
    loop = asyncio.get_running_loop()
    write = _line_writer(stream or sys.stdout)
    server = NotifyServer(config, loop, outbound=write)
    session_id = server.start()
    _LOGGER.info("%s session %s started", server.name, session_id)

    init = server.request("initialize", {}, on_ack=lambda request_id: _LOGGER.debug("initialize %s acknowledged", request_id))
    write(make_result_response(init.id, init.result.result()))

    finished = loop.create_future()
    register_indexing_demo(
        server,
        loop,
        total_files=total_files,
        rng=random.Random(seed),
        on_finish=lambda: finished.done() or finished.set_result(None),
    )
    server.notify(REFERENCES_METHOD, {})
    await finished

    server.request("exit")
    return server


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="In-process notify language server demo.")
    parser.add_argument("--config", help="Path to an optional JSON config file.")
    parser.add_argument("--files", type=int, help="Number of files the indexing demo walks through.")
    parser.add_argument("--seed", type=int, help="Seed for the random file count.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """CLI bootstrapper: parse args and run the demo session."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)
    if args.files is not None and args.files < 1:
        parser.error("--files must be at least 1")
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))
    configure_logging(config.log_level, config.structured_logging)
    asyncio.run(run_session(config, total_files=args.files, seed=args.seed))


if __name__ == "__main__":  # pragma: no cover
    main()
