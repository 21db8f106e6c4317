from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

from .config import ServerConfig
from .dispatcher import Acknowledge, Dispatcher, RequestHandle
from .ids import IdAllocator
from .jsonrpc import JsonRpcError, is_notification, is_request, make_error_response, make_result_response
from .lifecycle import Launcher, LifecycleState, SessionState
from .progress import ProgressHandle, ProgressTracker
from .receivers import Receiver, ReceiverRegistry

_LOGGER = logging.getLogger(__name__)

Outbound = Callable[[dict], Any]


class NotifyServer:
    """
    A single in-process notify session: one peer, one id space, one receiver table.

    Messages for the peer (progress notifications) go through ``outbound``;
    deferred work is scheduled on ``loop``.
    """

    def __init__(
        self,
        config: ServerConfig,
        loop: asyncio.AbstractEventLoop,
        outbound: Outbound,
        launcher: Optional[Launcher] = None,
    ) -> None:
        self.config = config
        self.loop = loop
        self.outbound = outbound
        self.ids = IdAllocator()
        self.receivers = ReceiverRegistry()
        self.lifecycle = LifecycleState()
        self.dispatcher = Dispatcher(
            loop,
            self.ids,
            self.receivers,
            self.lifecycle,
            config.capabilities,
            strict_methods=config.strict_methods,
        )
        self.progress = ProgressTracker(self.ids, outbound, lifecycle=self.lifecycle, strict=config.strict_progress)
        self._launcher = launcher or self.ids.next

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def state(self) -> SessionState:
        return self.lifecycle.state

    def start(self) -> int:
        return self.lifecycle.start(self._launcher)

    def request(self, method: str, params: Optional[dict] = None, on_ack: Optional[Acknowledge] = None) -> RequestHandle:
        return self.dispatcher.request(method, params, on_ack)

    def notify(self, method: str, params: Optional[dict] = None) -> None:
        self.dispatcher.notify(method, params)

    def create_receiver(self, method: str, handler: Receiver) -> int:
        return self.receivers.register(method, handler)

    def remove_receiver(self, subscription_id: int) -> bool:
        return self.receivers.unregister(subscription_id)

    def create_progress(self, title: str, message: str = "", percentage: Optional[int] = None) -> ProgressHandle:
        return self.progress.begin(title, message, percentage)

    def is_closing(self) -> bool:
        return self.dispatcher.is_closing()

    def terminate(self) -> None:
        self.dispatcher.terminate()

    def handle_message(self, message: dict) -> Optional[dict]:
        """
        Feed an already decoded JSON-RPC message through the dispatcher.

        Requests get a response keyed by the peer's id; notifications and
        anything unrecognised return ``None``.
        """

        _LOGGER.debug("Received message: %s", message)
        params = message.get("params")
        if not isinstance(params, dict):
            params = None
        if is_request(message):
            try:
                handle = self.request(message["method"], params)
                result = handle.result.result()
            except JsonRpcError as exc:
                return exc.to_response(message["id"])
            except Exception as exc:
                _LOGGER.warning("Request %s failed: %s", message["method"], exc)
                return make_error_response(message["id"], -32603, str(exc) or type(exc).__name__)
            return make_result_response(message["id"], result)
        if is_notification(message):
            try:
                self.notify(message["method"], params)
            except JsonRpcError as exc:
                _LOGGER.warning("Dropped notification %s: %s", message["method"], exc)
            except Exception as exc:
                _LOGGER.warning("Notification %s failed: %s", message["method"], exc)
            return None
        _LOGGER.debug("Ignoring unknown payload: %s", message)
        return None
