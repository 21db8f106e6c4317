from __future__ import annotations

import asyncio
import logging
from copy import deepcopy
from typing import Any, Callable, Dict, NamedTuple, Optional, Tuple

from .ids import IdAllocator
from .jsonrpc import JsonRpcError, SessionTerminated, UnknownMethod
from .lifecycle import LifecycleState, SessionState
from .receivers import ReceiverRegistry, Respond

_LOGGER = logging.getLogger(__name__)

Acknowledge = Callable[[int], Any]


class RequestHandle(NamedTuple):
    id: int
    result: asyncio.Future
    handled: bool


class _Responder:
    """Callback handed to receivers; the first answer wins."""

    def __init__(self, method: str, future: Optional[asyncio.Future] = None) -> None:
        self._method = method
        self._future = future

    def __call__(self, result: Any = None, error: Any = None) -> None:
        if self._future is None:
            _LOGGER.debug("Dropping answer to notification %s", self._method)
            return
        if self._future.done():
            _LOGGER.debug("Ignoring extra answer to %s", self._method)
            return
        if error is None:
            self._future.set_result(result)
        elif isinstance(error, BaseException):
            self._future.set_exception(error)
        else:
            self._future.set_exception(JsonRpcError(-32603, str(error)))


class Dispatcher:
    """
    Routes requests and notifications for one session.

    ``initialize`` and ``exit`` are answered here; any other method fans out to
    the receiver registry. Unknown methods are a no-op unless
    ``strict_methods`` is set.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        ids: IdAllocator,
        receivers: ReceiverRegistry,
        lifecycle: LifecycleState,
        capabilities: Dict[str, Any],
        strict_methods: bool = False,
    ) -> None:
        self._loop = loop
        self._ids = ids
        self._receivers = receivers
        self._lifecycle = lifecycle
        self._capabilities = capabilities
        self._strict_methods = strict_methods
        self._builtins: Dict[str, Callable[[Respond], None]] = {
            "initialize": self._handle_initialize,
            "exit": self._handle_exit,
        }

    @property
    def state(self) -> SessionState:
        return self._lifecycle.state

    def is_closing(self) -> bool:
        return self._lifecycle.is_terminated()

    def terminate(self) -> None:
        self._lifecycle.terminate()

    def request(self, method: str, params: Optional[dict] = None, on_ack: Optional[Acknowledge] = None) -> RequestHandle:
        """
        Handle a request and return its id with an already resolved future.

        ``on_ack`` is scheduled on the loop with the request id; it never runs
        before this call returns.
        """

        future = self._loop.create_future()
        handled, request_id = self._handle(method, params, _Responder(method, future), answerable=True)
        if not future.done():
            future.set_result(None)
        if on_ack is not None:
            self._loop.call_soon(on_ack, request_id)
        return RequestHandle(request_id, future, handled)

    def notify(self, method: str, params: Optional[dict] = None) -> None:
        self._handle(method, params, _Responder(method), answerable=False)

    def _handle(self, method: str, params: Optional[dict], respond: Respond, answerable: bool) -> Tuple[bool, int]:
        if self._lifecycle.is_terminated():
            raise SessionTerminated(f"Session terminated; {method} rejected")
        message_id = self._ids.next()
        _LOGGER.debug("Dispatching %s as %s", method, message_id)
        builtin = self._builtins.get(method)
        if builtin is not None:
            builtin(respond)
            return True, message_id
        if not self._receivers.has_receivers(method):
            if self._strict_methods:
                raise UnknownMethod(method)
            _LOGGER.debug("Ignoring unhandled method %s", method)
            return False, message_id
        try:
            self._receivers.dispatch(method, params if params is not None else {}, respond)
        except Exception as exc:
            if not answerable:
                raise
            respond(error=exc)
        return True, message_id

    def _handle_initialize(self, respond: Respond) -> None:
        respond({"capabilities": deepcopy(self._capabilities)})

    def _handle_exit(self, respond: Respond) -> None:
        self._lifecycle.terminate()
        respond(None)
