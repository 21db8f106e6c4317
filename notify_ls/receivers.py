from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

_LOGGER = logging.getLogger(__name__)

Respond = Callable[..., None]
Receiver = Callable[[dict, Respond], Any]


class ReceiverRegistry:
    """
    Maps method names to the ordered receivers that answer them.

    Every receiver registered for a method sees every call to it; there is no
    first-match short circuit. A method with no receivers is a silent no-op.
    """

    def __init__(self) -> None:
        self._receivers: Dict[str, Dict[int, Receiver]] = {}
        self._subscriptions: Dict[int, str] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def register(self, method: str, handler: Receiver) -> int:
        with self._lock:
            subscription_id = next(self._counter)
            self._receivers.setdefault(method, {})[subscription_id] = handler
            self._subscriptions[subscription_id] = method
        _LOGGER.debug("Registered receiver %s for %s", subscription_id, method)
        return subscription_id

    def unregister(self, subscription_id: int) -> bool:
        with self._lock:
            method = self._subscriptions.pop(subscription_id, None)
            if method is None:
                return False
            handlers = self._receivers.get(method, {})
            handlers.pop(subscription_id, None)
            if not handlers:
                self._receivers.pop(method, None)
        _LOGGER.debug("Removed receiver %s for %s", subscription_id, method)
        return True

    def has_receivers(self, method: str) -> bool:
        with self._lock:
            return bool(self._receivers.get(method))

    def methods(self) -> List[str]:
        with self._lock:
            return list(self._receivers)

    def dispatch(self, method: str, params: dict, respond: Respond) -> int:
        """
        Invoke every receiver for ``method`` in registration order.

        The receiver list is snapshotted first, so receivers may register or
        unregister while the fan-out runs. A receiver that raises does not stop
        the others; the first exception is re-raised once all have run. A
        non-None return value is passed to ``respond`` like an explicit answer.

        Returns the number of receivers invoked.
        """

        with self._lock:
            snapshot: List[Tuple[int, Receiver]] = list(self._receivers.get(method, {}).items())
        if not snapshot:
            _LOGGER.debug("No receivers registered for %s", method)
            return 0
        first_error: Optional[Exception] = None
        for subscription_id, handler in snapshot:
            try:
                result = handler(params, respond)
                if result is not None:
                    respond(result)
            except Exception as exc:
                _LOGGER.exception("Receiver %s for %s failed", subscription_id, method)
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
        return len(snapshot)
