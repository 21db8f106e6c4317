from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from .ids import IdAllocator
from .jsonrpc import PROGRESS_METHOD, InvalidProgressMutation, SessionTerminated, make_notification
from .lifecycle import LifecycleState

_LOGGER = logging.getLogger(__name__)

Emit = Callable[[dict], Any]

BEGIN = "begin"
REPORT = "report"
END = "end"

_MUTABLE_FIELDS = ("message", "percentage")


def _check_percentage(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
        raise ValueError(f"percentage must be an integer between 0 and 100, got {value!r}")
    return value


class ProgressHandle:
    """
    One unit of observable work, mutated by whoever created it.

    Every mutation is pushed to the peer as a ``$/progress`` notification. After
    ``finish`` the handle is terminal.
    """

    def __init__(self, tracker: "ProgressTracker", token: int, title: str, message: str, percentage: Optional[int]):
        self._tracker = tracker
        self._token = token
        self._title = title
        self._kind = BEGIN
        self._message = message
        self._percentage = percentage

    @property
    def token(self) -> int:
        return self._token

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def title(self) -> str:
        return self._title

    @property
    def message(self) -> str:
        return self._message

    @property
    def percentage(self) -> Optional[int]:
        return self._percentage

    @property
    def finished(self) -> bool:
        return self._kind == END

    def snapshot(self) -> Dict[str, Any]:
        value: Dict[str, Any] = {
            "kind": self._kind,
            "id": self._token,
            "title": self._title,
            "message": self._message,
        }
        if self._percentage is not None:
            value["percentage"] = self._percentage
        return value

    def update(self, **fields: Any) -> None:
        """Merge ``message`` and/or ``percentage`` and report. Other keys are ignored."""
        if self.finished:
            self._tracker._reject(self, "update")
            return
        changes = {key: value for key, value in fields.items() if key in _MUTABLE_FIELDS}
        ignored = set(fields) - set(changes)
        if ignored:
            _LOGGER.debug("Ignoring read-only progress fields %s for %s", sorted(ignored), self._token)
        if not changes:
            return
        if "percentage" in changes:
            self._percentage = _check_percentage(changes["percentage"])
        if "message" in changes:
            self._message = changes["message"]
        self._kind = REPORT
        self._tracker._emit(self)

    def finish(self, message: Optional[str] = None) -> None:
        if self.finished:
            self._tracker._reject(self, "finish")
            return
        self._kind = END
        self._message = message
        self._tracker._emit(self)

    def __repr__(self) -> str:
        return f"ProgressHandle(token={self._token}, kind={self._kind!r}, title={self._title!r})"


class ProgressTracker:
    """
    Creates progress handles; it keeps no reference to them afterwards.

    Once ``lifecycle`` is terminated no new progress can begin and emissions
    from handles still alive are dropped.
    """

    def __init__(
        self,
        ids: IdAllocator,
        emit: Emit,
        lifecycle: Optional[LifecycleState] = None,
        strict: bool = False,
    ) -> None:
        self._ids = ids
        self._emit_message = emit
        self._lifecycle = lifecycle
        self._strict = strict

    def begin(self, title: str, message: str = "", percentage: Optional[int] = None) -> ProgressHandle:
        percentage = _check_percentage(percentage)
        if self._terminated():
            raise SessionTerminated(f"Session terminated; progress {title!r} rejected")
        handle = ProgressHandle(self, self._ids.next(), title, message, percentage)
        self._emit(handle)
        return handle

    def _terminated(self) -> bool:
        return self._lifecycle is not None and self._lifecycle.is_terminated()

    def _emit(self, handle: ProgressHandle) -> None:
        if self._terminated():
            _LOGGER.warning("Dropping progress %s %s after session end", handle.token, handle.kind)
            return
        _LOGGER.debug("Progress %s %s", handle.token, handle.kind)
        self._emit_message(make_notification(PROGRESS_METHOD, {"token": handle.token, "value": handle.snapshot()}))

    def _reject(self, handle: ProgressHandle, operation: str) -> None:
        if self._strict:
            raise InvalidProgressMutation(handle.token, operation)
        _LOGGER.warning("Ignoring %s on finished progress %s", operation, handle.token)
