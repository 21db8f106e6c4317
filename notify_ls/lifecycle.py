from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from .jsonrpc import SessionStartError, SessionTerminated

_LOGGER = logging.getLogger(__name__)

Launcher = Callable[[], Optional[int]]


class SessionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    TERMINATED = "terminated"


class LifecycleState:
    """Started/stopped flags plus the single live session id."""

    def __init__(self) -> None:
        self._started = False
        self._stopped = False
        self._session_id: Optional[int] = None

    @property
    def started(self) -> bool:
        return self._started

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def session_id(self) -> Optional[int]:
        return self._session_id

    @property
    def state(self) -> SessionState:
        if self._stopped:
            return SessionState.TERMINATED
        if self._started:
            return SessionState.INITIALIZED
        return SessionState.UNINITIALIZED

    def start(self, launcher: Launcher) -> int:
        """
        Launch the session once and return its id.

        Repeated calls return the existing id without invoking ``launcher``
        again. A launcher that raises or returns ``None`` leaves the state
        untouched and surfaces as ``SessionStartError``.
        """

        if self._stopped:
            raise SessionTerminated("Cannot start a terminated session")
        if self._started:
            assert self._session_id is not None
            return self._session_id
        try:
            session_id = launcher()
        except Exception as exc:
            _LOGGER.error("Failed to start session: %s", exc)
            raise SessionStartError(f"Failed to start session: {exc}") from exc
        if session_id is None:
            _LOGGER.error("Failed to start session: launcher returned no id")
            raise SessionStartError()
        self._started = True
        self._session_id = session_id
        _LOGGER.info("Session %s started", session_id)
        return session_id

    def terminate(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        _LOGGER.info("Session %s terminated", self._session_id)

    def is_terminated(self) -> bool:
        return self._stopped
