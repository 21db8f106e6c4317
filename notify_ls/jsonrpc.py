from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

PROGRESS_METHOD = "$/progress"


@dataclass
class JsonRpcError(Exception):
    code: int
    message: str
    data: Optional[Any] = None

    def __str__(self) -> str:
        return self.message

    def to_response(self, message_id: Any) -> dict:
        return make_error_response(message_id, self.code, self.message, self.data)


class SessionTerminated(JsonRpcError):
    """Raised for any dispatch attempted after the session processed ``exit``."""

    def __init__(self, message: str = "Session has been terminated", data: Optional[Any] = None) -> None:
        super().__init__(-32600, message, data)


class UnknownMethod(JsonRpcError):
    """Only raised when the dispatcher runs with strict method checking."""

    def __init__(self, method: str) -> None:
        super().__init__(-32601, f"Method {method} is not handled", {"method": method})


class InvalidProgressMutation(JsonRpcError):
    def __init__(self, token: int, operation: str) -> None:
        super().__init__(-32602, f"Progress {token} already ended; {operation} rejected", {"token": token})


class SessionStartError(JsonRpcError):
    def __init__(self, message: str = "Failed to start session", data: Optional[Any] = None) -> None:
        super().__init__(-32002, message, data)


def make_error_response(message_id: Any, code: int, message: str, data: Optional[Any] = None) -> dict:
    err = {"jsonrpc": "2.0", "id": message_id, "error": {"code": code, "message": message}}
    if data is not None:
        err["error"]["data"] = data
    return err


def make_result_response(message_id: Any, result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": message_id, "result": result}


def make_notification(method: str, params: Optional[dict] = None) -> dict:
    message = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    return message


def is_request(message: dict) -> bool:
    return "method" in message and "id" in message and "jsonrpc" in message


def is_notification(message: dict) -> bool:
    return "method" in message and "id" not in message
