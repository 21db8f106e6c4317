from .config import ServerConfig, load_config
from .jsonrpc import InvalidProgressMutation, JsonRpcError, SessionStartError, SessionTerminated, UnknownMethod
from .progress import ProgressHandle, ProgressTracker
from .server import NotifyServer

__all__ = [
    "InvalidProgressMutation",
    "JsonRpcError",
    "NotifyServer",
    "ProgressHandle",
    "ProgressTracker",
    "ServerConfig",
    "SessionStartError",
    "SessionTerminated",
    "UnknownMethod",
    "load_config",
]
