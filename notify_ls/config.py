from __future__ import annotations

import json
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CAPABILITIES: Dict[str, Any] = {
    "window": {
        "workDoneProgress": True,
        "showMessage": True,
        "showDocument": True,
    },
    "referencesProvider": {"workDoneProgress": True},
    "definitionProvider": {"workDoneProgress": True},
    "textDocument": {"formatting": {"dynamicRegistration": True}},
}


@dataclass
class ServerConfig:
    """Settings for one in-process notify server and its demo progress timer."""

    name: str = "notify"
    log_level: str = "INFO"
    structured_logging: bool = False
    strict_methods: bool = False
    strict_progress: bool = False
    capabilities: Dict[str, Any] = field(default_factory=lambda: deepcopy(DEFAULT_CAPABILITIES))
    progress_delay: float = 0.2
    progress_interval: float = 0.1


def load_config(path: Optional[str | Path] = None) -> ServerConfig:
    """Parse the JSON config on disk; with no path, return the defaults."""

    if path is None:
        return ServerConfig()
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config root must be a JSON object.")
    capabilities = data.get("capabilities", DEFAULT_CAPABILITIES)
    if not isinstance(capabilities, dict):
        raise ValueError("'capabilities' must be a JSON object.")
    delay = _get_float(data, "progress_delay", 0.2)
    interval = _get_float(data, "progress_interval", 0.1)
    if delay < 0:
        raise ValueError("progress_delay must not be negative")
    if interval <= 0:
        raise ValueError("progress_interval must be positive")
    return ServerConfig(
        name=str(data.get("name", "notify")),
        log_level=str(data.get("log_level", "INFO")).upper(),
        structured_logging=bool(data.get("structured_logging", False)),
        strict_methods=bool(data.get("strict_methods", False)),
        strict_progress=bool(data.get("strict_progress", False)),
        capabilities=deepcopy(capabilities),
        progress_delay=delay,
        progress_interval=interval,
    )


def _get_float(data: Dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be numeric")
