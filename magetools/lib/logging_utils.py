"""Console and command-log helpers for magetools."""
from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

DEFAULT_COMMAND_LOG = Path("/var/log/magetools/commands.log")


def log(level: str, message: str) -> None:
    print(f"[{level}] {message}", file=sys.stderr)


def info(message: str) -> None:
    log("INFO", message)


def success(message: str) -> None:
    log("SUCCESS", message)


def warning(message: str) -> None:
    log("WARNING", message)


def error(message: str) -> None:
    log("ERROR", message)


def command_log_path() -> Path:
    """Return the command log path, honoring MAGETOOLS_LOG."""
    override = os.environ.get("MAGETOOLS_LOG")
    if override:
        return Path(override)
    return DEFAULT_COMMAND_LOG


def log_event(label: str, tag: str, payload: Dict[str, Any]) -> None:
    record = {
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "label": label,
        "tag": tag,
        "payload": payload,
    }
    path = command_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(record, ensure_ascii=False, default=str) + "\n")
    except OSError:  # pragma: no cover - log dir not writable
        pass
