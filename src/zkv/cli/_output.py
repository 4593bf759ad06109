"""Output formatting helpers for the CLI."""

from __future__ import annotations

import json
import sys
from typing import Any


def decode_value(value: bytes) -> str:
    """Render stored bytes for display; undecodable bytes become U+FFFD."""
    return value.decode("utf-8", errors="replace")


def print_result(data: dict[str, Any], *, json_mode: bool = False) -> None:
    """Print one result as JSON or ``key: value`` lines."""
    if json_mode:
        print(json.dumps(data, indent=2, default=str))
        return
    for k, v in data.items():
        print(f"{k}: {v}")


def print_keys(keys: list[str], *, json_mode: bool = False) -> None:
    """Print a list of keys as a JSON array or one per line."""
    if json_mode:
        print(json.dumps(keys, indent=2))
        return
    for key in keys:
        print(key)


def print_event(event: Any, *, json_mode: bool = False) -> None:
    """Print a fired watch notification."""
    data = {
        "event": str(getattr(event, "type", event)),
        "path": getattr(event, "path", None),
    }
    if json_mode:
        print(json.dumps(data, default=str))
        return
    print(f"watch fired: {data['event']} {data['path']}")


def print_error(msg: str) -> None:
    """Print an error message to stderr."""
    print(f"Error: {msg}", file=sys.stderr)
