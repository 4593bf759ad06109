"""Configuration for zkv clients."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ZkvConfig:
    """Configuration for a zkv client."""

    session_timeout_s: float = 10.0
    connect_timeout_s: float = 15.0
    read_only: bool = False
    # None retries structural races until the batch goes through.
    max_retries: int | None = None
    retry_backoff_ms: int = 0
    retry_backoff_max_ms: int = 1000
