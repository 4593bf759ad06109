"""CLI helpers for client construction and error reporting."""

from __future__ import annotations

import os
from typing import NoReturn

import typer

from zkv.cli import _exitcodes as ec
from zkv.cli._output import print_error
from zkv.client import KVClientProtocol, open_client
from zkv.config import ZkvConfig
from zkv.errors import (
    ClientTargetError,
    EntryExistsError,
    EphemeralNotAllowedError,
    MalformedKeyError,
    NoEntryError,
    TxnError,
)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def _config_from_env() -> ZkvConfig:
    """Build client config from ZKV_* environment variables."""
    max_retries = os.getenv("ZKV_MAX_RETRIES")
    backoff = os.getenv("ZKV_RETRY_BACKOFF_MS")
    return ZkvConfig(
        session_timeout_s=_env_float("ZKV_SESSION_TIMEOUT", 10.0),
        connect_timeout_s=_env_float("ZKV_CONNECT_TIMEOUT", 15.0),
        max_retries=int(max_retries) if max_retries else None,
        retry_backoff_ms=int(backoff) if backoff else 0,
    )


def open_cli_client() -> KVClientProtocol:
    """Open a client for the URI selected on the command line."""
    from zkv.cli import state

    try:
        return open_client(state.uri, config=_config_from_env())
    except ClientTargetError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except Exception as e:
        print_error(f"Cannot connect to {state.uri}: {e}")
        raise typer.Exit(ec.BACKEND_ERROR)


def fail(err: Exception) -> NoReturn:
    """Report ``err`` on stderr and exit with the matching code."""
    print_error(str(err))
    if isinstance(err, MalformedKeyError):
        raise typer.Exit(ec.USAGE_ERROR)
    if isinstance(err, NoEntryError):
        raise typer.Exit(ec.NOT_FOUND)
    if isinstance(err, (EntryExistsError, TxnError, EphemeralNotAllowedError)):
        raise typer.Exit(ec.CONFLICT)
    raise typer.Exit(ec.BACKEND_ERROR)
