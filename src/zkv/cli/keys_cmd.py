"""Single-key commands: create, set, cas, get, exists, children, erase."""

from __future__ import annotations

from typing import Any

import typer

from zkv.cli._client import fail, open_cli_client
from zkv.cli._output import decode_value, print_event, print_keys, print_result
from zkv.types import Watch


def _await_watch(watch: Watch | None, json_mode: bool) -> None:
    if watch is not None:
        print_event(watch.wait(), json_mode=json_mode)


def create_cmd(
    key: str = typer.Argument(..., help="Flat key, e.g. /app/config"),
    value: str = typer.Argument(..., help="Value to store"),
    lease: bool = typer.Option(False, "--lease", help="Bind the key to this session"),
) -> None:
    """Create a key that must not exist yet."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        version = client.create(key, value.encode("utf-8"), lease=lease)
    except Exception as e:
        fail(e)
    finally:
        client.close()
    print_result({"key": key, "version": version}, json_mode=state.json_output)


def set_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    value: str = typer.Argument(..., help="Value to store"),
) -> None:
    """Create or overwrite a key unconditionally."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        version = client.set(key, value.encode("utf-8"))
    except Exception as e:
        fail(e)
    finally:
        client.close()
    print_result({"key": key, "version": version}, json_mode=state.json_output)


def cas_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    value: str = typer.Argument(..., help="Value to store"),
    version: int = typer.Option(..., "--version", "-v", min=0, help="Expected version (0: absent)"),
) -> None:
    """Compare-and-swap: write only if the key is at the expected version."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        new_version = client.cas(key, value.encode("utf-8"), version)
    except Exception as e:
        fail(e)
    finally:
        client.close()
    data: dict[str, Any] = {"key": key, "version": new_version, "swapped": new_version != 0}
    print_result(data, json_mode=state.json_output)


def get_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    watch: bool = typer.Option(False, "--watch", help="Block until the value changes"),
) -> None:
    """Print a key's value and version."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        result = client.get(key, watch=watch)
        print_result(
            {"key": key, "version": result.version, "value": decode_value(result.value)},
            json_mode=state.json_output,
        )
        _await_watch(result.watch, state.json_output)
    except Exception as e:
        fail(e)
    finally:
        client.close()


def exists_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    watch: bool = typer.Option(False, "--watch", help="Block until the key changes"),
) -> None:
    """Print a key's version (0 when absent)."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        result = client.exists(key, watch=watch)
        print_result(
            {"key": key, "version": result.version, "exists": result.version != 0},
            json_mode=state.json_output,
        )
        _await_watch(result.watch, state.json_output)
    except Exception as e:
        fail(e)
    finally:
        client.close()


def children_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    watch: bool = typer.Option(False, "--watch", help="Block until the child set changes"),
) -> None:
    """List the immediate children of a key."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        result = client.children(key, watch=watch)
        print_keys(result.keys, json_mode=state.json_output)
        _await_watch(result.watch, state.json_output)
    except Exception as e:
        fail(e)
    finally:
        client.close()


def erase_cmd(
    key: str = typer.Argument(..., help="Flat key"),
    version: int = typer.Option(0, "--version", "-v", min=0, help="Required version (0: any)"),
) -> None:
    """Erase a key and everything under it."""
    from zkv.cli import state

    client = open_cli_client()
    try:
        client.erase(key, version)
        remaining = client.exists(key).version
    except Exception as e:
        fail(e)
    finally:
        client.close()
    print_result({"key": key, "erased": remaining == 0}, json_mode=state.json_output)
