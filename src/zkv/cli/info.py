"""zkv info — show the connection target and namespace status."""

from __future__ import annotations

from typing import Any

import typer

from zkv.cli import _exitcodes as ec
from zkv.cli._client import open_cli_client
from zkv.cli._output import print_error, print_result
from zkv.client import parse_client_target
from zkv.errors import ClientTargetError


def info_cmd() -> None:
    """Show backend, address and namespace prefix."""
    from zkv.cli import state

    try:
        target = parse_client_target(state.uri)
    except ClientTargetError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    client = open_cli_client()
    try:
        data: dict[str, Any] = {"uri": target.uri, **client.storage_info()}
    except Exception as e:
        print_error(f"Cannot read client info: {e}")
        raise typer.Exit(ec.BACKEND_ERROR)
    finally:
        client.close()

    print_result(data, json_mode=state.json_output)
