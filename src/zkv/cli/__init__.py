"""zkv CLI: operator console for a ZooKeeper-backed key-value namespace."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from zkv.cli import info, keys_cmd, txn_cmd

DEFAULT_URI = "zk://127.0.0.1:2181/zkv"

app = typer.Typer(
    name="zkv",
    help="zkv CLI — operator console for a ZooKeeper-backed key-value namespace.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    uri: str = DEFAULT_URI
    json_output: bool = False
    verbose: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("zkv")
        except Exception:
            v = "unknown"
        print(f"zkv {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    uri: Optional[str] = typer.Option(
        None,
        "--uri",
        envvar="ZKV_URI",
        help=f"Client URI (default: {DEFAULT_URI})",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    verbose: bool = typer.Option(False, "--verbose", help="Log client activity to stderr"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all zkv commands."""
    state.uri = uri or DEFAULT_URI
    state.json_output = json_output
    state.verbose = verbose
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="create")(keys_cmd.create_cmd)
app.command(name="set")(keys_cmd.set_cmd)
app.command(name="cas")(keys_cmd.cas_cmd)
app.command(name="get")(keys_cmd.get_cmd)
app.command(name="exists")(keys_cmd.exists_cmd)
app.command(name="children")(keys_cmd.children_cmd)
app.command(name="erase")(keys_cmd.erase_cmd)
app.command(name="commit")(txn_cmd.commit_cmd)
app.command(name="info")(info.info_cmd)


def main() -> None:
    """Entry point for the zkv CLI."""
    app()
