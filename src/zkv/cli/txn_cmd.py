"""zkv commit — apply a JSON transaction document atomically."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import typer
from pydantic import BaseModel, Field, ValidationError

from zkv.cli import _exitcodes as ec
from zkv.cli._client import fail, open_cli_client
from zkv.cli._output import print_error, print_result
from zkv.errors import TxnError
from zkv.types import Txn, TxnCheck, TxnOp, TxnOpKind


class CheckDoc(BaseModel):
    key: str
    version: int = Field(ge=0)


class OpDoc(BaseModel):
    op: Literal["create", "set", "erase"]
    key: str
    value: str = ""
    lease: bool = False


class TxnDoc(BaseModel):
    """On-disk transaction document."""

    checks: list[CheckDoc] = Field(default_factory=list)
    ops: list[OpDoc] = Field(default_factory=list)

    def to_txn(self) -> Txn:
        return Txn(
            checks=[TxnCheck(c.key, c.version) for c in self.checks],
            ops=[
                TxnOp(TxnOpKind(o.op), o.key, o.value.encode("utf-8"), o.lease)
                for o in self.ops
            ],
        )


def load_txn(path: str) -> Txn:
    """Read and validate a transaction document."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return TxnDoc.model_validate(raw).to_txn()


def commit_cmd(
    file: str = typer.Argument(..., help="JSON file with 'checks' and 'ops'"),
) -> None:
    """Apply a transaction document all-or-nothing."""
    from zkv.cli import state

    try:
        txn = load_txn(file)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        print_error(f"Invalid transaction document {file}: {e}")
        raise typer.Exit(ec.USAGE_ERROR)

    client = open_cli_client()
    try:
        results = client.commit(txn)
    except TxnError as e:
        if state.json_output:
            print_result({"committed": False, "failed_index": e.index}, json_mode=True)
            raise typer.Exit(ec.CONFLICT)
        fail(e)
    except Exception as e:
        fail(e)
    finally:
        client.close()

    data = {
        "committed": True,
        "results": [{"op": r.kind.value, "version": r.version} for r in results],
    }
    if state.json_output:
        print_result(data, json_mode=True)
        return
    print("committed")
    for r in results:
        print(f"  {r.kind.value}: version {r.version}")
