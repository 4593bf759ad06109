"""Shared fixtures for CLI tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from zkv import ZooKeeperClient
from zkv.cli import app

if TYPE_CHECKING:
    from click.testing import Result


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_zk(monkeypatch, fake_zk):
    """Route every CLI connection to the in-memory ZooKeeper."""
    opened: list[str] = []

    def _open(uri, *, config=None):
        from zkv.client import parse_client_target

        target = parse_client_target(uri)
        opened.append(uri)
        return ZooKeeperClient(target.address, target.prefix, config=config, zk=fake_zk)

    monkeypatch.setattr("zkv.cli._client.open_client", _open)
    fake_zk.opened = opened
    return fake_zk


def invoke(runner: CliRunner, args: list[str], uri: str = "zk://fake:2181/cli") -> "Result":
    """Invoke the CLI against ``uri``."""
    return runner.invoke(app, ["--uri", uri, *args], catch_exceptions=False)
