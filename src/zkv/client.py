"""Backend-agnostic client contract and URI-based client binding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable
from urllib.parse import urlparse

from zkv.config import ZkvConfig
from zkv.errors import ClientTargetError, MalformedKeyError
from zkv.keys import disassemble_path
from zkv.types import ChildrenResult, ExistsResult, GetResult, Txn, TxnOpResult


@runtime_checkable
class KVClientProtocol(Protocol):
    """Flat, versioned key-value contract used by callers and the CLI."""

    def create(self, key: str, value: bytes, lease: bool = False) -> int: ...

    def set(self, key: str, value: bytes) -> int: ...

    def cas(self, key: str, value: bytes, version: int) -> int: ...

    def erase(self, key: str, version: int = 0) -> None: ...

    def exists(self, key: str, watch: bool = False) -> ExistsResult: ...

    def get(self, key: str, watch: bool = False) -> GetResult: ...

    def children(self, key: str, watch: bool = False) -> ChildrenResult: ...

    def commit(self, txn: Txn) -> list[TxnOpResult]: ...

    def storage_info(self) -> dict[str, Any]: ...

    def close(self) -> None: ...


@dataclass(frozen=True)
class ClientTarget:
    """Resolved connection target from a client URI."""

    backend: str
    uri: str
    address: str
    prefix: str = ""


def parse_client_target(uri: str) -> ClientTarget:
    """Resolve ``zk://host[:port][,host[:port]...][/prefix]``."""
    parsed = urlparse(uri)

    if parsed.scheme == "zk":
        if not parsed.netloc:
            raise ClientTargetError(uri, "missing ZooKeeper address")
        prefix = parsed.path.rstrip("/")
        try:
            disassemble_path(prefix)
        except MalformedKeyError as e:
            raise ClientTargetError(uri, f"bad namespace prefix: {e.reason}") from e
        return ClientTarget(backend="zk", uri=uri, address=parsed.netloc, prefix=prefix)

    raise ClientTargetError(uri, f"unsupported scheme '{parsed.scheme}'")


def open_client(uri: str, *, config: ZkvConfig | None = None) -> KVClientProtocol:
    """Connect to the backend named by ``uri``."""
    target = parse_client_target(uri)
    if target.backend == "zk":
        from zkv.zookeeper import ZooKeeperClient

        return ZooKeeperClient(target.address, target.prefix, config=config)
    raise ClientTargetError(uri, f"unsupported backend '{target.backend}'")


__all__ = [
    "KVClientProtocol",
    "ClientTarget",
    "parse_client_target",
    "open_client",
]
