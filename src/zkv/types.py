"""Transaction model, read results and one-shot watch handles."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple


class TxnOpKind(str, Enum):
    CREATE = "create"
    SET = "set"
    ERASE = "erase"


@dataclass(frozen=True)
class TxnCheck:
    """Require ``key`` to be at ``version`` when the transaction applies."""

    key: str
    version: int


@dataclass(frozen=True)
class TxnOp:
    """A mutating transaction step."""

    kind: TxnOpKind
    key: str
    value: bytes = b""
    lease: bool = False

    @classmethod
    def create(cls, key: str, value: bytes, lease: bool = False) -> TxnOp:
        return cls(TxnOpKind.CREATE, key, value, lease)

    @classmethod
    def set(cls, key: str, value: bytes) -> TxnOp:
        return cls(TxnOpKind.SET, key, value)

    @classmethod
    def erase(cls, key: str) -> TxnOp:
        return cls(TxnOpKind.ERASE, key)


@dataclass
class Txn:
    """Checks followed by ops, applied all-or-nothing."""

    checks: list[TxnCheck] = field(default_factory=list)
    ops: list[TxnOp] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.checks) + len(self.ops)


@dataclass(frozen=True)
class TxnOpResult:
    kind: TxnOpKind
    version: int


class Watch:
    """One-shot notification handle.

    Resolves exactly once, when the service reports the first change to the
    watched node. Not re-armed; call the read again for further changes.
    """

    def __init__(self, path: str, kind: str) -> None:
        self.path = path
        self.kind = kind
        self._event = threading.Event()
        self._watched: Any = None

    def __repr__(self) -> str:
        state = "triggered" if self.triggered else "pending"
        return f"Watch(path={self.path!r}, kind={self.kind!r}, {state})"

    def _fire(self, watched_event: Any) -> None:
        if self._event.is_set():
            return
        self._watched = watched_event
        self._event.set()

    @property
    def triggered(self) -> bool:
        return self._event.is_set()

    def wait(self) -> Any:
        """Block until the notification arrives and return kazoo's WatchedEvent."""
        self._event.wait()
        return self._watched


class ExistsResult(NamedTuple):
    version: int
    watch: Watch | None = None


class GetResult(NamedTuple):
    version: int
    value: bytes
    watch: Watch | None = None


class ChildrenResult(NamedTuple):
    keys: list[str]
    watch: Watch | None = None
