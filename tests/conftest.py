"""Shared test fixtures for zkv tests."""

from __future__ import annotations

import copy
from collections import defaultdict
from typing import Any, Callable, NamedTuple

import pytest
from kazoo.exceptions import (
    BadVersionError,
    NoChildrenForEphemeralsError,
    NodeExistsError,
    NoNodeError,
    NotEmptyError,
    RolledBackError,
    RuntimeInconsistency,
)
from kazoo.protocol.states import EventType, KeeperState, WatchedEvent

from zkv import ZooKeeperClient

# --- In-memory ZooKeeper ---


class FakeStat(NamedTuple):
    version: int
    ephemeral: bool
    num_children: int


class _Node:
    def __init__(self, data: bytes = b"", ephemeral: bool = False) -> None:
        self.data = data
        self.version = 0
        self.ephemeral = ephemeral
        self.children: dict[str, _Node] = {}

    def stat(self) -> FakeStat:
        return FakeStat(self.version, self.ephemeral, len(self.children))


def _split(path: str) -> list[str]:
    return [s for s in path.split("/") if s]


def _parent(path: str) -> str:
    return "/" + "/".join(_split(path)[:-1])


def _lookup(root: _Node, path: str) -> _Node:
    node = root
    for segment in _split(path):
        if segment not in node.children:
            raise NoNodeError()
        node = node.children[segment]
    return node


def _create(root: _Node, path: str, value: bytes, ephemeral: bool) -> list[tuple[str, str]]:
    parent = _lookup(root, _parent(path))
    name = _split(path)[-1]
    if name in parent.children:
        raise NodeExistsError()
    if parent.ephemeral:
        raise NoChildrenForEphemeralsError()
    parent.children[name] = _Node(value, ephemeral)
    return [("created", path), ("child", _parent(path))]


def _set(root: _Node, path: str, value: bytes, version: int) -> tuple[FakeStat, list]:
    node = _lookup(root, path)
    if version != -1 and node.version != version:
        raise BadVersionError()
    node.data = value
    node.version += 1
    return node.stat(), [("changed", path)]


def _delete(root: _Node, path: str, version: int) -> list[tuple[str, str]]:
    node = _lookup(root, path)
    if version != -1 and node.version != version:
        raise BadVersionError()
    if node.children:
        raise NotEmptyError()
    del _lookup(root, _parent(path)).children[_split(path)[-1]]
    return [("deleted", path), ("child", _parent(path))]


def _check(root: _Node, path: str, version: int) -> None:
    node = _lookup(root, path)
    if version != -1 and node.version != version:
        raise BadVersionError()


class FakeTransaction:
    """Mimics kazoo's TransactionRequest, including its multi result shape."""

    def __init__(self, zk: FakeZooKeeper) -> None:
        self._zk = zk
        self.operations: list[tuple[Any, ...]] = []

    def check(self, path: str, version: int) -> None:
        self.operations.append(("check", path, version))

    def create(self, path: str, value: bytes = b"", acl: Any = None, ephemeral: bool = False,
               sequence: bool = False) -> None:
        self.operations.append(("create", path, value, ephemeral))

    def set_data(self, path: str, value: bytes, version: int = -1) -> None:
        self.operations.append(("set", path, value, version))

    def delete(self, path: str, version: int = -1) -> None:
        self.operations.append(("delete", path, version))

    def commit(self) -> list[Any]:
        return self._zk._multi(self.operations)


class FakeZooKeeper:
    """Kazoo-shaped in-memory ZooKeeper.

    ``before(call, fn)`` queues ``fn`` to run once, right before a future
    ``call`` ('create', 'set', 'get_children', 'commit', ...); hooks for the
    same call run one per call, in order. Used to stage concurrent mutations.
    """

    def __init__(self) -> None:
        self.root = _Node()
        self.calls: list[str] = []
        self.multis: list[list[tuple[Any, ...]]] = []
        self.stopped = False
        self.closed = False
        self._hooks: dict[str, list[Callable[[], None]]] = defaultdict(list)
        self._data_watches: dict[str, list[Callable]] = defaultdict(list)
        self._exists_watches: dict[str, list[Callable]] = defaultdict(list)
        self._child_watches: dict[str, list[Callable]] = defaultdict(list)

    def before(self, call: str, fn: Callable[[], None]) -> None:
        self._hooks[call].append(fn)

    def _enter(self, call: str) -> None:
        self.calls.append(call)
        hooks = self._hooks.get(call)
        if hooks:
            hooks.pop(0)()

    def _fire(self, events: list[tuple[str, str]]) -> None:
        for kind, path in events:
            if kind == "child":
                targets = [(self._child_watches, EventType.CHILD)]
            elif kind == "created":
                targets = [(self._exists_watches, EventType.CREATED)]
            elif kind == "changed":
                targets = [
                    (self._exists_watches, EventType.CHANGED),
                    (self._data_watches, EventType.CHANGED),
                ]
            else:
                targets = [
                    (self._exists_watches, EventType.DELETED),
                    (self._data_watches, EventType.DELETED),
                    (self._child_watches, EventType.DELETED),
                ]
            for registry, event_type in targets:
                for callback in registry.pop(path, []):
                    callback(WatchedEvent(event_type, KeeperState.CONNECTED, path))

    # --- Seeding helpers (no hooks, no call log) ---

    def seed(self, path: str, value: bytes = b"", ephemeral: bool = False) -> None:
        partial = ""
        segments = _split(path)
        for i, segment in enumerate(segments):
            partial += "/" + segment
            try:
                _lookup(self.root, partial)
            except NoNodeError:
                last = i == len(segments) - 1
                _create(self.root, partial, value if last else b"", ephemeral and last)

    def node_exists(self, path: str) -> bool:
        try:
            _lookup(self.root, path)
            return True
        except NoNodeError:
            return False

    def node_version(self, path: str) -> int:
        return _lookup(self.root, path).version

    def node_data(self, path: str) -> bytes:
        return _lookup(self.root, path).data

    def remove(self, path: str) -> None:
        """Delete a node and its subtree directly, firing watches."""
        node = _lookup(self.root, path)
        for name in list(node.children):
            self.remove(f"{path}/{name}")
        self._fire(_delete(self.root, path, -1))

    # --- KazooClient surface ---

    def start(self, timeout: float = 15) -> None:
        self.calls.append("start")

    def stop(self) -> None:
        self.stopped = True

    def close(self) -> None:
        self.closed = True

    def create(self, path: str, value: bytes = b"", acl: Any = None, ephemeral: bool = False,
               sequence: bool = False, makepath: bool = False) -> str:
        self._enter("create")
        self._fire(_create(self.root, path, value, ephemeral))
        return path

    def set(self, path: str, value: bytes, version: int = -1) -> FakeStat:
        self._enter("set")
        stat, events = _set(self.root, path, value, version)
        self._fire(events)
        return stat

    def delete(self, path: str, version: int = -1, recursive: bool = False) -> bool:
        self._enter("delete")
        self._fire(_delete(self.root, path, version))
        return True

    def exists(self, path: str, watch: Callable | None = None) -> FakeStat | None:
        self._enter("exists")
        if watch is not None:
            self._exists_watches[path].append(watch)
        try:
            return _lookup(self.root, path).stat()
        except NoNodeError:
            return None

    def get(self, path: str, watch: Callable | None = None) -> tuple[bytes, FakeStat]:
        self._enter("get")
        node = _lookup(self.root, path)
        if watch is not None:
            self._data_watches[path].append(watch)
        return node.data, node.stat()

    def get_children(self, path: str, watch: Callable | None = None) -> list[str]:
        self._enter("get_children")
        node = _lookup(self.root, path)
        if watch is not None:
            self._child_watches[path].append(watch)
        return list(node.children)

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    def _multi(self, operations: list[tuple[Any, ...]]) -> list[Any]:
        self._enter("commit")
        self.multis.append(list(operations))
        staged = copy.deepcopy(self.root)
        results: list[Any] = []
        events: list[tuple[str, str]] = []
        for i, op in enumerate(operations):
            try:
                if op[0] == "check":
                    _check(staged, op[1], op[2])
                    results.append(True)
                elif op[0] == "create":
                    events += _create(staged, op[1], op[2], op[3])
                    results.append(op[1])
                elif op[0] == "set":
                    stat, evs = _set(staged, op[1], op[2], op[3])
                    events += evs
                    results.append(stat)
                else:
                    events += _delete(staged, op[1], op[2])
                    results.append(True)
            except Exception as e:
                rolled: list[Any] = [RolledBackError() for _ in range(i)]
                return rolled + [e] + [RuntimeInconsistency() for _ in operations[i + 1 :]]
        self.root = staged
        self._fire(events)
        return results


# --- Fixtures ---


@pytest.fixture
def fake_zk():
    return FakeZooKeeper()


@pytest.fixture
def client(fake_zk):
    """A client rooted at /zkv/test on an in-memory ZooKeeper."""
    c = ZooKeeperClient("fake:2181", "/zkv/test", zk=fake_zk)
    yield c
    c.close()
