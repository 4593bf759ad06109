"""ZooKeeper-backed flat key-value client."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from kazoo.client import KazooClient
from kazoo.exceptions import BadVersionError, NodeExistsError, NoNodeError, NotEmptyError

from zkv.batch import STRUCTURAL_ERRORS, BatchItem, BatchPlan, expand_erase, first_failure
from zkv.config import ZkvConfig
from zkv.errors import (
    TRANSLATED_ERRORS,
    EntryExistsError,
    RetryLimitExceededError,
    TxnError,
    ZkvError,
    raise_translated,
    translate_error,
)
from zkv.keys import (
    ANY_VERSION,
    SET_RACE_VERSION,
    assemble_path,
    child_key,
    disassemble_key,
    disassemble_path,
    native_version,
    user_version,
)
from zkv.types import (
    ChildrenResult,
    ExistsResult,
    GetResult,
    Txn,
    TxnOpKind,
    TxnOpResult,
    Watch,
)

logger = logging.getLogger(__name__)


class ZooKeeperClient:
    """Flat, versioned key-value store on top of a ZooKeeper namespace.

    Keys live under the znode given by ``prefix``; each prefix segment is
    created on construction if missing. A ``zk`` object with the KazooClient
    interface may be passed in, in which case it is assumed to be started.
    """

    backend = "zk"

    def __init__(
        self,
        address: str,
        prefix: str = "",
        *,
        config: ZkvConfig | None = None,
        zk: Any | None = None,
    ) -> None:
        self.address = address
        self._config = config or ZkvConfig()
        self._prefix_segments = disassemble_path(prefix)
        self.prefix = assemble_path(self._prefix_segments, []) or "/"

        if zk is None:
            zk = KazooClient(
                hosts=address,
                timeout=self._config.session_timeout_s,
                read_only=self._config.read_only,
            )
            zk.start(timeout=self._config.connect_timeout_s)
            logger.info("Connected to ZooKeeper at %s", address)
        self._zk = zk

        try:
            self._create_each_prefix()
        except Exception:
            self.close()
            raise

    def __enter__(self) -> ZooKeeperClient:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _create_each_prefix(self) -> None:
        for depth in range(1, len(self._prefix_segments) + 1):
            path = assemble_path(self._prefix_segments[:depth], [])
            try:
                self._zk.create(path, b"")
                logger.debug("Created namespace node %s", path)
            except NodeExistsError:
                pass

    def _path(self, key: str) -> str:
        return assemble_path(self._prefix_segments, disassemble_key(key))

    def _pause_before_retry(self, operation: str, attempt: int) -> None:
        """Apply the configured retry cap and backoff before re-attempt ``attempt``."""
        limit = self._config.max_retries
        if limit is not None and attempt > limit:
            raise RetryLimitExceededError(operation, limit)
        logger.debug("%s hit a structural race; rebuilding batch (retry %d)", operation, attempt)
        base_ms = self._config.retry_backoff_ms
        if base_ms <= 0:
            return
        delay_ms = min(self._config.retry_backoff_max_ms, base_ms * 2 ** (attempt - 1))
        time.sleep((delay_ms + random.uniform(0.0, delay_ms / 2)) / 1000.0)

    def storage_info(self) -> dict[str, Any]:
        return {
            "backend": self.backend,
            "address": self.address,
            "prefix": self.prefix,
            "session_timeout_s": self._config.session_timeout_s,
            "max_retries": self._config.max_retries,
        }

    # --- Single-key operations ---

    def create(self, key: str, value: bytes, lease: bool = False) -> int:
        """Create ``key``; returns version 1. Ephemeral when ``lease`` is set."""
        path = self._path(key)
        try:
            self._zk.create(path, value, ephemeral=lease)
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return 1

    def set(self, key: str, value: bytes) -> int:
        """Create or overwrite ``key`` regardless of its version."""
        path = self._path(key)
        try:
            self._zk.create(path, value)
            return 1
        except NodeExistsError:
            pass
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e

        try:
            stat = self._zk.set(path, value, ANY_VERSION)
        except NoNodeError:
            # Deleted between the create attempt and the overwrite.
            return SET_RACE_VERSION
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return user_version(stat.version)

    def cas(self, key: str, value: bytes, version: int) -> int:
        """Write ``value`` only if ``key`` is at ``version``; 0 means it must not exist.

        Returns the new version, or 0 when the expected version did not hold.
        """
        if version == 0:
            try:
                return self.create(key, value)
            except EntryExistsError:
                return 0

        path = self._path(key)
        try:
            stat = self._zk.set(path, value, native_version(version))
        except BadVersionError:
            return 0
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return user_version(stat.version)

    def exists(self, key: str, watch: bool = False) -> ExistsResult:
        path = self._path(key)
        handle = Watch(path, "exists") if watch else None
        try:
            stat = self._zk.exists(path, watch=handle._fire if handle else None)
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return ExistsResult(user_version(stat.version) if stat is not None else 0, handle)

    def get(self, key: str, watch: bool = False) -> GetResult:
        path = self._path(key)
        handle = Watch(path, "data") if watch else None
        try:
            value, stat = self._zk.get(path, watch=handle._fire if handle else None)
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return GetResult(user_version(stat.version), value if value is not None else b"", handle)

    def children(self, key: str, watch: bool = False) -> ChildrenResult:
        path = self._path(key)
        handle = Watch(path, "children") if watch else None
        try:
            names = self._zk.get_children(path, watch=handle._fire if handle else None)
        except TRANSLATED_ERRORS as e:
            raise translate_error(e, key) from e
        return ChildrenResult([child_key(key, name) for name in sorted(names)], handle)

    # --- Recursive erase ---

    def erase(self, key: str, version: int = 0) -> None:
        """Delete ``key`` and its whole subtree atomically.

        A version mismatch leaves everything in place and is not an error.
        ``version`` 0 erases whatever version is present.
        """
        path = self._path(key)
        attempt = 0
        while True:
            items = [BatchItem("check", path, version=native_version(version))]
            try:
                expand_erase(self._zk.get_children, path, items)
            except TRANSLATED_ERRORS as e:
                raise translate_error(e, key) from e

            failure = first_failure(BatchPlan(items).submit(self._zk))
            if failure is None:
                return

            index, err = failure
            if index == 0:
                if isinstance(err, BadVersionError):
                    return
                raise_translated(err, key)
            if not isinstance(err, STRUCTURAL_ERRORS):
                raise_translated(err, key)

            attempt += 1
            self._pause_before_retry("erase", attempt)

    # --- Transactions ---

    def _build_plan(self, txn: Txn) -> BatchPlan:
        plan = BatchPlan()
        for index, check in enumerate(txn.checks):
            plan.add(
                BatchItem(
                    "check",
                    self._path(check.key),
                    owner=index,
                    version=native_version(check.version),
                )
            )

        for offset, op in enumerate(txn.ops):
            owner = len(txn.checks) + offset
            path = self._path(op.key)
            if op.kind is TxnOpKind.CREATE:
                plan.add(
                    BatchItem(
                        "create",
                        path,
                        owner=owner,
                        value=op.value,
                        ephemeral=op.lease,
                        result_kind=TxnOpKind.CREATE,
                    )
                )
            elif op.kind is TxnOpKind.SET:
                plan.add(
                    BatchItem("set", path, owner=owner, value=op.value, result_kind=TxnOpKind.SET)
                )
            elif op.kind is TxnOpKind.ERASE:
                expanded: list[BatchItem] = []
                try:
                    expand_erase(self._zk.get_children, path, expanded, owner)
                except NoNodeError:
                    # Already gone: a bare delete lets the batch report the conflict.
                    expanded = [BatchItem("delete", path)]
                except TRANSLATED_ERRORS as e:
                    raise translate_error(e, op.key) from e
                plan.add_expansion(expanded, owner)
            else:
                raise ValueError(f"Unsupported transaction op kind: {op.kind!r}")
        return plan

    def commit(self, txn: Txn) -> list[TxnOpResult]:
        """Apply ``txn`` atomically and return one result per create/set op.

        Raises TxnError naming the first check or op whose precondition failed.
        """
        if len(txn) == 0:
            return []
        for key in [c.key for c in txn.checks] + [op.key for op in txn.ops]:
            disassemble_key(key)

        attempt = 0
        while True:
            plan = self._build_plan(txn)
            results = plan.submit(self._zk)
            failure = first_failure(results)

            if failure is None:
                if any(isinstance(r, Exception) for r in results):
                    raise ZkvError("Transaction rolled back without a failing operation")
                out: list[TxnOpResult] = []
                for item, result in zip(plan.items, results):
                    if item.result_kind is TxnOpKind.CREATE:
                        out.append(TxnOpResult(TxnOpKind.CREATE, 1))
                    elif item.result_kind is TxnOpKind.SET:
                        out.append(TxnOpResult(TxnOpKind.SET, user_version(result.version)))
                return out

            index, err = failure
            item = plan.items[index]
            if item.defining:
                # A defining delete only races when the target gained a child
                # that the plan never listed.
                racing = isinstance(err, NotEmptyError) and self._tree_moved(plan, item, err)
                if not racing:
                    raise TxnError(item.owner)
            elif not isinstance(err, STRUCTURAL_ERRORS):
                raise_translated(err)
            elif not self._tree_moved(plan, item, err):
                # The batch conflicts with itself; rebuilding cannot help.
                raise TxnError(item.owner)

            attempt += 1
            self._pause_before_retry("commit", attempt)

    def _tree_moved(self, plan: BatchPlan, item: BatchItem, err: Exception) -> bool:
        """Whether ``item`` failed because the live tree changed after listing."""
        if item.action != "delete":
            return False
        if isinstance(err, NoNodeError):
            return self._zk.exists(item.path) is None
        planned = {i.path for i in plan.items if i.action == "delete"}
        try:
            names = self._zk.get_children(item.path)
        except NoNodeError:
            return True
        return any(f"{item.path}/{name}" not in planned for name in names)

    def close(self) -> None:
        """Stop the session and release the connection."""
        try:
            self._zk.stop()
        finally:
            self._zk.close()
        logger.info("Closed ZooKeeper client for %s", self.address)
