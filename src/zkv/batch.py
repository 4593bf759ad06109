"""Expansion of user-level operations into one atomic ZooKeeper multi."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from kazoo.exceptions import NoNodeError, NotEmptyError, RolledBackError, RuntimeInconsistency

from zkv.keys import ANY_VERSION
from zkv.types import TxnOpKind

# Failures caused by subtree churn between listing and submission.
STRUCTURAL_ERRORS = (NoNodeError, NotEmptyError)

# kazoo reports the items around the real failure with these markers.
_ROLLBACK_MARKERS = (RolledBackError, RuntimeInconsistency)


@dataclass
class BatchItem:
    """One native request plus the user-level op it was expanded from."""

    action: str  # 'check', 'create', 'set' or 'delete'
    path: str
    owner: int = 0
    defining: bool = True
    value: bytes = b""
    version: int = ANY_VERSION
    ephemeral: bool = False
    result_kind: TxnOpKind | None = None

    def stage(self, request: Any) -> None:
        if self.action == "check":
            request.check(self.path, self.version)
        elif self.action == "create":
            request.create(self.path, self.value, ephemeral=self.ephemeral)
        elif self.action == "set":
            request.set_data(self.path, self.value, self.version)
        elif self.action == "delete":
            request.delete(self.path, self.version)
        else:
            raise ValueError(f"Unknown batch action '{self.action}'")


def expand_erase(
    list_children: Callable[[str], list[str]],
    path: str,
    items: list[BatchItem],
    owner: int = 0,
) -> None:
    """Append deletes for the subtree at ``path``: descendants first, ``path`` last.

    NoNodeError from listing ``path`` itself propagates; descendants that
    vanish while being listed are skipped. Every appended item is auxiliary.
    """
    for name in sorted(list_children(path)):
        try:
            expand_erase(list_children, f"{path}/{name}", items, owner)
        except NoNodeError:
            continue
    items.append(BatchItem("delete", path, owner=owner, defining=False))


class BatchPlan:
    """Ordered batch items, tagged with their owning op and defining flag."""

    def __init__(self, items: list[BatchItem] | None = None) -> None:
        self.items: list[BatchItem] = list(items) if items else []

    def __len__(self) -> int:
        return len(self.items)

    def add(self, item: BatchItem) -> None:
        self.items.append(item)

    def add_expansion(self, expanded: list[BatchItem], owner: int) -> None:
        """Add items expanded for one op; the last one becomes its defining item.

        Auxiliary deletes already planned by an earlier op are dropped so that
        overlapping erases delete each node once.
        """
        planned = {i.path for i in self.items if i.action == "delete"}
        *auxiliary, defining = expanded
        for item in auxiliary:
            if item.path in planned:
                continue
            item.owner = owner
            item.defining = False
            self.items.append(item)
        defining.owner = owner
        defining.defining = True
        self.items.append(defining)

    def submit(self, zk: Any) -> list[Any]:
        request = zk.transaction()
        for item in self.items:
            item.stage(request)
        return list(request.commit())


def first_failure(results: list[Any]) -> tuple[int, Exception] | None:
    """Return (index, error) of the item that made the multi fail, if any."""
    for index, result in enumerate(results):
        if isinstance(result, Exception) and not isinstance(result, _ROLLBACK_MARKERS):
            return index, result
    return None
