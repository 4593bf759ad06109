"""Structured error types for zkv."""

from __future__ import annotations

from typing import NoReturn

from kazoo.exceptions import NoChildrenForEphemeralsError, NodeExistsError, NoNodeError


class ZkvError(Exception):
    """Base error for all zkv errors."""


class MalformedKeyError(ZkvError):
    """Raised when a key or prefix does not decompose into valid segments."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed key {key!r}: {reason}")


class EntryExistsError(ZkvError):
    """Raised when a create targets a key that is already present."""

    def __init__(self, key: str | None = None) -> None:
        self.key = key
        super().__init__(f"Entry already exists: {key}" if key else "Entry already exists")


class NoEntryError(ZkvError):
    """Raised when an operation requires a key that is absent."""

    def __init__(self, key: str | None = None) -> None:
        self.key = key
        super().__init__(f"No such entry: {key}" if key else "No such entry")


class EphemeralNotAllowedError(ZkvError):
    """Raised when creating a child under a lease-bound (ephemeral) key."""

    def __init__(self, key: str | None = None) -> None:
        self.key = key
        super().__init__(
            f"Cannot create {key}: parent is lease-bound"
            if key
            else "Cannot create children of a lease-bound entry"
        )


class TxnError(ZkvError):
    """Raised when a transaction check or op failed its precondition.

    ``index`` counts checks first, then ops. Nothing was applied.
    """

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Transaction failed at operation {index}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TxnError):
            return NotImplemented
        return self.index == other.index

    def __hash__(self) -> int:
        return hash((TxnError, self.index))


class RetryLimitExceededError(ZkvError):
    """Raised when structural-race retries exceed the configured cap."""

    def __init__(self, operation: str, retries: int) -> None:
        self.operation = operation
        self.retries = retries
        super().__init__(f"{operation} still racing after {retries} retries; giving up")


class ClientTargetError(ZkvError):
    """Raised when a client URI cannot be resolved."""

    def __init__(self, uri: str, detail: str) -> None:
        self.uri = uri
        self.detail = detail
        super().__init__(f"Invalid client target '{uri}': {detail}")


# Service errors with a zkv counterpart; everything else passes through.
TRANSLATED_ERRORS = (NodeExistsError, NoNodeError, NoChildrenForEphemeralsError)


def translate_error(err: Exception, key: str | None = None) -> Exception:
    """Map a kazoo error onto the zkv taxonomy; anything else passes through."""
    if isinstance(err, NodeExistsError):
        return EntryExistsError(key)
    if isinstance(err, NoNodeError):
        return NoEntryError(key)
    if isinstance(err, NoChildrenForEphemeralsError):
        return EphemeralNotAllowedError(key)
    return err


def raise_translated(err: Exception, key: str | None = None) -> NoReturn:
    """Raise ``err`` as its zkv equivalent, chained to the original."""
    translated = translate_error(err, key)
    if translated is err:
        raise err
    raise translated from err
