"""Flat key <-> znode path mapping and the user/native version convention."""

from __future__ import annotations

from zkv.errors import MalformedKeyError

SEPARATOR = "/"

# Returned by ``set`` when the node vanished between the create attempt and the
# overwrite. ZooKeeper versions are 32-bit, so this never equals a real version.
SET_RACE_VERSION = 1 << 62

# ZooKeeper's "match any version" marker.
ANY_VERSION = -1


def _check_segment(key: str, segment: str) -> None:
    if not segment:
        raise MalformedKeyError(key, "empty segment")
    if segment in (".", ".."):
        raise MalformedKeyError(key, f"relative segment {segment!r}")
    for ch in segment:
        if not (" " <= ch <= "~"):
            raise MalformedKeyError(key, f"unsupported character {ch!r}")


def disassemble_path(path: str) -> list[str]:
    """Split a namespace prefix into segments. ``""`` and ``"/"`` mean no prefix."""
    if path in ("", SEPARATOR):
        return []
    return disassemble_key(path)


def disassemble_key(key: str) -> list[str]:
    """Split a flat key into its non-empty segments.

    Raises MalformedKeyError unless ``"/" + "/".join(result) == key``.
    """
    if not isinstance(key, str):
        raise MalformedKeyError(repr(key), "key must be a string")
    if not key:
        raise MalformedKeyError(key, "empty key")
    if not key.startswith(SEPARATOR):
        raise MalformedKeyError(key, "key must start with '/'")
    if key.endswith(SEPARATOR):
        raise MalformedKeyError(key, "key must not end with '/'")
    segments = key[1:].split(SEPARATOR)
    for segment in segments:
        _check_segment(key, segment)
    return segments


def assemble_path(prefix_segments: list[str], segments: list[str]) -> str:
    """Build the absolute znode path for ``segments`` under the namespace root."""
    return "".join(SEPARATOR + s for s in [*prefix_segments, *segments])


def child_key(parent_key: str, name: str) -> str:
    return f"{parent_key}{SEPARATOR}{name}"


def user_version(native: int) -> int:
    """Native (0-based) znode version -> user version (0 means absent)."""
    return native + 1


def native_version(user: int) -> int:
    """User version -> native version. ``0`` maps to ``ANY_VERSION``."""
    if user < 0:
        raise ValueError(f"Version must be non-negative, got {user}")
    return user - 1
