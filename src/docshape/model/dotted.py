# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Read and write values at dotted paths inside nested dicts and lists."""

from __future__ import annotations

from typing import Any

# ###############
# Public Interface
# ###############

_MISSING = object()


def has_path(container: Any, path: str) -> bool:
    """Return True if every segment of *path* exists in *container*."""
    return _lookup(container, path.split(".")) is not _MISSING


def get_path(container: Any, path: str, default: Any = None) -> Any:
    """Return the value at *path*, or *default* when any segment is missing."""
    value = _lookup(container, path.split("."))
    return default if value is _MISSING else value


def set_path(container: dict[str, Any], path: str, value: Any) -> None:
    """Write *value* at *path*, creating intermediate dicts as needed.

    Numeric segments index into existing lists; a list is padded with ``None``
    when the index is past its end.
    """
    segments = path.split(".")
    current: Any = container
    for position, segment in enumerate(segments):
        last = position == len(segments) - 1
        if isinstance(current, list) and segment.isdigit():
            index = int(segment)
            while len(current) <= index:
                current.append(None)
            if last:
                current[index] = value
                return
            if not isinstance(current[index], (dict, list)):
                current[index] = {}
            current = current[index]
            continue
        if last:
            current[segment] = value
            return
        child = current.get(segment)
        if not isinstance(child, (dict, list)):
            child = {}
            current[segment] = child
        current = child


def unset_path(container: dict[str, Any], path: str) -> None:
    """Remove the value at *path* if present."""
    head, _, leaf = path.rpartition(".")
    parent = _lookup(container, head.split(".")) if head else container
    if isinstance(parent, dict):
        parent.pop(leaf, None)
    elif isinstance(parent, list) and leaf.isdigit() and int(leaf) < len(parent):
        parent[int(leaf)] = None


# ################
# Implementation
# ################


def _lookup(container: Any, segments: list[str]) -> Any:
    current = container
    for segment in segments:
        if isinstance(current, dict):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return _MISSING
    return current
