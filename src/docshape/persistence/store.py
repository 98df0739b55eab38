# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""The document store collaborator and an in-memory implementation.

The engine never talks to a database directly. Persistence and index builds
go through a :class:`DocumentStore`, whose operations are single-shot
coroutines. :class:`MemoryStore` implements the protocol over plain dicts.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any, Protocol

from docshape.errors import DocShapeError
from docshape.model.dotted import get_path, has_path, set_path, unset_path

# ###############
# Public Interface
# ###############


class StoreError(DocShapeError):
    """Raised by a store when an operation cannot be applied."""


class DuplicateKeyError(StoreError):
    """A write or index build would violate a unique index."""

    def __init__(self, collection: str, index: str, key: Mapping[str, Any]) -> None:
        super().__init__(f"Duplicate key in '{collection}' for index '{index}': {dict(key)!r}")
        self.collection = collection
        self.index = index
        self.key = dict(key)


class DocumentStore(Protocol):
    """Operations the engine requires from a backing document store."""

    async def insert_one(
        self, collection: str, document: Mapping[str, Any], *, write_concern: Mapping[str, Any] | None = None
    ) -> None: ...

    async def update_one(
        self,
        collection: str,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        write_concern: Mapping[str, Any] | None = None,
    ) -> int:
        """Apply *update* to the first document matching *filter*; return the match count (0 or 1)."""
        ...

    async def find_one(self, collection: str, filter: Mapping[str, Any]) -> dict[str, Any] | None: ...

    async def create_index(self, collection: str, keys: Mapping[str, Any], options: Mapping[str, Any]) -> str:
        """Create an index and return its name."""
        ...

    async def create_collection(self, collection: str, options: Mapping[str, Any]) -> None: ...


class MemoryStore:
    """A :class:`DocumentStore` held in process memory.

    Filters match by equality on dotted paths, with ``None`` also matching a
    missing field. Updates support ``$set``, ``$unset`` and ``$inc``. Unique
    indexes are enforced on every write; sparse unique indexes ignore
    documents that lack the indexed fields.
    Every document handed in or out is deep-copied.
    """

    def __init__(self) -> None:
        self._collections: dict[str, list[dict[str, Any]]] = {}
        self._indexes: dict[str, dict[str, tuple[dict[str, Any], dict[str, Any]]]] = {}
        self._collection_options: dict[str, dict[str, Any]] = {}
        self.write_concerns: list[Mapping[str, Any] | None] = []

    async def insert_one(
        self, collection: str, document: Mapping[str, Any], *, write_concern: Mapping[str, Any] | None = None
    ) -> None:
        self.write_concerns.append(write_concern)
        stored = copy.deepcopy(dict(document))
        documents = self._collections.setdefault(collection, [])
        if "_id" in stored and any(existing.get("_id") == stored["_id"] for existing in documents):
            raise DuplicateKeyError(collection, "_id_", {"_id": stored["_id"]})
        self._check_unique(collection, stored, documents)
        documents.append(stored)

    async def update_one(
        self,
        collection: str,
        filter: Mapping[str, Any],
        update: Mapping[str, Any],
        *,
        write_concern: Mapping[str, Any] | None = None,
    ) -> int:
        self.write_concerns.append(write_concern)
        documents = self._collections.get(collection, [])
        for position, existing in enumerate(documents):
            if not _matches(existing, filter):
                continue
            updated = _apply_update(existing, update)
            others = documents[:position] + documents[position + 1 :]
            self._check_unique(collection, updated, others)
            documents[position] = updated
            return 1
        return 0

    async def find_one(self, collection: str, filter: Mapping[str, Any]) -> dict[str, Any] | None:
        for existing in self._collections.get(collection, []):
            if _matches(existing, filter):
                return copy.deepcopy(existing)
        return None

    async def create_index(self, collection: str, keys: Mapping[str, Any], options: Mapping[str, Any]) -> str:
        name = str(options.get("name") or _index_name(keys))
        spec = (dict(keys), dict(options))
        if options.get("unique"):
            documents = self._collections.get(collection, [])
            for position, document in enumerate(documents):
                _check_against(collection, name, spec, document, documents[position + 1 :])
        self._indexes.setdefault(collection, {})[name] = spec
        return name

    async def create_collection(self, collection: str, options: Mapping[str, Any]) -> None:
        if collection in self._collection_options:
            raise StoreError(f"Collection '{collection}' already exists")
        self._collection_options[collection] = dict(options)
        self._collections.setdefault(collection, [])

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def documents(self, collection: str) -> list[dict[str, Any]]:
        """Return a copy of every stored document in *collection*."""
        return copy.deepcopy(self._collections.get(collection, []))

    def index_information(self, collection: str) -> dict[str, dict[str, Any]]:
        """Return ``{name: {"key": ..., **options}}`` for every index on *collection*."""
        return {
            name: {"key": dict(keys), **options} for name, (keys, options) in self._indexes.get(collection, {}).items()
        }

    def collection_options(self, collection: str) -> dict[str, Any] | None:
        options = self._collection_options.get(collection)
        return None if options is None else dict(options)

    def _check_unique(self, collection: str, document: dict[str, Any], others: list[dict[str, Any]]) -> None:
        for name, spec in self._indexes.get(collection, {}).items():
            if spec[1].get("unique"):
                _check_against(collection, name, spec, document, others)


# ################
# Implementation
# ################


def _index_name(keys: Mapping[str, Any]) -> str:
    return "_".join(f"{path}_{direction}" for path, direction in keys.items())


def _matches(document: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    """Equality match per path; ``None`` also matches a missing field."""
    for path, expected in filter.items():
        if expected is None:
            if get_path(document, path) is not None:
                return False
        elif not has_path(document, path) or get_path(document, path) != expected:
            return False
    return True


def _apply_update(document: dict[str, Any], update: Mapping[str, Any]) -> dict[str, Any]:
    updated = copy.deepcopy(document)
    for operator, fields in update.items():
        if operator == "$set":
            for path, value in fields.items():
                set_path(updated, path, copy.deepcopy(value))
        elif operator == "$unset":
            for path in fields:
                unset_path(updated, path)
        elif operator == "$inc":
            for path, amount in fields.items():
                current = get_path(updated, path, 0)
                if not isinstance(current, (int, float)):
                    raise StoreError(f"Cannot apply $inc to non-numeric value at '{path}'")
                set_path(updated, path, current + amount)
        else:
            raise StoreError(f"Unsupported update operator '{operator}'")
    return updated


def _check_against(
    collection: str,
    name: str,
    spec: tuple[dict[str, Any], dict[str, Any]],
    document: Mapping[str, Any],
    others: list[dict[str, Any]],
) -> None:
    keys, options = spec
    if options.get("sparse") and not any(has_path(document, path) for path in keys):
        return
    key = {path: get_path(document, path) for path in keys}
    for other in others:
        if options.get("sparse") and not any(has_path(other, path) for path in keys):
            continue
        if {path: get_path(other, path) for path in keys} == key:
            raise DuplicateKeyError(collection, name, key)
