# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Persisting one document through a :class:`~docshape.persistence.store.DocumentStore`."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from docshape.document.document import Document
from docshape.errors import DocumentNotFoundError, ValidationError
from docshape.model.dotted import get_path, has_path, set_path
from docshape.persistence.store import DocumentStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# ###############
# Public Interface
# ###############


async def save_document(
    document: Document,
    store: DocumentStore,
    collection: str,
    *,
    clock: Clock | None = None,
) -> Document:
    """Insert a new document or write the changes of a loaded one.

    New documents are inserted whole. Loaded documents are written as a
    conditional ``$set``/``$unset`` update filtered on ``_id`` and any shard key
    values; a dirty versioned document also requires the stored revision to
    match and increments it.

    Raises:
        ValidationError: If the document has pending cast errors or, with
            ``validateBeforeSave`` on, fails validation.
        VersionConflictError: If the stored revision changed since the document was read.
        DocumentNotFoundError: If an unversioned update matched no stored document.
    """
    options = document.schema.options
    if options.validate_before_save:
        document.validate()
    elif document.cast_errors:
        raise ValidationError({error.path: error for error in document.cast_errors})

    _stamp_timestamps(document, (clock or _utcnow)())
    write_concern = options.resolved_write_concern()

    if document.is_new:
        logger.debug("Inserting document '%s' into '%s'", document.data.get("_id"), collection)
        await store.insert_one(collection, document.to_stored(), write_concern=write_concern)
        document.mark_saved()
        document.versioning.initialize(document)
        return document

    versioning = document.versioning
    condition, increment = versioning.conditions(document)
    update = build_update(document)
    if increment:
        update["$inc"] = increment
    if not update:
        logger.debug("Document '%s' has no changes to save", document.data.get("_id"))
        return document

    query: dict[str, Any] = {"_id": document.data.get("_id")}
    query.update(shard_key_filter(document))
    query.update(condition)
    logger.debug("Updating document '%s' in '%s': %s", query["_id"], collection, list(update))
    matched = await store.update_one(collection, query, update, write_concern=write_concern)
    versioning.complete(document, matched)
    if matched == 0:
        raise DocumentNotFoundError(query["_id"])
    document.mark_saved()
    return document


def build_update(document: Document) -> dict[str, dict[str, Any]]:
    """Return the ``$set``/``$unset`` operators for the document's modified paths.

    A modified path below another modified path is covered by its ancestor;
    the revision field is never part of the delta. A path set to ``None`` is
    stored as null; only a path missing from the document is unset.
    """
    version_key = document.schema.options.version_key_name
    data = document.data
    to_set: dict[str, Any] = {}
    to_unset: dict[str, Any] = {}
    for path in compress_paths(document.modified_paths()):
        if path == version_key:
            continue
        if has_path(data, path):
            to_set[path] = copy.deepcopy(get_path(data, path))
        else:
            to_unset[path] = 1
    update: dict[str, dict[str, Any]] = {}
    if to_set:
        update["$set"] = to_set
    if to_unset:
        update["$unset"] = to_unset
    return update


def compress_paths(paths: list[str]) -> list[str]:
    """Drop every path that has an ancestor in *paths*, keeping first-seen order."""
    kept = set(paths)
    return [path for path in paths if not any(path.startswith(other + ".") for other in kept)]


def shard_key_filter(document: Document) -> dict[str, Any]:
    shard_key: Mapping[str, int] | None = document.schema.options.shard_key
    if not shard_key:
        return {}
    return {path: get_path(document.data, path) for path in shard_key}


# ################
# Implementation
# ################


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _stamp_timestamps(document: Document, now: datetime) -> None:
    options = document.schema.options
    created_at, updated_at = options.created_at_key, options.updated_at_key
    if created_at and document.is_new and get_path(document.data, created_at) is None:
        set_path(document.data, created_at, now)
        document.mark_modified(created_at, versioned=False)
    if updated_at and (document.is_new or document.is_modified()):
        set_path(document.data, updated_at, now)
        document.mark_modified(updated_at, versioned=False)
