# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Optimistic-concurrency revisions.

Each document moves through ``unversioned``, ``clean``, and ``dirty``. A
mutation to any path outside ``skipVersioning`` makes a clean document dirty.
Persisting a dirty document is a conditional write: the store must still hold
the revision the document was read at, and the write increments it. A write
that matches nothing is a version conflict; it is reported, never retried.

The controller holds no documents. It only reads and writes the revision
field and state of the document it is handed.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from docshape.errors import VersionConflictError
from docshape.model.options import SchemaOptions

if TYPE_CHECKING:
    from docshape.document.document import Document

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class VersionState(Enum):
    """Revision state of one document."""

    UNVERSIONED = "unversioned"
    CLEAN = "clean"
    DIRTY = "dirty"


class VersioningController:
    """Maintains the revision field of documents compiled under one option record.

    Args:
        options: The schema options; ``versionKey`` and ``skipVersioning`` are read.
    """

    def __init__(self, options: SchemaOptions) -> None:
        self._key = options.version_key_name
        self._options = options

    @property
    def enabled(self) -> bool:
        return self._key is not None

    @property
    def key(self) -> str | None:
        return self._key

    def initialize(self, document: Document) -> None:
        """Set the starting revision (``0`` unless one was loaded) and mark the document clean.

        A loaded document without a stored revision keeps ``0`` in memory but
        is remembered as unstored, so its first conditional write matches the
        missing field instead of ``0``.
        """
        if self._key is None:
            document.version_state = VersionState.UNVERSIONED
            return
        stored = document.data.get(self._key) is not None
        if not stored:
            document.data[self._key] = 0
        document.revision_stored = stored or document.is_new
        document.version_state = VersionState.CLEAN

    def on_mutation(self, document: Document, path: str) -> None:
        """Record a mutation of *path*; exempt paths and the revision field itself are ignored."""
        if self._key is None or path == self._key:
            return
        if self._options.skips_versioning(path):
            return
        document.version_state = VersionState.DIRTY

    def conditions(self, document: Document) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return the ``(filter, $inc)`` parts of the conditional write.

        Both parts are empty unless the document is dirty. The filter matches
        ``None`` (a missing field) when the revision was never stored.
        """
        if self._key is None or document.version_state is not VersionState.DIRTY:
            return {}, {}
        revision = document.data[self._key] if document.revision_stored else None
        return {self._key: revision}, {self._key: 1}

    def complete(self, document: Document, matched: int) -> None:
        """Apply the outcome of a conditional write.

        Raises:
            VersionConflictError: If a dirty document's write matched no stored revision.
        """
        if self._key is None or document.version_state is not VersionState.DIRTY:
            return
        if matched == 0:
            revision = document.data[self._key]
            logger.warning(
                "Version conflict for document '%s' at revision %s", document.data.get("_id"), revision
            )
            raise VersionConflictError(document.data.get("_id"), revision, document.modified_paths())
        document.data[self._key] += 1
        document.revision_stored = True
        document.version_state = VersionState.CLEAN
