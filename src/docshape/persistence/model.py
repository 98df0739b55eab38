# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Model registration: a schema bound to a collection in a document store."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from docshape.compiler.schema import Schema
from docshape.document.document import Document
from docshape.document.resolver import StrictMode
from docshape.indexes.build import CompletionCallback, ErrorCallback, IndexBuild, IndexBuildResult
from docshape.indexes.collector import collect_indexes
from docshape.model.indexes import IndexDirective
from docshape.persistence.save import Clock, save_document
from docshape.persistence.store import DocumentStore

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Model:
    """Creates, loads, and saves documents of one schema.

    Args:
        name: Model name; also the collection name unless one is configured.
        schema: The compiled root schema shared by every document of the model.
        store: The backing document store.
        collection: Explicit collection name, overriding the ``collection`` option.
        clock: Source of timestamps; UTC wall-clock time when omitted.
    """

    def __init__(
        self,
        name: str,
        schema: Schema,
        store: DocumentStore,
        *,
        collection: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.name = name
        self.schema = schema
        self.store = store
        self.collection_name = collection or schema.options.collection or name
        self._clock = clock
        self._on_index: list[CompletionCallback] = []
        self._on_index_error: list[ErrorCallback] = []

    def __repr__(self) -> str:
        return f"Model({self.name!r}, collection={self.collection_name!r})"

    @property
    def read_preference(self) -> str | None:
        return self.schema.options.read

    def create(self, data: Mapping[str, Any] | None = None, *, strict: StrictMode | None = None) -> Document:
        """Return a new, unsaved document built from *data*."""
        return Document(self.schema, data, strict=strict)

    def hydrate(self, data: Mapping[str, Any]) -> Document:
        """Return a document for data read from the store; nothing is marked modified."""
        return Document(self.schema, data, is_new=False)

    async def find_by_id(self, document_id: Any) -> Document | None:
        stored = await self.store.find_one(self.collection_name, {"_id": document_id})
        return None if stored is None else self.hydrate(stored)

    async def save(self, document: Document) -> Document:
        """Persist *document*; see :func:`~docshape.persistence.save.save_document`."""
        return await save_document(document, self.store, self.collection_name, clock=self._clock)

    # ------------------------------------------------------------------
    # Indexes and collection setup
    # ------------------------------------------------------------------

    def on_index(self, callback: CompletionCallback) -> Model:
        """Subscribe to the terminal signal of every index build."""
        self._on_index.append(callback)
        return self

    def on_index_error(self, callback: ErrorCallback) -> Model:
        """Subscribe to individual index failures (signalled only when ``emitIndexErrors`` is on)."""
        self._on_index_error.append(callback)
        return self

    def indexes(self) -> list[IndexDirective]:
        return collect_indexes(self.schema)

    async def ensure_indexes(self) -> IndexBuildResult:
        """Build every declared index once and fire the subscribed signals."""
        build = IndexBuild(
            self.collection_name,
            self.indexes(),
            emit_index_errors=self.schema.options.emit_index_errors,
        )
        for callback in self._on_index:
            build.on_complete(callback)
        for callback in self._on_index_error:
            build.on_error(callback)
        return await build.run(self.store)

    def collection_options(self) -> dict[str, Any] | None:
        """Options for creating a capped collection, or ``None`` when not capped."""
        capped = self.schema.options.capped
        if capped is None:
            return None
        return {"capped": True, **capped.model_dump(by_alias=True, exclude_none=True)}

    async def init(self) -> IndexBuildResult | None:
        """Prepare the collection: create it when capped, then build indexes when ``autoIndex`` is on."""
        options = self.collection_options()
        if options is not None:
            logger.debug("Creating capped collection '%s'", self.collection_name)
            await self.store.create_collection(self.collection_name, options)
        if not self.schema.options.auto_index:
            return None
        return await self.ensure_indexes()
