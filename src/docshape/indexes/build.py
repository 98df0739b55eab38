# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sequential index build against a document store.

An :class:`IndexBuild` consumes a list of directives exactly once. Directives
are issued one after another; a failure does not stop the remaining ones.
After every directive has been attempted, exactly one terminal signal fires
with the :class:`IndexBuildResult`. When ``emit_index_errors`` is enabled, each
individual failure is also signalled as it happens.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from docshape.errors import IndexBuildError
from docshape.model.indexes import IndexDirective

if TYPE_CHECKING:
    from docshape.persistence.store import DocumentStore

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

CompletionCallback = Callable[["IndexBuildResult"], None]
ErrorCallback = Callable[[IndexBuildError], None]


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of one index build.

    Attributes:
        collection: The collection the directives were issued against.
        created: Names reported by the store for each index it created.
        errors: One entry per directive that failed, in issue order.
    """

    collection: str
    created: tuple[str, ...] = ()
    errors: tuple[IndexBuildError, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return not self.errors


class IndexBuild:
    """A single-shot, sequential build of index directives.

    Args:
        collection: Target collection name.
        directives: Directives in the order they must be issued.
        emit_index_errors: Whether each failure is signalled individually.
    """

    def __init__(
        self,
        collection: str,
        directives: Sequence[IndexDirective],
        *,
        emit_index_errors: bool = False,
    ) -> None:
        self._collection = collection
        self._directives = list(directives)
        self._emit_index_errors = emit_index_errors
        self._on_complete: list[CompletionCallback] = []
        self._on_error: list[ErrorCallback] = []
        self._started = False

    @property
    def directives(self) -> list[IndexDirective]:
        return list(self._directives)

    def on_complete(self, callback: CompletionCallback) -> IndexBuild:
        """Subscribe to the terminal signal; returns the build for chaining."""
        self._on_complete.append(callback)
        return self

    def on_error(self, callback: ErrorCallback) -> IndexBuild:
        """Subscribe to per-directive failures (only signalled when ``emit_index_errors`` is on)."""
        self._on_error.append(callback)
        return self

    async def run(self, store: DocumentStore) -> IndexBuildResult:
        """Issue every directive against *store* and fire the terminal signal.

        Raises:
            RuntimeError: If the build has already been run.
        """
        if self._started:
            raise RuntimeError(f"Index build for '{self._collection}' has already run")
        self._started = True

        created: list[str] = []
        errors: list[IndexBuildError] = []
        for directive in self._directives:
            logger.debug("Creating index %s on '%s'", directive.keys, self._collection)
            try:
                name = await store.create_index(self._collection, directive.keys, directive.options.to_store())
            except Exception as exc:
                error = IndexBuildError(directive, exc)
                logger.warning("Index build failed on '%s': %s", self._collection, error)
                errors.append(error)
                if self._emit_index_errors:
                    for callback in self._on_error:
                        callback(error)
                continue
            created.append(name)

        result = IndexBuildResult(collection=self._collection, created=tuple(created), errors=tuple(errors))
        if result.succeeded:
            logger.info("Built %d indexes on '%s'", len(created), self._collection)
        else:
            logger.info("Index build on '%s' finished with %d errors", self._collection, len(errors))
        for callback in self._on_complete:
            callback(result)
        return result
