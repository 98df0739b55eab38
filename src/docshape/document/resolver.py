# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Path resolution and casting for document assignments.

One :class:`Assigner` applies one assignment batch: it resolves each dotted
path against the schema's path table (following nested objects, embedded
sub-documents, and array indices), runs setters, casts the value, and stores
it. Cast failures are recorded instead of raised so that every problem in a
batch is reported together; unknown paths follow the strict-mode policy.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from docshape.compiler.paths import PathTable, SchemaPath
from docshape.errors import CastError, UnknownPathError
from docshape.model.dotted import get_path, has_path, set_path
from docshape.model.tokens import TypeToken

if TYPE_CHECKING:
    from docshape.compiler.schema import Schema
    from docshape.document.document import Document

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############

StrictMode = bool | str


def build_skeleton(table: PathTable, under: str | None = None) -> dict[str, Any]:
    """Return empty containers for every nested object path (below *under*, if given)."""
    skeleton: dict[str, Any] = {}
    prefix = f"{under}." if under else ""
    for path in table.nested:
        if path.startswith(prefix):
            set_path(skeleton, path[len(prefix) :], {})
    return skeleton


class Assigner:
    """Applies one batch of assignments to a document's stored state.

    Args:
        document: The document being mutated; passed to setters and marked modified.
        strict: Unknown-path policy: ``True`` drops, ``False`` stores untyped,
            ``"throw"`` raises :class:`UnknownPathError`.
        errors: The document's pending cast errors, keyed by full path in
            first-seen order. Failures are added; successful assignments clear them.
        init: Hydration mode: setters are skipped and nothing is marked modified.
    """

    def __init__(
        self,
        document: Document,
        *,
        strict: StrictMode,
        errors: dict[str, CastError],
        init: bool = False,
    ) -> None:
        self._document = document
        self._strict = strict
        self._errors = errors
        self._init = init
        self._quiet = 0
        self._failed: list[str] = []

    def assign(self, container: dict[str, Any], schema: Schema, path: str, value: Any, prefix: str = "") -> None:
        """Assign *value* at the schema-relative *path* inside *container*.

        Raises:
            UnknownPathError: If *path* is not declared and strict mode is ``"throw"``.
        """
        full = prefix + path
        table = schema.table
        if not prefix and not self._init:
            virtual = schema.virtuals.get(path)
            if virtual is not None:
                virtual.apply_setters(value, self._document)
                return
        schema_path = table.get(path)
        if schema_path is not None:
            with self._replacing(full):
                cast = self.cast(schema_path, value, full)
            if cast is not _FAILED:
                self._store(container, path, cast, full)
            return
        if table.is_nested(path):
            self._assign_nested(container, schema, path, value, prefix)
            return
        resolved = table.resolve(path)
        if resolved is not None and self._assign_below(container, resolved, value, prefix):
            return
        self._assign_unknown(container, path, value, full)

    def cast(self, schema_path: SchemaPath, value: Any, full: str) -> Any:
        """Run setters and cast *value* for *schema_path*; returns ``_FAILED`` on a recorded failure."""
        if not self._init:
            value = schema_path.apply_setters(value, self._document)
        if schema_path.is_embedded and schema_path.sub_schema is not None:
            return self._cast_subdocument(schema_path.sub_schema, value, full)
        if schema_path.is_array:
            return self._cast_array(schema_path, value, full)
        assert schema_path.schema_type is not None
        try:
            return schema_path.schema_type.cast(value, full)
        except CastError as err:
            self._fail(err)
            return _FAILED

    def apply_defaults(self, container: dict[str, Any], schema: Schema, prefix: str = "") -> None:
        """Fill every missing declared path with its default; arrays default to ``[]``.

        A path whose value failed to cast stays empty.
        """
        for path, schema_path in schema.paths.items():
            if has_path(container, path) or prefix + path in self._errors:
                continue
            if schema_path.has_default:
                self._quiet += 1
                try:
                    value = self.cast(schema_path, schema_path.default_value(), prefix + path)
                finally:
                    self._quiet -= 1
                if value is not _FAILED:
                    set_path(container, path, value)
            elif schema_path.is_array:
                set_path(container, path, [])

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def _assign_nested(
        self, container: dict[str, Any], schema: Schema, path: str, value: Any, prefix: str
    ) -> None:
        full = prefix + path
        if value is not None and not isinstance(value, Mapping):
            self._fail(CastError(full, "Object", value))
            return
        before = copy.deepcopy(get_path(container, path))
        with self._replacing(full):
            set_path(container, path, build_skeleton(schema.table, path))
            for key, child in (value or {}).items():
                self.assign(container, schema, f"{path}.{key}", child, prefix)
        self._changed(full, before, get_path(container, path))

    def _assign_below(
        self,
        container: dict[str, Any],
        resolved: tuple[SchemaPath, list[str]],
        value: Any,
        prefix: str,
    ) -> bool:
        """Assign inside a declared leaf (sub-document field, array item, or Mixed value)."""
        schema_path, rest = resolved
        base = prefix + schema_path.path
        if schema_path.is_embedded and schema_path.sub_schema is not None:
            sub = get_path(container, schema_path.path)
            if not isinstance(sub, dict):
                sub = build_skeleton(schema_path.sub_schema.table)
                set_path(container, schema_path.path, sub)
            self.assign(sub, schema_path.sub_schema, ".".join(rest), value, base + ".")
            return True
        if schema_path.is_array and rest[0].isdigit():
            array = get_path(container, schema_path.path)
            if not isinstance(array, list):
                array = []
                set_path(container, schema_path.path, array)
            index = int(rest[0])
            item_full = f"{base}.{index}"
            if len(rest) == 1:
                with self._replacing(item_full):
                    item = self._cast_element(schema_path, value, item_full)
                if item is not _FAILED:
                    self._store(container, f"{schema_path.path}.{index}", item, item_full)
                return True
            if schema_path.sub_schema is None:
                return False
            while len(array) <= index:
                array.append(None)
            if not isinstance(array[index], dict):
                array[index] = build_skeleton(schema_path.sub_schema.table)
            self.assign(array[index], schema_path.sub_schema, ".".join(rest[1:]), value, item_full + ".")
            return True
        if schema_path.token == TypeToken.MIXED:
            relative = ".".join([schema_path.path, *rest])
            self._store(container, relative, value, prefix + relative)
            return True
        return False

    def _assign_unknown(self, container: dict[str, Any], path: str, value: Any, full: str) -> None:
        if self._strict == "throw":
            raise UnknownPathError(full)
        if self._strict:
            logger.debug("Dropped assignment to undeclared path '%s'", full)
            return
        self._store(container, path, value, full)

    # ------------------------------------------------------------------
    # Casting
    # ------------------------------------------------------------------

    def _cast_element(self, schema_path: SchemaPath, value: Any, full: str) -> Any:
        if schema_path.sub_schema is not None:
            return self._cast_subdocument(schema_path.sub_schema, value, full)
        assert schema_path.element is not None
        return self.cast(schema_path.element, value, full)

    def _cast_array(self, schema_path: SchemaPath, value: Any, full: str) -> Any:
        if value is None:
            return None
        assert schema_path.schema_type is not None
        items = schema_path.schema_type.cast(value, full)
        mark = len(self._failed)
        result = [self._cast_element(schema_path, item, f"{full}.{index}") for index, item in enumerate(items)]
        return _FAILED if len(self._failed) > mark else result

    def _cast_subdocument(self, schema: Schema, value: Any, full: str) -> Any:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            self._fail(CastError(full, TypeToken.EMBEDDED.value, value))
            return _FAILED
        mark = len(self._failed)
        self._quiet += 1
        try:
            sub = build_skeleton(schema.table)
            for key, child in value.items():
                self.assign(sub, schema, key, child, full + ".")
            self.apply_defaults(sub, schema, full + ".")
        finally:
            self._quiet -= 1
        return _FAILED if len(self._failed) > mark else sub

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _store(self, container: dict[str, Any], path: str, value: Any, full: str) -> None:
        before = get_path(container, path)
        set_path(container, path, value)
        self._changed(full, before, value)

    def _changed(self, full: str, before: Any, after: Any) -> None:
        if self._init or self._quiet or before == after:
            return
        self._document.mark_modified(full)

    def _fail(self, error: CastError) -> None:
        self._errors[error.path] = error
        self._failed.append(error.path)

    @contextmanager
    def _replacing(self, full: str) -> Iterator[None]:
        """Drop pending errors at or below *full* unless the enclosed assignment fails there again.

        A path that fails again keeps its original position in the error order.
        """
        prefix = full + "."
        stale = [p for p in self._errors if p == full or p.startswith(prefix)]
        mark = len(self._failed)
        yield
        fresh = set(self._failed[mark:])
        for path in stale:
            if path not in fresh:
                self._errors.pop(path, None)


# ################
# Implementation
# ################

_FAILED = object()
