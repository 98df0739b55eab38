# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""The validation pass over a document's stored state.

Runs after assignment: pending cast errors are reported first, then every
declared path is checked in declaration order, descending into embedded
sub-documents, document arrays, and primitive array elements. Only the first
failing rule of each path is recorded, and a path whose value already failed
to cast is not validated again.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from docshape.errors import CastError, ValidationError, ValidatorError
from docshape.model.dotted import get_path

if TYPE_CHECKING:
    from docshape.compiler.paths import SchemaPath
    from docshape.compiler.schema import Schema
    from docshape.document.document import Document

# ###############
# Public Interface
# ###############

PathError = CastError | ValidatorError


def collect_errors(document: Document, paths: Iterable[str] | None = None) -> dict[str, PathError]:
    """Return every pending cast error and validation failure, keyed by path.

    Args:
        document: The document to check.
        paths: When given, only these paths (and paths below them) are checked.
    """
    errors: dict[str, PathError] = {err.path: err for err in document.cast_errors}
    selected = None if paths is None else list(paths)
    errors = {path: err for path, err in errors.items() if _selected(path, selected)}
    _Pass(document, errors, selected).run(document.schema, document.data, "")
    return errors


def validate_document(document: Document, paths: Iterable[str] | None = None) -> None:
    """Run the validation pass.

    Raises:
        ValidationError: If any path has a pending cast error or a failing rule.
    """
    errors = collect_errors(document, paths)
    if errors:
        raise ValidationError(errors)


# ################
# Implementation
# ################


def _selected(path: str, selected: list[str] | None) -> bool:
    if selected is None:
        return True
    return any(path == want or path.startswith(want + ".") or want.startswith(path + ".") for want in selected)


class _Pass:
    def __init__(self, document: Document, errors: dict[str, PathError], selected: list[str] | None) -> None:
        self._document = document
        self._errors = errors
        self._selected = selected
        self._blocked = set(errors)

    def run(self, schema: Schema, container: Any, prefix: str) -> None:
        for path, schema_path in schema.paths.items():
            full = prefix + path
            if full in self._blocked or not _selected(full, self._selected):
                continue
            value = get_path(container, path)
            # A value with a failed cast below it keeps its previous contents.
            if not self._blocked_below(full):
                self._check(schema_path, value, full)
            if full in self._errors:
                continue
            if schema_path.sub_schema is not None and schema_path.is_embedded and isinstance(value, dict):
                self.run(schema_path.sub_schema, value, full + ".")
            elif schema_path.sub_schema is not None and isinstance(value, list):
                for index, item in enumerate(value):
                    if isinstance(item, dict):
                        self.run(schema_path.sub_schema, item, f"{full}.{index}.")
            elif schema_path.element is not None and isinstance(value, list):
                for index, item in enumerate(value):
                    item_full = f"{full}.{index}"
                    if item_full not in self._blocked:
                        self._check(schema_path.element, item, item_full)

    def _check(self, schema_path: SchemaPath, value: Any, full: str) -> None:
        for validator in schema_path.validators:
            failure = validator.run(full, value, self._document)
            if failure is not None:
                self._errors[full] = failure
                return

    def _blocked_below(self, full: str) -> bool:
        prefix = full + "."
        return any(blocked.startswith(prefix) for blocked in self._blocked)
