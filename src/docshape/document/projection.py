# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Projection of document instances into externally visible forms.

Three modes exist: the internal-mutation view (the live stored state), the
object export (plain Python values), and the serialization export (values
that ``json.dumps`` accepts). Both exports apply, in order: schema getters,
version-key removal, minimization of empty objects, and virtuals. Each
export mode reads its defaults from its own schema-level record (``toObject``
or ``toJSON``), overridable per call.
"""

from __future__ import annotations

import base64
import copy
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from bson import ObjectId

from docshape.model.dotted import get_path, has_path, set_path
from docshape.model.options import ExportOptions, SchemaOptions

if TYPE_CHECKING:
    from docshape.compiler.schema import Schema
    from docshape.document.document import Document

# ###############
# Public Interface
# ###############


class ProjectionMode(Enum):
    """Which form a document is projected into."""

    INTERNAL = "internal"
    OBJECT = "object"
    JSON = "json"


def resolve_export_options(
    schema_options: SchemaOptions,
    mode: ProjectionMode,
    overrides: ExportOptions | Mapping[str, Any] | None = None,
) -> ExportOptions:
    """Combine defaults, the schema's record for *mode*, and per-call overrides."""
    record = schema_options.to_json if mode is ProjectionMode.JSON else schema_options.to_object
    options = ExportOptions().overlay(record)
    if overrides:
        if not isinstance(overrides, ExportOptions):
            overrides = ExportOptions.model_validate(dict(overrides))
        options = options.overlay(overrides)
    if options.minimize is None:
        options = options.model_copy(update={"minimize": schema_options.minimize})
    return options


def project(
    document: Document,
    mode: ProjectionMode = ProjectionMode.OBJECT,
    options: ExportOptions | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Project *document* into the form selected by *mode*.

    The internal view is the document's live state and must not be mutated by
    callers that do not own the document; exports are deep copies.
    """
    if mode is ProjectionMode.INTERNAL:
        return document.data
    schema = document.schema
    resolved = resolve_export_options(schema.options, mode, options)
    result = copy.deepcopy(document.data)
    if resolved.getters:
        _apply_getters(result, schema, document)
    version_key = schema.options.version_key_name
    if not resolved.version_key and version_key:
        result.pop(version_key, None)
    if resolved.minimize:
        result = minimize(result)
    if resolved.virtuals:
        for name, virtual in schema.virtuals.items():
            set_path(result, name, virtual.apply_getters(document))
    if mode is ProjectionMode.JSON:
        return to_json_compatible(result)
    return result


def minimize(value: dict[str, Any]) -> dict[str, Any]:
    """Drop every key whose value is (recursively) an empty dict; lists keep their items."""
    result: dict[str, Any] = {}
    for key, item in value.items():
        pruned = _minimize_value(item)
        if isinstance(pruned, dict) and not pruned:
            continue
        result[key] = pruned
    return result


def to_json_compatible(value: Any) -> Any:
    """Convert identifiers, timestamps, and binary data into JSON-friendly values."""
    if isinstance(value, Mapping):
        return {str(key): to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_compatible(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return value


# ################
# Implementation
# ################


def _minimize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return minimize(value)
    if isinstance(value, list):
        return [_minimize_value(item) for item in value]
    return value


def _apply_getters(container: dict[str, Any], schema: Schema, document: Document) -> None:
    """Apply getter chains in place, descending into sub-documents."""
    for path, schema_path in schema.paths.items():
        if not has_path(container, path):
            continue
        value = get_path(container, path)
        sub_schema = schema_path.sub_schema
        if sub_schema is not None and schema_path.is_embedded and isinstance(value, dict):
            _apply_getters(value, sub_schema, document)
        elif sub_schema is not None and isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    _apply_getters(item, sub_schema, document)
        elif schema_path.element is not None and schema_path.element.getters and isinstance(value, list):
            value = [schema_path.element.apply_getters(item, document) for item in value]
        if schema_path.getters:
            value = schema_path.apply_getters(value, document)
        set_path(container, path, value)
