# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Index declaration collector.

Materializes the index directives a schema declares, in stable order:
field-level directives first (in path declaration order, sub-schemas expanded
in place with their paths prefixed), then every schema-level ``index()`` call,
sub-schema calls included. Performs no I/O.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from docshape.compiler.paths import SchemaPath
from docshape.compiler.schema import Schema
from docshape.errors import SchemaError
from docshape.model.indexes import IndexDirective, IndexKey, IndexOptions

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class IndexCollector:
    """Collects the index directives of one (root) schema.

    Args:
        schema: The compiled schema to read.
    """

    def __init__(self, schema: Schema) -> None:
        self._schema = schema

    def collect(self) -> list[IndexDirective]:
        """Return every declared index directive in declaration order.

        Raises:
            SchemaError: If an index directive has an unusable value.
        """
        fields: list[IndexDirective] = []
        schema_level: list[IndexDirective] = []
        self._collect(self._schema, "", fields, schema_level)
        directives = fields + schema_level
        logger.debug("Collected %d index directives", len(directives))
        return directives

    def _collect(
        self,
        schema: Schema,
        prefix: str,
        fields: list[IndexDirective],
        schema_level: list[IndexDirective],
    ) -> None:
        for path, schema_path in schema.paths.items():
            full = prefix + path
            if schema_path.sub_schema is not None:
                self._collect(schema_path.sub_schema, full + ".", fields, schema_level)
            field = _field_directive(full, schema_path)
            if field is not None:
                fields.append(field)
            elif schema_path.element is not None:
                element = _field_directive(full, schema_path.element)
                if element is not None:
                    fields.append(element)
        for directive in schema.schema_indexes:
            keys = {prefix + key: direction for key, direction in directive.keys.items()}
            options = directive.options
            if options.background is None:
                options = options.model_copy(update={"background": True})
            schema_level.append(IndexDirective(keys=keys, options=options))


def collect_indexes(schema: Schema) -> list[IndexDirective]:
    """Shorthand for ``IndexCollector(schema).collect()``."""
    return IndexCollector(schema).collect()


def parse_expires(value: Any) -> int:
    """Convert an ``expires`` directive into whole seconds.

    Accepts a number of seconds, a ``timedelta``, or a string such as
    ``"90"``, ``"30s"``, ``"15m"``, ``"2h"`` or ``"7d"``.

    Raises:
        SchemaError: If *value* cannot be read as a duration.
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        match = _DURATION.fullmatch(value.strip().lower())
        if match is not None:
            amount, unit = match.groups()
            return int(float(amount) * _UNIT_SECONDS[unit or "s"])
    raise SchemaError(f"Invalid expires value {value!r}")


# ################
# Implementation
# ################

_DURATION = re.compile(r"(\d+(?:\.\d+)?)\s*(ms|s|m|h|d|w)?")

_UNIT_SECONDS: dict[str, float] = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}


def _field_directive(path: str, schema_path: SchemaPath) -> IndexDirective | None:
    """Build the directive for one path from its ``index``/``unique``/``sparse``/``expires``."""
    if not schema_path.has_index_directive:
        return None
    directives = schema_path.directives
    key: IndexKey = 1
    options: dict[str, Any] = {}
    index = directives.get("index")
    if isinstance(index, Mapping):
        options.update(index)
    elif isinstance(index, str):
        key = index
    elif index == -1 and not isinstance(index, bool):
        key = -1
    for flag in ("unique", "sparse"):
        if directives.get(flag):
            options[flag] = True
    if directives.get("expires") is not None:
        options["expireAfterSeconds"] = parse_expires(directives["expires"])
    options.setdefault("background", True)
    return IndexDirective(keys={path: key}, options=IndexOptions.model_validate(options))
