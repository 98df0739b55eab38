# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Classification of raw schema declarations into tagged nodes.

A declaration node is either a :class:`TypeDeclaration` (a leaf with a type
and optional directives) or a :class:`NestedDeclaration` (a group of child
fields). The decision is made once, here, by looking for the configured type
key; nothing downstream inspects raw declarations again.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from docshape.errors import SchemaError
from docshape.model.tokens import TypeToken

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class TypeDeclaration:
    """A leaf declaration.

    Attributes:
        type_value: The declared type (a token, a Python type, a schema, or
            :attr:`TypeToken.ARRAY` for array forms).
        directives: Every key of an explicit type record other than the type key.
        element: Declaration of the repeated element for array forms; ``None``
            for an untyped array.
    """

    type_value: Any
    directives: Mapping[str, Any] = field(default_factory=dict)
    element: DeclarationNode | None = None
    kind: Literal["type"] = field(default="type", init=False)

    @property
    def is_array(self) -> bool:
        return self.type_value is TypeToken.ARRAY


@dataclass(frozen=True)
class NestedDeclaration:
    """A group of child fields declared without a type key.

    Attributes:
        children: Child nodes keyed by field name, in declaration order.
        source: The dotted-key-expanded raw declaration, used to build sub-schemas.
    """

    children: Mapping[str, DeclarationNode]
    source: Mapping[str, Any]
    kind: Literal["nested"] = field(default="nested", init=False)


DeclarationNode = TypeDeclaration | NestedDeclaration


def classify(value: Any, type_key: str) -> DeclarationNode:
    """Classify one raw declaration value.

    Args:
        value: The raw value declared for a field.
        type_key: Marker key that turns a mapping into an explicit type record.

    Returns:
        The tagged declaration node.

    Raises:
        SchemaError: If an array form declares more than one element.
    """
    if isinstance(value, Mapping):
        if not value:
            return TypeDeclaration(TypeToken.MIXED)
        if _is_type_record(value, type_key):
            directives = {k: v for k, v in value.items() if k != type_key}
            return _classify_type(value[type_key], directives, type_key)
        expanded = expand_dotted(value)
        return NestedDeclaration(
            children={name: classify(child, type_key) for name, child in expanded.items()},
            source=expanded,
        )
    return _classify_type(value, {}, type_key)


def expand_dotted(declaration: Mapping[str, Any]) -> dict[str, Any]:
    """Expand dotted keys (``{"a.b": x}``) into nested mappings.

    When a key is declared twice the later declaration wins.
    """
    result: dict[str, Any] = {}
    for key, value in declaration.items():
        if not isinstance(key, str):
            raise SchemaError(f"Schema field names must be strings, got {key!r}")
        head, _, rest = key.partition(".")
        if not rest:
            result[head] = value
            continue
        existing = result.get(head)
        merged = dict(existing) if isinstance(existing, Mapping) else {}
        merged[rest] = value
        result[head] = expand_dotted(merged)
    return result


# ################
# Implementation
# ################


def _is_type_record(value: Mapping[str, Any], type_key: str) -> bool:
    """Return True if *value* declares a type rather than child fields."""
    marker = value.get(type_key)
    if marker is None:
        return False
    # {"type": {"type": ...}} declares a child field literally named "type".
    return not (type_key == "type" and isinstance(marker, Mapping) and "type" in marker)


def _classify_type(type_value: Any, directives: dict[str, Any], type_key: str) -> TypeDeclaration:
    if isinstance(type_value, (list, tuple)):
        if len(type_value) > 1:
            raise SchemaError(f"Array declarations take a single element type, got {len(type_value)}")
        element = classify(type_value[0], type_key) if type_value else None
        return TypeDeclaration(TypeToken.ARRAY, directives, element)
    if isinstance(type_value, Mapping):
        if not type_value:
            return TypeDeclaration(TypeToken.MIXED, directives)
        inner = classify(type_value, type_key)
        if isinstance(inner, NestedDeclaration):
            return TypeDeclaration(inner, directives)
        return TypeDeclaration(inner.type_value, {**inner.directives, **directives}, inner.element)
    return TypeDeclaration(type_value, directives)
