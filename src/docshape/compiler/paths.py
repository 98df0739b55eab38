# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiled path records: schema paths, virtual paths, and the path table."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from docshape.model.tokens import TypeToken
from docshape.types.registry import SchemaType
from docshape.validation.validators import Validator, is_required

if TYPE_CHECKING:
    from docshape.compiler.schema import Schema

# ###############
# Public Interface
# ###############

# Getters and setters receive (value, document) and return the transformed value.
Transform = Callable[[Any, Any], Any]

INDEX_DIRECTIVES: frozenset[str] = frozenset({"index", "unique", "sparse", "expires"})


@dataclass(frozen=True)
class SchemaPath:
    """One declared, persisted path.

    Attributes:
        path: Dotted path relative to the owning schema.
        token: Resolved type token.
        schema_type: Registry entry used to cast values; ``None`` for embedded sub-documents.
        directives: Raw directives from the declaration (``required``, ``default``, ``index``, ...).
        validators: Compiled validators in execution order.
        getters: Presentation transforms, applied in registration order.
        setters: Input transforms applied before casting, in registration order.
        element: For primitive arrays, the path describing one element.
        sub_schema: For embedded sub-documents and document arrays, the child schema.
    """

    path: str
    token: str
    schema_type: SchemaType | None = None
    directives: Mapping[str, Any] = field(default_factory=dict)
    validators: tuple[Validator, ...] = ()
    getters: tuple[Transform, ...] = ()
    setters: tuple[Transform, ...] = ()
    element: SchemaPath | None = None
    sub_schema: Schema | None = None

    @property
    def is_array(self) -> bool:
        return self.token == TypeToken.ARRAY

    @property
    def is_embedded(self) -> bool:
        return self.token == TypeToken.EMBEDDED

    @property
    def is_document_array(self) -> bool:
        return self.is_array and self.sub_schema is not None

    @property
    def has_default(self) -> bool:
        return "default" in self.directives

    @property
    def has_index_directive(self) -> bool:
        return any(self.directives.get(name) for name in INDEX_DIRECTIVES)

    def default_value(self) -> Any:
        """Return a fresh default; callables are invoked as deferred suppliers."""
        default = self.directives.get("default")
        if callable(default):
            return default()
        return copy.deepcopy(default)

    def is_required(self, document: Any) -> bool:
        return is_required(self.directives.get("required", False), document)

    def apply_getters(self, value: Any, document: Any) -> Any:
        for getter in self.getters:
            value = getter(value, document)
        return value

    def apply_setters(self, value: Any, document: Any) -> Any:
        for setter in self.setters:
            value = setter(value, document)
        return value


class VirtualPath:
    """A computed, never-persisted property with getter and setter chains.

    ``get`` and ``set`` register functions and return the virtual, so calls chain::

        schema.virtual("full_name").get(lambda _, doc: ...).set(lambda v, doc: ...)
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self.getters: list[Transform] = []
        self.setters: list[Transform] = []

    def get(self, fn: Transform) -> VirtualPath:
        self.getters.append(fn)
        return self

    def set(self, fn: Transform) -> VirtualPath:
        self.setters.append(fn)
        return self

    def apply_getters(self, document: Any) -> Any:
        """Run the getter chain; the first getter receives ``None``."""
        value = None
        for getter in self.getters:
            value = getter(value, document)
        return value

    def apply_setters(self, value: Any, document: Any) -> None:
        """Run the setter chain; each setter receives the previous setter's result."""
        for setter in self.setters:
            value = setter(value, document)

    def __repr__(self) -> str:
        return f"VirtualPath({self.path!r})"


@dataclass(frozen=True)
class PathTable:
    """Immutable result of compiling a schema declaration.

    Attributes:
        paths: Leaf paths in declaration order.
        nested: Paths of plain nested objects (``meta`` for ``meta.votes``), parents first.
    """

    paths: Mapping[str, SchemaPath] = field(default_factory=lambda: MappingProxyType({}))
    nested: tuple[str, ...] = ()

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def get(self, path: str) -> SchemaPath | None:
        return self.paths.get(path)

    def is_nested(self, path: str) -> bool:
        return path in self.nested

    def children_of(self, nested_path: str) -> list[str]:
        """Return the direct child field names of a nested object path."""
        prefix = nested_path + "."
        names: dict[str, None] = {}
        for path in (*self.nested, *self.paths):
            if path.startswith(prefix):
                names[path[len(prefix) :].split(".", 1)[0]] = None
        return list(names)

    def resolve(self, path: str) -> tuple[SchemaPath, list[str]] | None:
        """Find the longest declared leaf prefix of *path*.

        Returns:
            The leaf and the remaining segments below it (array indices and
            sub-document fields), or ``None`` if no prefix is declared.
        """
        segments = path.split(".")
        for end in range(len(segments), 0, -1):
            schema_path = self.paths.get(".".join(segments[:end]))
            if schema_path is not None:
                return schema_path, segments[end:]
        return None
