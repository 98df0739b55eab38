# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema compiler.

Walks a nested declaration depth-first and produces an immutable
:class:`~docshape.compiler.paths.PathTable`. A :class:`Schema` owns the table
together with its options, virtuals, and schema-level index calls; adding
fields or changing options compiles a new table rather than editing the old one.

Declaration forms accepted for a field::

    {"name": str}                                   # leaf by type
    {"name": {"type": str, "required": True}}       # explicit type record
    {"meta": {"votes": int}}                        # nested object
    {"tags": [str]}                                 # array of a sub-type
    {"comments": [{"body": str}]}                   # array of sub-documents
    {"child": child_schema}                         # single embedded sub-document
    {"extra": {}} / {"extra": []}                   # untyped (Mixed) value / array
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from bson import ObjectId

from docshape.compiler.declaration import DeclarationNode, NestedDeclaration, TypeDeclaration, classify, expand_dotted
from docshape.compiler.paths import PathTable, SchemaPath, Transform, VirtualPath
from docshape.errors import SchemaError
from docshape.model.indexes import IndexDirective, IndexOptions
from docshape.model.options import SchemaOptions, option_field_name, parse_options
from docshape.model.tokens import TypeToken
from docshape.types.registry import TypeRegistry
from docshape.validation.validators import build_validators

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


class Schema:
    """A compiled document shape.

    Args:
        definition: The field declaration mapping.
        options: A :class:`SchemaOptions` record or a mapping of option names
            (camelCase aliases accepted).
        registry: Type registry used to resolve tokens; a fresh default
            registry when omitted.
        root: Whether this schema describes top-level documents. Only root
            schemas receive an implicit ``_id``, the revision field, and timestamps.

    Raises:
        SchemaError: If the declaration or options are invalid.
    """

    def __init__(
        self,
        definition: Mapping[str, Any] | None = None,
        options: SchemaOptions | Mapping[str, Any] | None = None,
        *,
        registry: TypeRegistry | None = None,
        root: bool = True,
    ) -> None:
        self._options = parse_options(options)
        self._registry = registry or TypeRegistry.default()
        self._root = root
        self._definitions: list[Mapping[str, Any]] = [definition] if definition else []
        self._virtuals: dict[str, VirtualPath] = {}
        self._indexes: list[IndexDirective] = []
        self._table = self._compile(self._definitions, self._options)

    # ------------------------------------------------------------------
    # Compiled state
    # ------------------------------------------------------------------

    @property
    def options(self) -> SchemaOptions:
        return self._options

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def is_root(self) -> bool:
        return self._root

    @property
    def table(self) -> PathTable:
        return self._table

    @property
    def paths(self) -> Mapping[str, SchemaPath]:
        return self._table.paths

    @property
    def virtuals(self) -> Mapping[str, VirtualPath]:
        """Virtual paths, including the built-in ``id`` getter when enabled."""
        result: dict[str, VirtualPath] = {}
        if self._options.id and "_id" in self._table and "id" not in self._table and "id" not in self._virtuals:
            result["id"] = VirtualPath("id").get(_id_getter)
        result.update(self._virtuals)
        return MappingProxyType(result)

    @property
    def schema_indexes(self) -> tuple[IndexDirective, ...]:
        """Indexes declared through :meth:`index`, in call order."""
        return tuple(self._indexes)

    def path(self, path: str) -> SchemaPath | None:
        """Look up a declared path, descending into sub-schemas and array elements."""
        found = self._table.get(path)
        if found is not None:
            return found
        resolved = self._table.resolve(path)
        if resolved is None:
            return None
        schema_path, rest = resolved
        tail = [segment for segment in rest if not segment.isdigit()]
        if schema_path.sub_schema is not None and tail:
            return schema_path.sub_schema.path(".".join(tail))
        if not tail and schema_path.element is not None:
            return schema_path.element
        return None

    def path_type(self, path: str) -> str:
        """Classify *path* as ``"real"``, ``"virtual"``, ``"nested"``, or ``"adhoc"``."""
        if self.path(path) is not None:
            return "real"
        if path in self.virtuals:
            return "virtual"
        if self._table.is_nested(path):
            return "nested"
        return "adhoc"

    # ------------------------------------------------------------------
    # Mutation (each produces a new path table)
    # ------------------------------------------------------------------

    def add(self, definition: Mapping[str, Any], prefix: str | None = None) -> Schema:
        """Add fields; later declarations of an existing path win.

        Raises:
            SchemaError: If the fields are invalid or collide with a virtual.
        """
        if prefix:
            definition = {f"{prefix}.{key}": value for key, value in definition.items()}
        definitions = [*self._definitions, definition]
        table = self._compile(definitions, self._options)
        self._definitions = definitions
        self._table = table
        return self

    def set(self, option: str, value: Any) -> Schema:
        """Change one schema option and recompile every declaration under it.

        Raises:
            SchemaError: If the option is unknown or the recompiled schema is invalid.
        """
        options = self._options.with_option(option, value)
        table = self._compile(self._definitions, options)
        self._options = options
        self._table = table
        return self

    def get(self, option: str) -> Any:
        """Return the current value of a schema option."""
        return getattr(self._options, option_field_name(option))

    def virtual(self, name: str) -> VirtualPath:
        """Return the virtual *name*, creating it on first use.

        Raises:
            SchemaError: If *name* is already a declared path.
        """
        if name in self._table or self._table.is_nested(name):
            raise SchemaError(f"Virtual path '{name}' conflicts with a declared path")
        if name not in self._virtuals:
            self._virtuals[name] = VirtualPath(name)
        return self._virtuals[name]

    def index(self, keys: Mapping[str, int | str], **options: Any) -> Schema:
        """Declare a schema-level (typically compound) index.

        Raises:
            SchemaError: If *keys* is empty or holds an invalid direction.
        """
        if not keys:
            raise SchemaError("An index needs at least one key")
        for path, direction in keys.items():
            if not isinstance(direction, str) and direction not in (1, -1):
                raise SchemaError(f"Invalid index direction {direction!r} for '{path}'")
        self._indexes.append(IndexDirective(keys=dict(keys), options=IndexOptions.model_validate(options)))
        return self

    def as_child(self) -> Schema:
        """Return a non-root copy for use as an embedded or array sub-schema."""
        if not self._root:
            return self
        child = Schema(options=self._options.child_options(), registry=self._registry, root=False)
        child._definitions = list(self._definitions)
        child._virtuals = dict(self._virtuals)
        child._indexes = list(self._indexes)
        child._table = child._compile(child._definitions, child._options)
        return child

    def __repr__(self) -> str:
        return f"Schema(paths={list(self._table.paths)!r})"

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def _compile(self, definitions: list[Mapping[str, Any]], options: SchemaOptions) -> PathTable:
        compiler = _Compiler(options, self._registry, self._root)
        for definition in definitions:
            compiler.walk(definition)
        table = compiler.finish()
        for name in self._virtuals:
            if name in table or table.is_nested(name):
                raise SchemaError(f"Path '{name}' is already declared as a virtual")
        logger.debug("Compiled schema: %d paths, %d nested objects", len(table), len(table.nested))
        return table


# ################
# Implementation
# ################


def _id_getter(value: Any, document: Any) -> str | None:
    identifier = document.get("_id")
    return None if identifier is None else str(identifier)


def _as_transforms(spec: Any) -> list[Transform]:
    if spec is None:
        return []
    if isinstance(spec, (list, tuple)):
        return list(spec)
    if not callable(spec):
        raise SchemaError(f"Getters and setters must be callable, got {spec!r}")
    return [spec]


def _string_transform(fn: Callable[[str], str]) -> Transform:
    return lambda value, _doc: fn(value) if isinstance(value, str) else value


_STRING_SETTERS: dict[str, Transform] = {
    "trim": _string_transform(str.strip),
    "lowercase": _string_transform(str.lower),
    "uppercase": _string_transform(str.upper),
}


class _Compiler:
    """Depth-first walk of one or more declarations into a path table."""

    def __init__(self, options: SchemaOptions, registry: TypeRegistry, root: bool) -> None:
        self._options = options
        self._registry = registry
        self._root = root
        self._paths: dict[str, SchemaPath] = {}
        self._nested: dict[str, None] = {}
        self._suppress_id = False

    def walk(self, definition: Mapping[str, Any]) -> None:
        type_key = self._options.type_key
        for key, raw in expand_dotted(definition).items():
            if self._root and key == "_id":
                if raw is False:
                    self._suppress_id = True
                    continue
                if isinstance(raw, Mapping) and type_key not in raw:
                    self._add(key, TypeDeclaration(TypeToken.OBJECT_ID, dict(raw)))
                    continue
            self._add(key, classify(raw, type_key))

    def finish(self) -> PathTable:
        paths = self._paths
        if self._root:
            paths = self._with_root_fields(paths)
        return PathTable(paths=MappingProxyType(paths), nested=tuple(self._nested))

    def _add(self, path: str, node: DeclarationNode) -> None:
        if isinstance(node, NestedDeclaration):
            self._paths.pop(path, None)
            self._nested[path] = None
            for name, child in node.children.items():
                self._add(f"{path}.{name}", child)
            return
        prefix = path + "."
        for stale in [p for p in self._paths if p.startswith(prefix)]:
            del self._paths[stale]
        for stale in [p for p in self._nested if p == path or p.startswith(prefix)]:
            del self._nested[stale]
        self._paths[path] = self._build(path, node)

    def _build(self, path: str, node: TypeDeclaration) -> SchemaPath:
        directives = dict(node.directives)
        if node.is_array:
            return self._build_array(path, node, directives)
        declared = node.type_value
        if isinstance(declared, NestedDeclaration):
            return self._leaf(path, TypeToken.EMBEDDED, directives, sub_schema=self._child(declared.source))
        if isinstance(declared, Schema):
            return self._leaf(path, TypeToken.EMBEDDED, directives, sub_schema=declared.as_child())
        schema_type = self._resolve(path, declared)
        if schema_type.token == TypeToken.ARRAY:
            return self._build_array(path, TypeDeclaration(TypeToken.ARRAY), directives)
        if self._root and path == "_id" and schema_type.token == TypeToken.OBJECT_ID:
            directives.setdefault("default", ObjectId)
        return self._leaf(path, schema_type.token, directives)

    def _build_array(self, path: str, node: TypeDeclaration, directives: dict[str, Any]) -> SchemaPath:
        element = node.element
        if element is None:
            return self._leaf(path, TypeToken.ARRAY, directives, element=self._leaf(f"{path}.$", TypeToken.MIXED, {}))
        if isinstance(element, NestedDeclaration):
            return self._leaf(path, TypeToken.ARRAY, directives, sub_schema=self._child(element.source))
        if isinstance(element.type_value, NestedDeclaration):
            return self._leaf(path, TypeToken.ARRAY, directives, sub_schema=self._child(element.type_value.source))
        if isinstance(element.type_value, Schema):
            return self._leaf(path, TypeToken.ARRAY, directives, sub_schema=element.type_value.as_child())
        return self._leaf(path, TypeToken.ARRAY, directives, element=self._build(f"{path}.$", element))

    def _leaf(
        self,
        path: str,
        token: str,
        directives: dict[str, Any],
        *,
        element: SchemaPath | None = None,
        sub_schema: Schema | None = None,
    ) -> SchemaPath:
        token = str(token)
        schema_type = None if token == TypeToken.EMBEDDED else self._registry.resolve(token)
        setters = [_STRING_SETTERS[name] for name in _STRING_SETTERS if directives.get(name)]
        setters.extend(_as_transforms(directives.get("set")))
        return SchemaPath(
            path=path,
            token=token,
            schema_type=schema_type,
            directives=MappingProxyType(directives),
            validators=build_validators(token, directives, schema_type),
            getters=tuple(_as_transforms(directives.get("get"))),
            setters=tuple(setters),
            element=element,
            sub_schema=sub_schema,
        )

    def _resolve(self, path: str, declared: Any) -> Any:
        try:
            return self._registry.resolve(declared)
        except SchemaError:
            raise SchemaError(
                f"Invalid schema configuration: {declared!r} is not a valid type at path '{path}'"
            ) from None

    def _child(self, source: Mapping[str, Any]) -> Schema:
        return Schema(source, self._options.child_options(), registry=self._registry, root=False)

    def _with_root_fields(self, paths: dict[str, SchemaPath]) -> dict[str, SchemaPath]:
        """Inject the identifier, revision, and timestamp fields of a root schema."""
        result: dict[str, SchemaPath] = {}
        if "_id" in paths:
            result["_id"] = paths["_id"]
        elif self._options.auto_id and not self._suppress_id:
            result["_id"] = self._leaf("_id", TypeToken.OBJECT_ID, {"default": ObjectId})
        result.update((path, schema_path) for path, schema_path in paths.items() if path != "_id")
        extra: list[tuple[str | None, TypeToken]] = [
            (self._options.version_key_name, TypeToken.NUMBER),
            (self._options.created_at_key, TypeToken.DATE),
            (self._options.updated_at_key, TypeToken.DATE),
        ]
        for name, token in extra:
            if name and name not in result:
                result[name] = self._leaf(name, token, {})
        return result
