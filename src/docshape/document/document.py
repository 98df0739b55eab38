# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Mutable document instances bound to a compiled schema."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from docshape.compiler.schema import Schema
from docshape.document.projection import ProjectionMode, project
from docshape.document.resolver import Assigner, StrictMode, build_skeleton
from docshape.errors import CastError, ValidationError
from docshape.model.dotted import get_path
from docshape.validation.runner import collect_errors, validate_document
from docshape.versioning.controller import VersioningController, VersionState

# ###############
# Public Interface
# ###############


class Document:
    """A document instance: cast values, modification flags, and revision state.

    Args:
        schema: The compiled schema shared by every document of a model.
        data: Initial values, assigned as one batch.
        strict: Unknown-path policy overriding the schema's ``strict`` option.
        is_new: ``False`` when *data* was read from the store; values are then
            cast without running setters or marking paths modified.

    Raises:
        UnknownPathError: If *data* holds an undeclared path under strict ``"throw"``.
    """

    def __init__(
        self,
        schema: Schema,
        data: Mapping[str, Any] | None = None,
        *,
        strict: StrictMode | None = None,
        is_new: bool = True,
    ) -> None:
        self._schema = schema
        self._strict: StrictMode = schema.options.strict if strict is None else strict
        self._data: dict[str, Any] = build_skeleton(schema.table)
        self._modified: dict[str, None] = {}
        self._cast_errors: dict[str, CastError] = {}
        self._versioning = VersioningController(schema.options)
        self.is_new = is_new
        self.version_state = VersionState.UNVERSIONED
        self.revision_stored = False

        # Stored documents keep fields the schema no longer declares.
        assigner = Assigner(
            self,
            strict=self._strict if is_new else False,
            errors=self._cast_errors,
            init=not is_new,
        )
        for path, value in (data or {}).items():
            assigner.assign(self._data, schema, path, value)
        assigner.apply_defaults(self._data, schema)
        self._versioning.initialize(self)

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def strict(self) -> StrictMode:
        return self._strict

    @property
    def data(self) -> dict[str, Any]:
        """The live stored state (the internal-mutation view)."""
        return self._data

    @property
    def id(self) -> str | None:
        """String form of ``_id``; ``None`` when the ``id`` option is disabled.

        A schema that declares its own ``id`` path exposes that value instead.
        """
        if not self._schema.options.id:
            return None
        virtual = self._schema.virtuals.get("id")
        if virtual is not None:
            return virtual.apply_getters(self)
        value = self.get("id")
        return None if value is None else str(value)

    @property
    def versioning(self) -> VersioningController:
        return self._versioning

    @property
    def revision(self) -> int | None:
        """Current revision number, or ``None`` when versioning is disabled."""
        key = self._schema.options.version_key_name
        return None if key is None else self._data.get(key)

    def get(self, path: str, *, getters: bool = True) -> Any:
        """Return the value at *path*, applying getter chains unless disabled."""
        virtual = self._schema.virtuals.get(path)
        if virtual is not None:
            return virtual.apply_getters(self)
        value = get_path(self._data, path)
        schema_path = self._schema.path(path)
        if getters and schema_path is not None:
            value = schema_path.apply_getters(value, self)
        return value

    def set(
        self,
        path: str | Mapping[str, Any],
        value: Any = None,
        *,
        strict: StrictMode | None = None,
    ) -> Document:
        """Assign one path, or a mapping of paths as one batch.

        Cast failures do not raise; they are collected in :attr:`cast_errors`
        and surface when the document is validated or saved.

        Raises:
            UnknownPathError: If a path is undeclared and strict mode is ``"throw"``.
        """
        items = path.items() if isinstance(path, Mapping) else [(path, value)]
        assigner = Assigner(self, strict=self._strict if strict is None else strict, errors=self._cast_errors)
        for key, item in items:
            assigner.assign(self._data, self._schema, key, item)
        return self

    def __getitem__(self, path: str) -> Any:
        return self.get(path)

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    # ------------------------------------------------------------------
    # Modification state
    # ------------------------------------------------------------------

    @property
    def cast_errors(self) -> tuple[CastError, ...]:
        """Pending cast failures in first-seen order."""
        return tuple(self._cast_errors.values())

    def is_modified(self, path: str | None = None) -> bool:
        """Return True if *path* (or any path, when omitted) changed since load or last save."""
        if path is None:
            return bool(self._modified)
        return any(
            modified == path or modified.startswith(path + ".") or path.startswith(modified + ".")
            for modified in self._modified
        )

    def modified_paths(self) -> list[str]:
        return list(self._modified)

    def mark_modified(self, path: str, *, versioned: bool = True) -> None:
        """Flag *path* as changed; unless *versioned* is False this may bump the revision."""
        self._modified[path] = None
        if versioned:
            self._versioning.on_mutation(self, path)

    def mark_saved(self) -> None:
        """Reset modification flags after a successful persist."""
        self._modified.clear()
        self.is_new = False

    # ------------------------------------------------------------------
    # Validation and projection
    # ------------------------------------------------------------------

    def validate(self, paths: Iterable[str] | None = None) -> None:
        """Run the validation pass.

        Raises:
            ValidationError: With one entry per invalid path, pending cast errors included.
        """
        validate_document(self, paths)

    def validation_errors(self, paths: Iterable[str] | None = None) -> ValidationError | None:
        """Like :meth:`validate`, but return the error instead of raising it."""
        errors = collect_errors(self, paths)
        return ValidationError(errors) if errors else None

    def to_object(self, **options: Any) -> dict[str, Any]:
        """Export as plain Python values; keyword options override the schema's ``toObject``."""
        return project(self, ProjectionMode.OBJECT, options)

    def to_json(self, **options: Any) -> dict[str, Any]:
        """Export as JSON-compatible values; keyword options override the schema's ``toJSON``."""
        return project(self, ProjectionMode.JSON, options)

    def to_stored(self) -> dict[str, Any]:
        """Return the persisted layout: no getters or virtuals, minimized per schema option."""
        return project(
            self,
            ProjectionMode.OBJECT,
            {"getters": False, "virtuals": False, "version_key": True, "minimize": self._schema.options.minimize},
        )

    def __repr__(self) -> str:
        return f"Document({self.to_object()!r})"
