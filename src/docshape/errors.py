# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Error taxonomy for schema compilation, casting, validation, and persistence."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docshape.model.indexes import IndexDirective

# ###############
# Public Interface
# ###############


class DocShapeError(Exception):
    """Base class for every error raised by the mapping engine."""


class SchemaError(DocShapeError):
    """Raised when a schema declaration or option record is invalid."""


class CastError(DocShapeError):
    """A raw value could not be coerced to the type declared for its path.

    Attributes:
        path: Dotted path the value was assigned to.
        expected: Type token the value was cast to.
        value: The offending raw value.
        reason: The underlying exception raised by the caster, if any.
    """

    def __init__(self, path: str, expected: str, value: Any, reason: Exception | None = None) -> None:
        super().__init__(
            f"Cast to {expected} failed for value {value!r} (type {type(value).__name__}) at path \"{path}\""
        )
        self.path = path
        self.expected = expected
        self.value = value
        self.reason = reason

    def with_path(self, path: str) -> CastError:
        """Return a copy of this error re-addressed to *path*."""
        return CastError(path, self.expected, self.value, self.reason)


class ValidatorError(DocShapeError):
    """A single validation rule failed for one path.

    Attributes:
        path: Dotted path that failed validation.
        kind: Rule name (``required``, ``min``, ``enum``, ``user defined``, ...).
        message: Rendered, human-readable message.
        value: The value that was validated.
    """

    def __init__(self, path: str, kind: str, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind
        self.message = message
        self.value = value


class ValidationError(DocShapeError):
    """Aggregate of per-path failures; one entry per invalid path.

    Attributes:
        errors: Ordered mapping from path to the first failure recorded for it.
    """

    def __init__(self, errors: Mapping[str, CastError | ValidatorError]) -> None:
        self.errors: dict[str, CastError | ValidatorError] = dict(errors)
        details = ", ".join(f"{path}: {err}" for path, err in self.errors.items())
        super().__init__(f"Validation failed: {details}" if details else "Validation failed")


class UnknownPathError(DocShapeError):
    """Raised when a path outside the schema is assigned under strict ``"throw"``."""

    def __init__(self, path: str) -> None:
        super().__init__(f'Path "{path}" is not in schema and strict mode is set to throw.')
        self.path = path


class VersionConflictError(DocShapeError):
    """The stored revision no longer matches the revision the document was read at."""

    def __init__(self, document_id: Any, version: int, modified_paths: Iterable[str]) -> None:
        self.document_id = document_id
        self.version = version
        self.modified_paths = list(modified_paths)
        super().__init__(
            f'No matching document found for id "{document_id}" version {version} '
            f'modifiedPaths "{", ".join(self.modified_paths)}"'
        )


class DocumentNotFoundError(DocShapeError):
    """An unversioned update matched no stored document."""

    def __init__(self, document_id: Any) -> None:
        super().__init__(f'No document found for id "{document_id}"')
        self.document_id = document_id


class IndexBuildError(DocShapeError):
    """The external build step failed to create one index directive."""

    def __init__(self, directive: IndexDirective, cause: Exception) -> None:
        super().__init__(f"Failed to build index {dict(directive.keys)!r}: {cause}")
        self.directive = directive
        self.cause = cause
