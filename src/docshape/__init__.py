# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema-driven document mapping: compile, cast, validate, project, version, and index."""

import logging

from docshape.compiler import Schema, SchemaPath, VirtualPath
from docshape.config import SchemaConfigError, load_schema_options
from docshape.document import Document, ProjectionMode, project
from docshape.errors import (
    CastError,
    DocShapeError,
    DocumentNotFoundError,
    IndexBuildError,
    SchemaError,
    UnknownPathError,
    ValidationError,
    ValidatorError,
    VersionConflictError,
)
from docshape.indexes import IndexBuild, IndexBuildResult, collect_indexes
from docshape.model import ExportOptions, IndexDirective, IndexOptions, SchemaOptions, TypeToken
from docshape.persistence import DocumentStore, MemoryStore, Model
from docshape.types import TypeRegistry
from docshape.versioning import VersionState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Schemas
    "Schema",
    "SchemaOptions",
    "SchemaPath",
    "TypeRegistry",
    "TypeToken",
    "VirtualPath",
    "load_schema_options",
    # Documents
    "Document",
    "ExportOptions",
    "ProjectionMode",
    "VersionState",
    "project",
    # Persistence and indexes
    "DocumentStore",
    "IndexBuild",
    "IndexBuildResult",
    "IndexDirective",
    "IndexOptions",
    "MemoryStore",
    "Model",
    "collect_indexes",
    # Errors
    "CastError",
    "DocShapeError",
    "DocumentNotFoundError",
    "IndexBuildError",
    "SchemaConfigError",
    "SchemaError",
    "UnknownPathError",
    "ValidationError",
    "ValidatorError",
    "VersionConflictError",
]
