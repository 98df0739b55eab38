# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema compiler: declaration classification and the immutable path table."""

from docshape.compiler.declaration import DeclarationNode, NestedDeclaration, TypeDeclaration, classify
from docshape.compiler.paths import INDEX_DIRECTIVES, PathTable, SchemaPath, Transform, VirtualPath
from docshape.compiler.schema import Schema

__all__ = [
    "Schema",
    # Path table
    "PathTable",
    "SchemaPath",
    "VirtualPath",
    "Transform",
    "INDEX_DIRECTIVES",
    # Declarations
    "DeclarationNode",
    "NestedDeclaration",
    "TypeDeclaration",
    "classify",
]
