# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Document instances: path resolution, casting, and projection."""

from docshape.document.document import Document
from docshape.document.projection import ProjectionMode, minimize, project, resolve_export_options
from docshape.document.resolver import Assigner, StrictMode

__all__ = [
    "Document",
    # Assignment
    "Assigner",
    "StrictMode",
    # Projection
    "ProjectionMode",
    "minimize",
    "project",
    "resolve_export_options",
]
