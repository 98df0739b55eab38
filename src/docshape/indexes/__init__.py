# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Index declaration collection and the sequential index build."""

from docshape.indexes.build import IndexBuild, IndexBuildResult
from docshape.indexes.collector import IndexCollector, collect_indexes, parse_expires

__all__ = [
    # Collection
    "IndexCollector",
    "collect_indexes",
    "parse_expires",
    # Build
    "IndexBuild",
    "IndexBuildResult",
]
