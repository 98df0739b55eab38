# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Plain data records and dotted-path helpers shared by every component."""

from docshape.model.dotted import get_path, has_path, set_path, unset_path
from docshape.model.indexes import IndexDirective, IndexKey, IndexOptions
from docshape.model.options import (
    CappedOption,
    ExportOptions,
    SchemaOptions,
    TimestampsOption,
    option_field_name,
    parse_options,
)
from docshape.model.tokens import TypeToken

__all__ = [
    # Type tokens
    "TypeToken",
    # Options
    "CappedOption",
    "ExportOptions",
    "SchemaOptions",
    "TimestampsOption",
    "option_field_name",
    "parse_options",
    # Indexes
    "IndexDirective",
    "IndexKey",
    "IndexOptions",
    # Dotted paths
    "get_path",
    "has_path",
    "set_path",
    "unset_path",
]
