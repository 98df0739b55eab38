# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Schema option files."""

from docshape.config.loader import SchemaConfigError, load_schema_options, parse_schema_options

__all__ = [
    "SchemaConfigError",
    "load_schema_options",
    "parse_schema_options",
]
