# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""YAML loader for schema option files.

A schema option file is a YAML mapping of option names to values, using
either the camelCase names or the Python attribute names::

    collection: articles
    strict: throw
    versionKey: rev
    timestamps: true
    skipVersioning:
      - views
"""

from __future__ import annotations

from pathlib import Path

import yaml

from docshape.errors import DocShapeError, SchemaError
from docshape.model.options import SchemaOptions, parse_options

# ###############
# Public Interface
# ###############


class SchemaConfigError(DocShapeError):
    """Raised when a schema option file is invalid or cannot be loaded."""


def load_schema_options(path: Path) -> SchemaOptions:
    """Load and validate a schema option file.

    Args:
        path: Path to the YAML file.

    Returns:
        The validated options; defaults when the file is empty.

    Raises:
        SchemaConfigError: If the file cannot be read or holds invalid options.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SchemaConfigError(f"Schema option file not found: {path}") from None
    except OSError as exc:
        raise SchemaConfigError(f"Cannot read schema option file: {exc}") from exc

    return parse_schema_options(text, source_label=str(path))


def parse_schema_options(text: str, source_label: str = "<string>") -> SchemaOptions:
    """Parse schema option YAML text.

    Args:
        text: Raw YAML content.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        SchemaConfigError: If the YAML is invalid or an option is unknown or invalid.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise SchemaConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return SchemaOptions()
    if not isinstance(data, dict):
        raise SchemaConfigError(f"{source_label}: schema options must be a YAML mapping")

    try:
        return parse_options(data)
    except SchemaError as exc:
        raise SchemaConfigError(f"{source_label}: {exc}") from exc
