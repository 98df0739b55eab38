# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type registry: declared type tokens and their caster/validator pairs."""

from docshape.types.registry import Caster, Checker, SchemaType, TypeRegistry

__all__ = [
    "Caster",
    "Checker",
    "SchemaType",
    "TypeRegistry",
]
