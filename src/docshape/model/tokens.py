# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Built-in type tokens understood by the type registry and the compiler."""

from enum import Enum

# ###############
# Public Interface
# ###############


class TypeToken(str, Enum):
    """Type tokens a schema path can be declared with."""

    STRING = "String"
    NUMBER = "Number"
    DATE = "Date"
    BUFFER = "Buffer"
    BOOLEAN = "Boolean"
    MIXED = "Mixed"
    OBJECT_ID = "ObjectId"
    ARRAY = "Array"
    # Single embedded sub-document; resolved by the compiler, not the registry.
    EMBEDDED = "Embedded"

    def __str__(self) -> str:
        return self.value
