# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type registry mapping declared type tokens to caster and validator pairs.

Casting is lossy-safe: numeric strings become numbers, ISO-like strings become
timestamps, and inputs that cannot be converted raise :class:`CastError`
carrying the path, the expected token, and the raw value.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from docshape.errors import CastError, SchemaError
from docshape.model.tokens import TypeToken

# ###############
# Public Interface
# ###############

Caster = Callable[[Any], Any]
Checker = Callable[[Any], bool]


@dataclass(frozen=True)
class SchemaType:
    """A registered type: how to coerce raw input and how to check a cast value.

    Attributes:
        token: Canonical token name (e.g. ``"Number"``).
        caster: Coerces a raw value, raising ``ValueError`` or ``TypeError`` on failure.
        checker: Returns True if an already-cast value is acceptable.
    """

    token: str
    caster: Caster
    checker: Checker

    def cast(self, value: Any, path: str = "") -> Any:
        """Coerce *value*; ``None`` passes through untouched.

        Raises:
            CastError: If the caster rejects the value.
        """
        if value is None:
            return None
        try:
            return self.caster(value)
        except (ValueError, TypeError, OverflowError, InvalidId) as exc:
            raise CastError(path, self.token, value, exc) from exc

    def validate(self, value: Any) -> bool:
        """Return True if *value* is ``None`` or satisfies the type check."""
        return value is None or self.checker(value)


class TypeRegistry:
    """Resolves declared type tokens to :class:`SchemaType` instances.

    Tokens may be given as :class:`TypeToken` members, case-insensitive names,
    or Python types registered as aliases (``str``, ``int``, ``ObjectId``, ...).
    """

    def __init__(self) -> None:
        self._types: dict[str, SchemaType] = {}
        self._aliases: dict[Hashable, str] = {}

    @classmethod
    def default(cls) -> TypeRegistry:
        """Return a fresh registry holding the built-in tokens."""
        registry = cls()
        for token, caster, checker, aliases in _BUILTINS:
            registry.register(token, caster, checker, aliases=aliases)
        return registry

    def register(
        self,
        token: str,
        caster: Caster,
        checker: Checker | None = None,
        *,
        aliases: Iterable[Hashable] = (),
    ) -> SchemaType:
        """Register (or replace) a type token.

        Args:
            token: Canonical name of the new token.
            caster: Coercion function for raw values.
            checker: Type check for cast values; accepts everything when omitted.
            aliases: Extra names or Python types that resolve to this token.

        Returns:
            The registered :class:`SchemaType`.
        """
        name = str(token.value if isinstance(token, TypeToken) else token)
        schema_type = SchemaType(token=name, caster=caster, checker=checker or _accept_any)
        self._types[name] = schema_type
        self._aliases[name.lower()] = name
        for alias in aliases:
            self._aliases[alias.lower() if isinstance(alias, str) else alias] = name
        return schema_type

    def resolve(self, declared: Any) -> SchemaType:
        """Return the :class:`SchemaType` for a declared token.

        Raises:
            SchemaError: If the token is not registered.
        """
        name = self._lookup(declared)
        if name is None:
            raise SchemaError(f"Unknown type token {declared!r}")
        return self._types[name]

    def __contains__(self, declared: object) -> bool:
        return self._lookup(declared) is not None

    def tokens(self) -> list[str]:
        """Return the canonical names of all registered tokens."""
        return list(self._types)

    def _lookup(self, declared: Any) -> str | None:
        if isinstance(declared, TypeToken):
            declared = declared.value
        if isinstance(declared, str):
            return self._aliases.get(declared.lower())
        if not isinstance(declared, Hashable):
            return None
        return self._aliases.get(declared)


# ################
# Implementation
# ################


def _accept_any(value: Any) -> bool:
    return True


def _cast_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal, ObjectId)):
        return str(value)
    raise TypeError(f"cannot cast {type(value).__name__} to a string")


def _cast_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            number = float(text)
    else:
        raise TypeError(f"cannot cast {type(value).__name__} to a number")
    if math.isnan(number):
        raise ValueError("NaN is not a number")
    return number


def _cast_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool):
        raise TypeError("cannot cast a boolean to a date")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromtimestamp(float(text) / 1000, tz=timezone.utc)
        except ValueError:
            pass
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    raise TypeError(f"cannot cast {type(value).__name__} to a date")


def _cast_buffer(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (list, tuple)):
        return bytes(value)
    raise TypeError(f"cannot cast {type(value).__name__} to a buffer")


_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    raise ValueError(f"{value!r} is not a boolean")


def _cast_mixed(value: Any) -> Any:
    return value


def _cast_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, Mapping) and "_id" in value:
        return _cast_object_id(value["_id"])
    if isinstance(value, (str, bytes)):
        return ObjectId(value)
    raise TypeError(f"cannot cast {type(value).__name__} to an ObjectId")


def _cast_array(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_BUILTINS: list[tuple[TypeToken, Caster, Checker, tuple[Hashable, ...]]] = [
    (TypeToken.STRING, _cast_string, lambda v: isinstance(v, str), (str,)),
    (TypeToken.NUMBER, _cast_number, _is_number, (int, float, Decimal)),
    (TypeToken.DATE, _cast_date, lambda v: isinstance(v, datetime), (datetime, date)),
    (TypeToken.BUFFER, _cast_buffer, lambda v: isinstance(v, bytes), (bytes, bytearray)),
    (TypeToken.BOOLEAN, _cast_boolean, lambda v: isinstance(v, bool), (bool, "bool")),
    (TypeToken.MIXED, _cast_mixed, _accept_any, (object, dict, Any)),
    (TypeToken.OBJECT_ID, _cast_object_id, lambda v: isinstance(v, ObjectId), (ObjectId,)),
    (TypeToken.ARRAY, _cast_array, lambda v: isinstance(v, list), (list, tuple)),
]
