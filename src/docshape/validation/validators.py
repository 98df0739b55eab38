# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Built-in and user-defined path validators.

Validators are compiled once per schema path from its directives. Each one is
a predicate over ``(value, document)``; message templates may reference
``{PATH}`` and ``{VALUE}``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from docshape.errors import SchemaError, ValidatorError
from docshape.model.tokens import TypeToken
from docshape.types.registry import SchemaType

# ###############
# Public Interface
# ###############

Check = Callable[[Any, Any], bool]


@dataclass(frozen=True)
class Validator:
    """One validation rule attached to a schema path.

    Attributes:
        kind: Rule name reported in :class:`ValidatorError`.
        check: Predicate over ``(value, document)``.
        message: Message template.
        on_missing: Whether the rule also runs when the value is ``None``.
    """

    kind: str
    check: Check
    message: str
    on_missing: bool = False

    def run(self, path: str, value: Any, document: Any) -> ValidatorError | None:
        """Apply the rule; return the failure or ``None`` when it passes.

        A check may also signal failure by raising ``ValueError`` or
        ``TypeError``; the exception text becomes the message.
        """
        if value is None and not self.on_missing:
            return None
        try:
            passed = self.check(value, document)
        except (ValueError, TypeError) as exc:
            return ValidatorError(path, self.kind, str(exc), value)
        if passed:
            return None
        return ValidatorError(path, self.kind, _render(self.message, path, value), value)


def build_validators(
    token: str,
    directives: Mapping[str, Any],
    schema_type: SchemaType | None = None,
) -> tuple[Validator, ...]:
    """Compile the validators declared for one path.

    ``required`` always runs first, then the registry's type check, then every
    other rule in declaration order.

    Raises:
        SchemaError: If a directive has an unusable value.
    """
    validators: list[Validator] = []
    if directives.get("required"):
        validators.append(_required(token, directives["required"]))
    if schema_type is not None and token != TypeToken.MIXED:
        validators.append(
            Validator("type", lambda v, _doc: schema_type.validate(v), f"Path `{{PATH}}` is not a valid {token}.")
        )
    for name, spec in directives.items():
        factory = _FACTORIES.get(name)
        if factory is not None and spec is not None:
            validators.extend(factory(spec))
    return tuple(validators)


def is_required(directive: Any, document: Any) -> bool:
    """Evaluate a ``required`` directive, which may be a callable of the document."""
    flag, _ = _split_message(directive, None)
    return bool(flag(document) if callable(flag) else flag)


# ################
# Implementation
# ################


def _render(template: str, path: str, value: Any) -> str:
    return template.replace("{PATH}", path).replace("{VALUE}", str(value))


def _split_message(spec: Any, default: str | None) -> tuple[Any, str | None]:
    """Split a ``(value, message)`` directive into its parts."""
    if isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[1], str):
        return spec[0], spec[1]
    return spec, default


def _required(token: str, spec: Any) -> Validator:
    _, message = _split_message(spec, "Path `{PATH}` is required.")

    def check(value: Any, document: Any) -> bool:
        if not is_required(spec, document):
            return True
        if value is None:
            return False
        return not (token == TypeToken.STRING and value == "")

    return Validator("required", check, message or "", on_missing=True)


def _min(spec: Any) -> list[Validator]:
    bound, message = _split_message(spec, f"Path `{{PATH}}` ({{VALUE}}) is less than minimum allowed value ({spec}).")
    return [Validator("min", lambda v, _doc: v >= bound, message or "")]


def _max(spec: Any) -> list[Validator]:
    bound, message = _split_message(spec, f"Path `{{PATH}}` ({{VALUE}}) is more than maximum allowed value ({spec}).")
    return [Validator("max", lambda v, _doc: v <= bound, message or "")]


def _enum(spec: Any) -> list[Validator]:
    message = "`{VALUE}` is not a valid enum value for path `{PATH}`."
    if isinstance(spec, Mapping):
        message = spec.get("message", message)
        spec = spec.get("values", ())
    allowed = list(spec)

    def check(value: Any, _doc: Any) -> bool:
        if isinstance(value, list):
            return all(item in allowed for item in value)
        return value in allowed

    return [Validator("enum", check, message)]


def _match(spec: Any) -> list[Validator]:
    pattern, message = _split_message(spec, "Path `{PATH}` is invalid ({VALUE}).")
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    return [Validator("regexp", lambda v, _doc: compiled.search(v) is not None, message or "")]


def _minlength(spec: Any) -> list[Validator]:
    bound, message = _split_message(
        spec, f"Path `{{PATH}}` (`{{VALUE}}`) is shorter than the minimum allowed length ({spec})."
    )
    return [Validator("minlength", lambda v, _doc: len(v) >= bound, message or "")]


def _maxlength(spec: Any) -> list[Validator]:
    bound, message = _split_message(
        spec, f"Path `{{PATH}}` (`{{VALUE}}`) is longer than the maximum allowed length ({spec})."
    )
    return [Validator("maxlength", lambda v, _doc: len(v) <= bound, message or "")]


def _custom(spec: Any) -> list[Validator]:
    default_message = "Validator failed for path `{PATH}` with value `{VALUE}`"
    if isinstance(spec, list):
        return [validator for item in spec for validator in _custom(item)]
    if isinstance(spec, Mapping):
        fn = spec.get("validator")
        message = spec.get("message", default_message)
        kind = spec.get("type", "user defined")
    else:
        fn, message = _split_message(spec, default_message)
        kind = "user defined"
    if not callable(fn):
        raise SchemaError(f"Custom validator must be callable, got {fn!r}")
    return [Validator(kind, fn, message or default_message)]


_FACTORIES: dict[str, Callable[[Any], list[Validator]]] = {
    "min": _min,
    "max": _max,
    "enum": _enum,
    "match": _match,
    "minlength": _minlength,
    "maxlength": _maxlength,
    "validate": _custom,
}
