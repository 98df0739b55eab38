# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the type registry and the built-in casters."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from bson import ObjectId

from docshape.errors import CastError, SchemaError
from docshape.model.tokens import TypeToken
from docshape.types import TypeRegistry

# ###############
# Test Helpers
# ###############


def _cast(token: object, value: object) -> object:
    return TypeRegistry.default().resolve(token).cast(value, "field")


# ###############
# Token Resolution
# ###############


class TestResolve:
    @pytest.mark.parametrize(
        ("declared", "expected"),
        [
            (str, "String"),
            (int, "Number"),
            (float, "Number"),
            (Decimal, "Number"),
            (datetime, "Date"),
            (date, "Date"),
            (bytes, "Buffer"),
            (bool, "Boolean"),
            (object, "Mixed"),
            (dict, "Mixed"),
            (ObjectId, "ObjectId"),
            (list, "Array"),
            (TypeToken.STRING, "String"),
            ("string", "String"),
            ("NUMBER", "Number"),
            ("objectid", "ObjectId"),
            ("Mixed", "Mixed"),
        ],
    )
    def test_builtin_tokens(self, declared: object, expected: str) -> None:
        assert TypeRegistry.default().resolve(declared).token == expected

    def test_unknown_token_raises(self) -> None:
        with pytest.raises(SchemaError, match="Unknown type token"):
            TypeRegistry.default().resolve("Decimal128")

    def test_unhashable_token_is_not_contained(self) -> None:
        assert [str] not in TypeRegistry.default()

    def test_default_registries_are_independent(self) -> None:
        first = TypeRegistry.default()
        first.register("Email", str)
        assert "Email" in first
        assert "Email" not in TypeRegistry.default()


class TestRegister:
    def test_custom_token_with_aliases(self) -> None:
        registry = TypeRegistry.default()
        registry.register("Upper", lambda v: str(v).upper(), lambda v: v.isupper(), aliases=("shout",))

        schema_type = registry.resolve("SHOUT")
        assert schema_type.token == "Upper"
        assert schema_type.cast("abc", "x") == "ABC"
        assert schema_type.validate("ABC")
        assert not schema_type.validate("abc")

    def test_checker_defaults_to_accept_everything(self) -> None:
        registry = TypeRegistry.default()
        schema_type = registry.register("Anything", lambda v: v)
        assert schema_type.validate(object())

    def test_tokens_lists_builtins_in_order(self) -> None:
        assert TypeRegistry.default().tokens() == [
            "String",
            "Number",
            "Date",
            "Buffer",
            "Boolean",
            "Mixed",
            "ObjectId",
            "Array",
        ]


# ###############
# Built-in Casters
# ###############


class TestStringCaster:
    def test_numbers_become_text(self) -> None:
        assert _cast(str, 42) == "42"
        assert _cast(str, 1.5) == "1.5"

    def test_booleans_become_lowercase_words(self) -> None:
        assert _cast(str, True) == "true"

    def test_object_id_becomes_hex(self) -> None:
        oid = ObjectId()
        assert _cast(str, oid) == str(oid)

    def test_mapping_fails(self) -> None:
        with pytest.raises(CastError) as exc_info:
            _cast(str, {"a": 1})
        assert exc_info.value.path == "field"
        assert exc_info.value.expected == "String"
        assert exc_info.value.value == {"a": 1}


class TestNumberCaster:
    def test_numeric_strings(self) -> None:
        assert _cast(int, "42") == 42
        assert _cast(int, " 3.5 ") == 3.5

    def test_empty_string_is_none(self) -> None:
        assert _cast(int, "") is None

    def test_booleans_become_integers(self) -> None:
        assert _cast(int, True) == 1

    def test_decimal_becomes_float(self) -> None:
        assert _cast(float, Decimal("2.5")) == 2.5

    @pytest.mark.parametrize("value", ["abc", "nan", [1], {"n": 1}])
    def test_non_numeric_fails(self, value: object) -> None:
        with pytest.raises(CastError, match='Cast to Number failed .* at path "field"'):
            _cast(int, value)


class TestDateCaster:
    def test_iso_string_with_zulu_suffix(self) -> None:
        assert _cast(datetime, "2024-03-01T12:30:00Z") == datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)

    def test_epoch_milliseconds(self) -> None:
        assert _cast(datetime, 0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
        assert _cast(datetime, "1000") == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)

    def test_date_becomes_midnight(self) -> None:
        assert _cast(date, date(2024, 1, 2)) == datetime(2024, 1, 2)

    def test_garbage_fails(self) -> None:
        with pytest.raises(CastError):
            _cast(datetime, "not a date")

    def test_boolean_fails(self) -> None:
        with pytest.raises(CastError):
            _cast(datetime, True)


class TestOtherCasters:
    def test_buffer_from_text_and_ints(self) -> None:
        assert _cast(bytes, "hi") == b"hi"
        assert _cast(bytes, [104, 105]) == b"hi"

    @pytest.mark.parametrize(("value", "expected"), [("yes", True), ("0", False), (1, True), ("OFF", False)])
    def test_boolean_words(self, value: object, expected: bool) -> None:
        assert _cast(bool, value) is expected

    def test_boolean_rejects_other_numbers(self) -> None:
        with pytest.raises(CastError):
            _cast(bool, 2)

    def test_object_id_from_hex_and_document(self) -> None:
        oid = ObjectId()
        assert _cast(ObjectId, str(oid)) == oid
        assert _cast(ObjectId, {"_id": oid}) == oid

    def test_object_id_rejects_short_hex(self) -> None:
        with pytest.raises(CastError, match="ObjectId"):
            _cast(ObjectId, "abc")

    def test_mixed_is_identity(self) -> None:
        value = {"any": ["thing"]}
        assert _cast(object, value) is value

    def test_array_wraps_scalars(self) -> None:
        assert _cast(list, 3) == [3]
        assert _cast(list, (1, 2)) == [1, 2]

    def test_none_passes_through(self) -> None:
        assert _cast(int, None) is None
