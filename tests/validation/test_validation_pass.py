# Copyright 2026 DocShape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for the document validation pass."""

import pytest

from docshape.compiler import Schema
from docshape.document import Document
from docshape.errors import CastError, ValidationError, ValidatorError
from docshape.validation import collect_errors

# ###############
# Test Helpers
# ###############


def _order_schema() -> Schema:
    return Schema(
        {
            "customer": {"type": str, "required": True},
            "age": {"type": int, "min": 18, "validate": lambda v, _doc: v % 2 == 0},
            "contact": {"type": str, "enum": ["email", "phone"]},
            "email": {"type": str, "required": lambda doc: doc["contact"] == "email"},
            "lines": [{"sku": {"type": str, "required": True}, "qty": {"type": int, "min": 1}}],
            "scores": [{"type": int, "min": 0}],
            "shipping": Schema({"city": {"type": str, "required": True}}),
        }
    )


def _kinds(document: Document) -> dict[str, str]:
    return _kinds_for(document, None)


def _kinds_for(document: Document, paths: list[str] | None) -> dict[str, str]:
    """Map each failing path to its rule kind, or ``cast`` for a pending cast error."""
    return {
        path: error.kind if isinstance(error, ValidatorError) else "cast"
        for path, error in collect_errors(document, paths).items()
    }


# ###############
# Validation Pass
# ###############


class TestValidationPass:
    def test_valid_document(self) -> None:
        doc = Document(_order_schema(), {"customer": "Sam", "age": 30, "shipping": {"city": "Bree"}})
        doc.validate()
        assert collect_errors(doc) == {}

    def test_one_entry_per_invalid_path(self) -> None:
        doc = Document(_order_schema(), {"age": 16, "contact": "fax"})
        assert _kinds(doc) == {"customer": "required", "age": "min", "contact": "enum"}

    def test_first_failing_rule_is_reported(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "age": 19})
        assert _kinds(doc) == {"age": "user defined"}

    def test_conditional_required(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "contact": "email"})
        assert _kinds(doc) == {"email": "required"}

    def test_document_array_items(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "lines": [{"sku": "x", "qty": 1}, {"qty": 0}]})
        assert _kinds(doc) == {"lines.1.sku": "required", "lines.1.qty": "min"}

    def test_primitive_array_elements(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "scores": [3, -1, 2]})
        assert _kinds(doc) == {"scores.1": "min"}

    def test_embedded_subdocument(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "shipping": {}})
        assert _kinds(doc) == {"shipping.city": "required"}

    def test_cast_errors_are_reported_first_and_block_rules(self) -> None:
        doc = Document(_order_schema(), {"age": "old", "customer": None})
        errors = collect_errors(doc)
        assert list(errors) == ["age", "customer"]
        assert isinstance(errors["age"], CastError)

    def test_cast_error_inside_array_leaves_siblings_checked(self) -> None:
        doc = Document(_order_schema(), {"customer": "a", "lines": [{"sku": "x", "qty": "many"}], "age": 3})
        assert _kinds(doc) == {"lines.0.qty": "cast", "age": "min"}

    def test_selected_paths_only(self) -> None:
        doc = Document(_order_schema(), {"age": 16, "lines": [{"qty": 0}]})
        assert _kinds_for(doc, ["age"]) == {"age": "min"}
        assert _kinds_for(doc, ["lines"]) == {"lines.0.sku": "required", "lines.0.qty": "min"}

    def test_validate_raises_aggregate(self) -> None:
        doc = Document(_order_schema(), {"age": 16})
        with pytest.raises(ValidationError) as exc_info:
            doc.validate()
        assert list(exc_info.value.errors) == ["customer", "age"]
        assert str(exc_info.value) == (
            "Validation failed: customer: Path `customer` is required., "
            "age: Path `age` (16) is less than minimum allowed value (18)."
        )

    def test_virtual_setter_output_is_validated(self) -> None:
        schema = Schema({"first": {"type": str, "required": True}, "last": {"type": str, "minlength": 2}})
        schema.virtual("fullName").set(
            lambda value, doc: doc.set({"first": value.split(" ")[0], "last": value.split(" ")[1]})
        )
        doc = Document(schema, {"fullName": "Breaking B"})
        assert doc["first"] == "Breaking"
        assert _kinds(doc) == {"last": "minlength"}